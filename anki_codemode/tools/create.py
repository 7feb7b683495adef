"""anki-create: add new cards and decks."""

from __future__ import annotations

from .base import OUTPUT_FOOTER, CodeTool

TOOL_DESCRIPTION = """Create new Anki cards and decks.

Scripts are Python: the body of an async function with `anki` and
`console` in scope. Use `await` on every `anki` call except prompts.

## Available APIs

### Decks
```python
await anki.decks.list()            # -> list[str] (existing decks)
await anki.decks.create(name)      # -> deck id (create new deck)
```

### Models (Note Types)
```python
await anki.models.list()           # -> list[str] (available note types)
await anki.models.get_fields(name) # -> list[str] (field names for a model)
```

### Notes (Cards)
```python
await anki.notes.add({"deckName": ..., "modelName": ..., "fields": {...}, "tags": [...]})  # -> note id
await anki.notes.add_many([...])   # -> list of note ids (batch add)
```

### Prompts
```python
anki.prompts.twenty_rules()        # -> card creation best practices
```

## Examples

**List decks and models:**
```python
decks = await anki.decks.list()
models = await anki.models.list()
console.log({"decks": decks, "models": models})
```

**Add a single card:**
```python
note_id = await anki.notes.add({
    "deckName": "Spanish",
    "modelName": "Basic",
    "fields": {"Front": "Hola", "Back": "Hello"},
    "tags": ["greeting"],
})
console.log({"created": note_id})
```

**Batch add cards:**
```python
vocab = [("perro", "dog"), ("gato", "cat")]
ids = await anki.notes.add_many([
    {"deckName": "Spanish", "modelName": "Basic", "fields": {"Front": f, "Back": b}}
    for f, b in vocab
])
console.log({"added": len(ids)})
```
""" + OUTPUT_FOOTER

TOOL = CodeTool(
    key="create",
    name="anki-create",
    description=TOOL_DESCRIPTION,
    layout={
        "decks": ("list", "create"),
        "models": ("list", "get_fields"),
        "notes": ("add", "add_many"),
        "prompts": ("twenty_rules",),
    },
)
