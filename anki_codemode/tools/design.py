"""anki-design: note types, templates, media and collection statistics."""

from __future__ import annotations

from .base import OUTPUT_FOOTER, CodeTool

TOOL_DESCRIPTION = """Customize Anki note types, templates, and media.

Scripts are Python: the body of an async function with `anki` and
`console` in scope. Use `await` on every `anki` call.

## Available APIs

### Models (Note Types)
```python
await anki.models.list()               # -> list[str]
await anki.models.list_with_ids()      # -> {name: id}
await anki.models.get_fields(name)     # -> list[str]
await anki.models.get_styling(name)    # -> {"css": ...}
await anki.models.create({"modelName": ..., "inOrderFields": [...], "cardTemplates": [...], "css": ...})
await anki.models.update_styling(name, css)
```

### Media
```python
await anki.media.store(filename, base64_data)  # -> stored name
await anki.media.retrieve(filename)            # -> base64 data
await anki.media.list(pattern=None)            # -> list[str]
await anki.media.delete(filename)
```

### Stats
```python
await anki.stats.collection()      # -> deck/note/card counts
await anki.stats.decks()           # -> per-deck stats
await anki.stats.reviews(days=30)  # -> reviews over the last N days
```

## Examples

**Create a custom note type:**
```python
await anki.models.create({
    "modelName": "Vocabulary",
    "inOrderFields": ["Word", "Definition", "Example"],
    "cardTemplates": [{
        "Name": "Card 1",
        "Front": "{{Word}}",
        "Back": "{{Definition}}<br><br><i>{{Example}}</i>",
    }],
    "css": ".card { font-family: Georgia; font-size: 20px; }",
})
console.log("Model created")
```

**Get collection stats:**
```python
stats = await anki.stats.collection()
reviews = await anki.stats.reviews(7)
console.log(stats, f"Last 7 days: {reviews['reviews']} reviews")
```
""" + OUTPUT_FOOTER

TOOL = CodeTool(
    key="design",
    name="anki-design",
    description=TOOL_DESCRIPTION,
    layout={
        "models": None,
        "media": None,
        "stats": None,
    },
)
