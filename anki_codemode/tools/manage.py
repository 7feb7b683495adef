"""anki-manage: inspect and edit existing cards, notes, decks and tags."""

from __future__ import annotations

from .base import OUTPUT_FOOTER, CodeTool

TOOL_DESCRIPTION = """Manage existing Anki cards, notes, and decks.

Scripts are Python: the body of an async function with `anki` and
`console` in scope. Use `await` on every `anki` call.

## Available APIs

### Decks
```python
await anki.decks.list_with_ids()   # -> {name: id}
await anki.decks.delete(name)      # deletes the deck and its cards
await anki.decks.get_config(name)  # -> deck options group
await anki.decks.get_stats(name)   # -> new/learn/review counts
```

### Cards
```python
await anki.cards.find(query)       # -> card ids (Anki search syntax)
await anki.cards.get_info(ids)     # -> list of card info
await anki.cards.get_due(deck_name=None)  # -> due cards (up to 100)
await anki.cards.suspend(ids)
await anki.cards.unsuspend(ids)
await anki.cards.are_due(ids)      # -> list[bool]
```

### Notes
```python
await anki.notes.find(query)               # -> note ids
await anki.notes.get_info(ids)             # -> list of note info
await anki.notes.update(note_id, fields)
await anki.notes.delete(ids)
await anki.notes.add_tags(ids, "tag1 tag2")
await anki.notes.remove_tags(ids, "tag1")
```

### Tags
```python
await anki.tags.list()                     # -> list[str]
await anki.tags.clear_unused()
await anki.tags.replace(ids, old, new)
```

## Examples

**Find and inspect notes:**
```python
note_ids = await anki.notes.find("deck:Spanish")
notes = await anki.notes.get_info(note_ids[:10])
[{"id": n["noteId"], "tags": n["tags"]} for n in notes]
```

**Suspend due cards:**
```python
card_ids = await anki.cards.find("deck:Spanish is:due")
await anki.cards.suspend(card_ids)
console.log({"suspended": len(card_ids)})
```
""" + OUTPUT_FOOTER

TOOL = CodeTool(
    key="manage",
    name="anki-manage",
    description=TOOL_DESCRIPTION,
    layout={
        "decks": ("list_with_ids", "delete", "get_config", "get_stats"),
        "cards": None,
        "notes": ("find", "get_info", "update", "delete", "add_tags", "remove_tags"),
        "tags": None,
    },
)
