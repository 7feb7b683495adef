"""anki-review: drive Anki's review screen for assisted study sessions."""

from __future__ import annotations

from .base import OUTPUT_FOOTER, CodeTool

TOOL_DESCRIPTION = """Control Anki's review interface for AI-assisted study sessions.

Scripts are Python: the body of an async function with `anki` and
`console` in scope. Use `await` on every `anki` call except prompts.

## Available APIs

### GUI Control
```python
await anki.gui.browse(query)       # open the browser -> card ids
await anki.gui.current_card()      # card under review, or None
await anki.gui.show_question()
await anki.gui.show_answer()
await anki.gui.answer_card(ease)   # 1=Again 2=Hard 3=Good 4=Easy
await anki.gui.deck_browser()
await anki.gui.deck_overview(name)
await anki.gui.add_cards()         # open the Add Cards dialog
await anki.gui.edit_note(note_id)
await anki.gui.select_card(card_id)  # -> bool
await anki.gui.selected_notes()    # -> note ids of the selection
await anki.gui.undo()              # -> description of the undone action
```

### Sync
```python
await anki.sync()                  # sync with AnkiWeb
```

### Prompts
```python
anki.prompts.review_session()      # -> review session guidelines
```

## Examples

**Get the card under review:**
```python
card = await anki.gui.current_card()
if card:
    console.log({"question": card["question"], "deck": card["deckName"]})
else:
    console.log("No card being reviewed")
```

**Answer a card:**
```python
await anki.gui.show_answer()
await anki.gui.answer_card(3)
"Answered"
```
""" + OUTPUT_FOOTER

TOOL = CodeTool(
    key="review",
    name="anki-review",
    description=TOOL_DESCRIPTION,
    layout={
        "gui": None,
        "prompts": ("review_session",),
        "sync": None,
    },
)
