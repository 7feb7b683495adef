"""
Capability object injected into scripts as ``anki``.

Each namespace (decks, cards, notes, ...) maps operation names to async
callables that forward to one or more AnkiConnect actions. Tools expose
a subset of the full object via `ApiNamespace.select`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .anki_connect import AnkiConnectClient, AnkiConnectError, ErrorKind
from .prompts import REVIEW_SESSION, TWENTY_RULES

logger = logging.getLogger(__name__)

# Max cards returned by cards.get_due
DUE_CARDS_LIMIT = 100
DEFAULT_REVIEW_DAYS = 30

# Substrings that mark guiCurrentCard's "nothing under review" error
NO_REVIEW_MARKERS = ("review", "card")


class ApiNamespace:
    """Read-only attribute view over a mapping of names to operations.

    Members are async callables, plain callables or nested namespaces.
    Unknown and underscore-prefixed names raise AttributeError.
    """

    def __init__(self, name: str, members: Mapping[str, Any]):
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_members", dict(members))

    def __getattr__(self, item: str) -> Any:
        if item.startswith("_"):
            raise AttributeError(item)
        try:
            return self._members[item]
        except KeyError:
            available = ", ".join(sorted(self._members)) or "none"
            raise AttributeError(
                f"{self._name} has no operation {item!r} (available: {available})"
            ) from None

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{self._name} is read-only")

    def __delattr__(self, item: str) -> None:
        raise AttributeError(f"{self._name} is read-only")

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._members))

    def __dir__(self) -> List[str]:
        return sorted(self._members)

    def __repr__(self) -> str:
        return f"<{self._name}: {', '.join(sorted(self._members))}>"

    def select(self, layout: Mapping[str, Optional[Sequence[str]]]) -> "ApiNamespace":
        """Return a view exposing only the members named in ``layout``.

        Args:
            layout: Member name to ``None`` (keep whole member) or a
                sequence of operation names to keep from a nested namespace.

        Raises:
            KeyError: If ``layout`` names a member that does not exist.
        """
        members: Dict[str, Any] = {}
        for name, operations in layout.items():
            member = self._members[name]
            if operations is None:
                members[name] = member
                continue
            members[name] = ApiNamespace(
                f"{self._name}.{name}",
                {op: member._members[op] for op in operations},
            )
        return ApiNamespace(self._name, members)


def _note_payload(note: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "deckName": note["deckName"],
        "modelName": note["modelName"],
        "fields": dict(note["fields"]),
        "tags": list(note.get("tags") or []),
        "options": dict(note.get("options") or {"allowDuplicate": False}),
    }


# ============================================================================
# Namespaces
# ============================================================================


def _decks(client: AnkiConnectClient) -> ApiNamespace:
    async def list_() -> List[str]:
        return await client.invoke("deckNames")

    async def list_with_ids() -> Dict[str, int]:
        return await client.invoke("deckNamesAndIds")

    async def create(name: str) -> int:
        return await client.invoke("createDeck", {"deck": name})

    async def delete(name: str) -> None:
        await client.invoke("deleteDecks", {"decks": [name], "cardsToo": True})

    async def get_config(name: str) -> Dict[str, Any]:
        return await client.invoke("getDeckConfig", {"deck": name})

    async def get_stats(name: str) -> Optional[Dict[str, Any]]:
        stats = await client.invoke("getDeckStats", {"decks": [name]})
        # getDeckStats keys by deck id; fall back to matching on the name field
        if name in stats:
            return stats[name]
        for entry in stats.values():
            if entry.get("name") == name:
                return entry
        return None

    return ApiNamespace(
        "anki.decks",
        {
            "list": list_,
            "list_with_ids": list_with_ids,
            "create": create,
            "delete": delete,
            "get_config": get_config,
            "get_stats": get_stats,
        },
    )


def _cards(client: AnkiConnectClient) -> ApiNamespace:
    async def find(query: str) -> List[int]:
        return await client.invoke("findCards", {"query": query})

    async def get_info(ids: Sequence[int]) -> List[Dict[str, Any]]:
        return await client.invoke("cardsInfo", {"cards": list(ids)})

    async def get_due(deck_name: Optional[str] = None) -> List[Dict[str, Any]]:
        query = f'deck:"{deck_name}" is:due' if deck_name else "is:due"
        ids = await client.invoke("findCards", {"query": query})
        if not ids:
            return []
        return await client.invoke("cardsInfo", {"cards": ids[:DUE_CARDS_LIMIT]})

    async def suspend(ids: Sequence[int]) -> None:
        await client.invoke("suspend", {"cards": list(ids)})

    async def unsuspend(ids: Sequence[int]) -> None:
        await client.invoke("unsuspend", {"cards": list(ids)})

    async def are_due(ids: Sequence[int]) -> List[bool]:
        return await client.invoke("areDue", {"cards": list(ids)})

    return ApiNamespace(
        "anki.cards",
        {
            "find": find,
            "get_info": get_info,
            "get_due": get_due,
            "suspend": suspend,
            "unsuspend": unsuspend,
            "are_due": are_due,
        },
    )


def _notes(client: AnkiConnectClient) -> ApiNamespace:
    async def find(query: str) -> List[int]:
        return await client.invoke("findNotes", {"query": query})

    async def get_info(ids: Sequence[int]) -> List[Dict[str, Any]]:
        return await client.invoke("notesInfo", {"notes": list(ids)})

    async def add(note: Mapping[str, Any]) -> int:
        return await client.invoke("addNote", {"note": _note_payload(note)})

    async def add_many(notes: Sequence[Mapping[str, Any]]) -> List[Optional[int]]:
        return await client.invoke("addNotes", {"notes": [_note_payload(n) for n in notes]})

    async def update(note_id: int, fields: Mapping[str, str]) -> None:
        await client.invoke("updateNoteFields", {"note": {"id": note_id, "fields": dict(fields)}})

    async def delete(ids: Sequence[int]) -> None:
        await client.invoke("deleteNotes", {"notes": list(ids)})

    async def add_tags(ids: Sequence[int], tags: str) -> None:
        await client.invoke("addTags", {"notes": list(ids), "tags": tags})

    async def remove_tags(ids: Sequence[int], tags: str) -> None:
        await client.invoke("removeTags", {"notes": list(ids), "tags": tags})

    return ApiNamespace(
        "anki.notes",
        {
            "find": find,
            "get_info": get_info,
            "add": add,
            "add_many": add_many,
            "update": update,
            "delete": delete,
            "add_tags": add_tags,
            "remove_tags": remove_tags,
        },
    )


def _models(client: AnkiConnectClient) -> ApiNamespace:
    async def list_() -> List[str]:
        return await client.invoke("modelNames")

    async def list_with_ids() -> Dict[str, int]:
        return await client.invoke("modelNamesAndIds")

    async def get_fields(name: str) -> List[str]:
        return await client.invoke("modelFieldNames", {"modelName": name})

    async def get_styling(name: str) -> Dict[str, str]:
        return await client.invoke("modelStyling", {"modelName": name})

    async def create(model: Mapping[str, Any]) -> None:
        await client.invoke("createModel", dict(model))

    async def update_styling(name: str, css: str) -> None:
        await client.invoke("updateModelStyling", {"model": {"name": name, "css": css}})

    return ApiNamespace(
        "anki.models",
        {
            "list": list_,
            "list_with_ids": list_with_ids,
            "get_fields": get_fields,
            "get_styling": get_styling,
            "create": create,
            "update_styling": update_styling,
        },
    )


def _tags(client: AnkiConnectClient) -> ApiNamespace:
    async def list_() -> List[str]:
        return await client.invoke("getTags")

    async def clear_unused() -> None:
        await client.invoke("clearUnusedTags")

    async def replace(ids: Sequence[int], old_tag: str, new_tag: str) -> None:
        await client.invoke(
            "replaceTags",
            {"notes": list(ids), "tag_to_replace": old_tag, "replace_with_tag": new_tag},
        )

    return ApiNamespace(
        "anki.tags",
        {"list": list_, "clear_unused": clear_unused, "replace": replace},
    )


def _media(client: AnkiConnectClient) -> ApiNamespace:
    async def store(filename: str, data: str) -> str:
        return await client.invoke("storeMediaFile", {"filename": filename, "data": data})

    async def retrieve(filename: str) -> str:
        return await client.invoke("retrieveMediaFile", {"filename": filename})

    async def list_(pattern: Optional[str] = None) -> List[str]:
        return await client.invoke("getMediaFilesNames", {"pattern": pattern or "*"})

    async def delete(filename: str) -> None:
        await client.invoke("deleteMediaFile", {"filename": filename})

    return ApiNamespace(
        "anki.media",
        {"store": store, "retrieve": retrieve, "list": list_, "delete": delete},
    )


def _stats(client: AnkiConnectClient) -> ApiNamespace:
    async def collection() -> Dict[str, int]:
        decks, notes, cards = await asyncio.gather(
            client.invoke("deckNames"),
            client.invoke("findNotes", {"query": "*"}),
            client.invoke("findCards", {"query": "*"}),
        )
        return {
            "deckCount": len(decks),
            "noteCount": len(notes),
            "cardCount": len(cards),
            "reviewCount": 0,  # not exposed by AnkiConnect
        }

    async def decks() -> Dict[str, Any]:
        names = await client.invoke("deckNames")
        return await client.invoke("getDeckStats", {"decks": names})

    async def reviews(days: int = DEFAULT_REVIEW_DAYS) -> Dict[str, int]:
        by_day = await client.invoke("getNumCardsReviewedByDay")
        recent = by_day[:days]
        return {
            "days": days,
            "reviews": sum(entry[1] for entry in recent),
            "time": 0,
            "failed": 0,
            "young": 0,
            "mature": 0,
        }

    return ApiNamespace(
        "anki.stats",
        {"collection": collection, "decks": decks, "reviews": reviews},
    )


def _prompts() -> ApiNamespace:
    def twenty_rules() -> str:
        return TWENTY_RULES

    def review_session() -> str:
        return REVIEW_SESSION

    return ApiNamespace(
        "anki.prompts",
        {"twenty_rules": twenty_rules, "review_session": review_session},
    )


def _gui(client: AnkiConnectClient) -> ApiNamespace:
    async def browse(query: str) -> List[int]:
        return await client.invoke("guiBrowse", {"query": query})

    async def current_card() -> Optional[Dict[str, Any]]:
        try:
            return await client.invoke("guiCurrentCard")
        except AnkiConnectError as e:
            # Nothing under review is reported as an error string, not a kind.
            if e.kind is ErrorKind.REMOTE and any(m in e.message for m in NO_REVIEW_MARKERS):
                logger.debug("guiCurrentCard: no active review (%s)", e.message)
                return None
            raise

    async def show_question() -> None:
        await client.invoke("guiShowQuestion")

    async def show_answer() -> None:
        await client.invoke("guiShowAnswer")

    async def answer_card(ease: int) -> None:
        if ease not in (1, 2, 3, 4):
            raise ValueError(f"ease must be 1 (Again), 2 (Hard), 3 (Good) or 4 (Easy), got {ease!r}")
        await client.invoke("guiAnswerCard", {"ease": ease})

    async def deck_browser() -> None:
        await client.invoke("guiDeckBrowser")

    async def deck_overview(name: str) -> None:
        await client.invoke("guiDeckOverview", {"name": name})

    async def add_cards() -> None:
        await client.invoke("guiAddCards")

    async def edit_note(note_id: int) -> None:
        await client.invoke("guiEditNote", {"note": note_id})

    async def select_card(card_id: int) -> bool:
        return await client.invoke("guiSelectCard", {"card": card_id})

    async def selected_notes() -> List[int]:
        return await client.invoke("guiSelectedNotes")

    async def undo() -> str:
        return await client.invoke("guiUndo")

    return ApiNamespace(
        "anki.gui",
        {
            "browse": browse,
            "current_card": current_card,
            "show_question": show_question,
            "show_answer": show_answer,
            "answer_card": answer_card,
            "deck_browser": deck_browser,
            "deck_overview": deck_overview,
            "add_cards": add_cards,
            "edit_note": edit_note,
            "select_card": select_card,
            "selected_notes": selected_notes,
            "undo": undo,
        },
    )


def build_anki_api(client: AnkiConnectClient) -> ApiNamespace:
    """Build the full capability object backed by ``client``."""

    async def sync() -> None:
        await client.invoke("sync")

    return ApiNamespace(
        "anki",
        {
            "decks": _decks(client),
            "cards": _cards(client),
            "notes": _notes(client),
            "models": _models(client),
            "tags": _tags(client),
            "media": _media(client),
            "stats": _stats(client),
            "prompts": _prompts(),
            "gui": _gui(client),
            "sync": sync,
        },
    )


__all__ = ["ApiNamespace", "build_anki_api"]
