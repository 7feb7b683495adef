"""Tests for script execution and result formatting in anki_codemode/sandbox.py."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from anki_codemode.anki_connect import AnkiConnectRemoteError
from anki_codemode.api import build_anki_api
from anki_codemode.sandbox import (
    SandboxConsole,
    SandboxResult,
    ScriptRejected,
    compile_script,
    execute_sandbox,
    format_sandbox_result,
)

pytestmark = pytest.mark.anyio


@pytest.fixture
def api():
    """A mock capability object with a few async operations."""
    return SimpleNamespace(
        decks=SimpleNamespace(
            list=AsyncMock(return_value=["Deck1", "Deck2"]),
            create=AsyncMock(return_value=1),
        ),
        notes=SimpleNamespace(add=AsyncMock(return_value=123)),
        gui=SimpleNamespace(current_card=AsyncMock(return_value=None)),
    )


# ---------------------------------------------------------------------------
# Output capture
# ---------------------------------------------------------------------------


async def test_captures_console_log(api):
    result = await execute_sandbox('console.log("hello")', api)
    assert result.success is True
    assert result.output == ["hello"]
    assert result.error is None


async def test_captures_multiple_logs_in_order(api):
    code = """
console.log("one")
console.log("two")
console.log({"three": 3})
"""
    result = await execute_sandbox(code, api)
    assert result.success is True
    assert result.output == ["one", "two", {"three": 3}]


async def test_captures_return_value(api):
    result = await execute_sandbox("return 42", api)
    assert result.success is True
    assert result.output == [42]


async def test_trailing_expression_is_completion_value(api):
    result = await execute_sandbox("x = 20\nx + 22", api)
    assert result.output == [42]


async def test_trailing_none_expression_is_not_recorded(api):
    result = await execute_sandbox('console.log("only")', api)
    assert result.output == ["only"]


async def test_explicit_return_none_is_recorded(api):
    result = await execute_sandbox('console.log("only")\nreturn None', api)
    assert result.output == ["only", None]


async def test_running_off_the_end_records_nothing(api):
    result = await execute_sandbox("x = 1\nif x:\n    y = 2", api)
    assert result.success is True
    assert result.output == []


async def test_returned_null_from_capability_is_recorded(api):
    result = await execute_sandbox("return await anki.gui.current_card()", api)
    assert result.success is True
    assert result.output == [None]
    assert format_sandbox_result(result) == "null"


async def test_no_active_review_returns_null(anki_client, fake_anki):
    fake_anki.errors = {"guiCurrentCard": "Gui review is not currently active."}
    result = await execute_sandbox("return await anki.gui.current_card()", build_anki_api(anki_client))
    assert result.success is True
    assert result.output == [None]
    assert fake_anki.actions == ["guiCurrentCard"]


async def test_bare_return_is_recorded_as_none(api):
    result = await execute_sandbox('if True:\n    return\nconsole.log("unreachable")', api)
    assert result.output == [None]


async def test_unawaited_returned_call_is_resolved(api):
    result = await execute_sandbox("return anki.decks.list()", api)
    assert result.success is True
    assert result.output == [["Deck1", "Deck2"]]
    api.decks.list.assert_awaited_once()


async def test_unawaited_trailing_call_is_resolved(api):
    result = await execute_sandbox('anki.decks.create("Test")', api)
    assert result.output == [1]
    api.decks.create.assert_awaited_once_with("Test")


async def test_unawaited_trailing_call_returning_none_is_not_recorded(api):
    result = await execute_sandbox("anki.gui.current_card()", api)
    assert result.success is True
    assert result.output == []
    api.gui.current_card.assert_awaited_once()


async def test_completion_value_follows_logs(api):
    result = await execute_sandbox('console.log("first")\nreturn "last"', api)
    assert result.output == ["first", "last"]


async def test_empty_script(api):
    result = await execute_sandbox("", api)
    assert result.success is True
    assert result.output == []


async def test_warn_and_error_are_tagged(api):
    code = """
console.info("info")
console.warn("careful")
console.error("bad", 2)
console.log("a", "b")
"""
    result = await execute_sandbox(code, api)
    assert result.output == [
        "info",
        {"warn": "careful"},
        {"error": ["bad", 2]},
        ["a", "b"],
    ]


async def test_print_is_captured(api):
    result = await execute_sandbox('print("cards:", 3)', api)
    assert result.output == ["cards: 3"]


# ---------------------------------------------------------------------------
# Capability calls
# ---------------------------------------------------------------------------


async def test_handles_async_code(api):
    code = """
decks = await anki.decks.list()
console.log(decks)
"""
    result = await execute_sandbox(code, api)
    assert result.success is True
    assert result.output == [["Deck1", "Deck2"]]
    api.decks.list.assert_awaited_once()


async def test_calls_multiple_api_methods_in_order(api):
    code = """
await anki.decks.create("Test")
note_id = await anki.notes.add({"deckName": "Test", "modelName": "Basic", "fields": {}})
console.log({"id": note_id})
"""
    result = await execute_sandbox(code, api)
    assert result.success is True
    assert result.output == [{"id": 123}]
    api.decks.create.assert_awaited_once_with("Test")


async def test_null_from_capability_is_data(api):
    result = await execute_sandbox("card = await anki.gui.current_card()\nconsole.log(card)", api)
    assert result.success is True
    assert result.output == [None]


async def test_builtins_are_available(api):
    code = """
decks = await anki.decks.list()
sorted([len(d) for d in decks], reverse=True) + [sum(range(3)), max(1, 2)]
"""
    result = await execute_sandbox(code, api)
    assert result.output == [[5, 5, 3, 2]]


async def test_concurrent_executions_do_not_share_output(api):
    first, second = await asyncio.gather(
        execute_sandbox('console.log("a")\nawait anki.decks.list()\nconsole.log("a2")', api),
        execute_sandbox('console.log("b")', api),
    )
    assert first.output == ["a", "a2"]
    assert second.output == ["b"]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


async def test_catches_errors(api):
    result = await execute_sandbox('raise Exception("oops")', api)
    assert result.success is False
    assert "oops" in result.error


async def test_keeps_output_logged_before_failure(api):
    code = """
console.log("before")
raise ValueError("boom")
console.log("after")
"""
    result = await execute_sandbox(code, api)
    assert result.success is False
    assert result.output == ["before"]
    assert result.error.splitlines()[0] == "boom"


async def test_error_trace_is_limited(api):
    code = """
def inner():
    raise RuntimeError("deep")

def middle():
    inner()

def outer():
    middle()

outer()
"""
    result = await execute_sandbox(code, api)
    lines = result.error.splitlines()
    assert lines[0] == "deep"
    assert 1 < len(lines) <= 4
    assert 'File "<script>"' in lines[-1]
    assert "in inner" in lines[-1]


async def test_capability_failure_is_caught(api):
    api.decks.list.side_effect = AnkiConnectRemoteError("collection is not available", "deckNames")
    code = """
console.log("start")
await anki.decks.list()
"""
    result = await execute_sandbox(code, api)
    assert result.success is False
    assert result.output == ["start"]
    assert "collection is not available" in result.error


async def test_syntax_error(api):
    result = await execute_sandbox("console.log(", api)
    assert result.success is False
    assert result.error


async def test_empty_message_uses_exception_name(api):
    result = await execute_sandbox("raise KeyError()", api)
    assert result.error.splitlines()[0] == "KeyError"


# ---------------------------------------------------------------------------
# Restrictions
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "code",
    [
        "import os",
        "from os import path",
        "anki.__class__",
        "console._output",
        "__builtins__",
        "__import__('os')",
        '"{0.__class__}".format(anki)',
    ],
)
def test_compile_rejects_escape_hatches(code):
    with pytest.raises(ScriptRejected):
        compile_script(code)


async def test_rejected_script_reports_failure(api):
    result = await execute_sandbox("import os\nconsole.log(os.getcwd())", api)
    assert result.success is False
    assert result.output == []
    assert "import" in result.error


@pytest.mark.parametrize("name", ["open", "eval", "exec", "compile", "input", "globals"])
async def test_ambient_builtins_unavailable(api, name):
    result = await execute_sandbox(f"{name}", api)
    assert result.success is False
    assert name in result.error


async def test_getattr_refuses_private_names(api):
    result = await execute_sandbox('getattr(anki, "_" + "_class__")', api)
    assert result.success is False


async def test_classes_can_be_defined(api):
    code = """
class Card:
    def __init__(self, front):
        self.front = front

Card("q").front
"""
    result = await execute_sandbox(code, api)
    assert result.success is True
    assert result.output == ["q"]


# ---------------------------------------------------------------------------
# SandboxConsole
# ---------------------------------------------------------------------------


class TestSandboxConsole:
    """Tests for the output sink's collapsing rule."""

    def test_single_argument_verbatim(self):
        output = []
        SandboxConsole(output).log({"a": 1})
        assert output == [{"a": 1}]

    def test_no_arguments_records_empty_list(self):
        output = []
        SandboxConsole(output).log()
        assert output == [[]]

    def test_channels_share_one_sequence(self):
        output = []
        console = SandboxConsole(output)
        console.error("e")
        console.log("l")
        console.warn("w", "x")
        assert output == [{"error": "e"}, "l", {"warn": ["w", "x"]}]


# ---------------------------------------------------------------------------
# format_sandbox_result
# ---------------------------------------------------------------------------


class TestFormatSandboxResult:
    """Tests for rendering results as text."""

    def test_formats_success_with_output(self):
        formatted = format_sandbox_result(SandboxResult(success=True, output=["hello", {"foo": "bar"}]))
        assert formatted == 'hello\n{\n  "foo": "bar"\n}'

    def test_strings_render_verbatim(self):
        formatted = format_sandbox_result(SandboxResult(success=True, output=["line with \"quotes\""]))
        assert formatted == 'line with "quotes"'

    def test_key_order_is_preserved(self):
        formatted = format_sandbox_result(SandboxResult(success=True, output=[{"b": 1, "a": 2}]))
        assert formatted.index('"b"') < formatted.index('"a"')

    def test_null_renders_as_json(self):
        assert format_sandbox_result(SandboxResult(success=True, output=[None])) == "null"

    def test_formats_success_with_no_output(self):
        formatted = format_sandbox_result(SandboxResult(success=True, output=[]))
        assert "Executed successfully" in formatted

    def test_formats_error(self):
        formatted = format_sandbox_result(
            SandboxResult(success=False, output=[], error="Something went wrong")
        )
        assert "Error" in formatted
        assert "Something went wrong" in formatted

    def test_formats_failure_without_error_text(self):
        formatted = format_sandbox_result(SandboxResult(success=False, output=[]))
        assert formatted == "❌ Execution failed with no output"

    def test_output_precedes_error_block(self):
        formatted = format_sandbox_result(
            SandboxResult(success=False, output=["partial"], error="boom")
        )
        assert formatted.startswith("partial\n")
        assert formatted.endswith("❌ Error: boom")

    def test_non_json_values_fall_back_to_str(self):
        formatted = format_sandbox_result(SandboxResult(success=True, output=[{"ids": {1}}]))
        assert "{1}" in formatted

    def test_is_deterministic(self):
        result = SandboxResult(success=True, output=[{"x": [1, 2]}, "y"])
        assert format_sandbox_result(result) == format_sandbox_result(result)
