"""
Script sandbox for anki-codemode.

A script is the body of an async function: it may ``await`` capability
calls, ``return`` a value, and log through ``console``. Only ``anki``,
``console`` and a curated set of side-effect-free builtins are reachable.
Imports, dunder names and underscore attributes are rejected before the
script runs.

This is a capability restriction for cooperative callers, not an OS-level
isolation boundary.
"""

from __future__ import annotations

import ast
import inspect
import json
import logging
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from RestrictedPython import safe_builtins
from RestrictedPython.Guards import safer_getattr

logger = logging.getLogger(__name__)

SCRIPT_FILENAME = "<script>"
ENTRYPOINT_NAME = "__anki_script__"
NO_RESULT_NAME = "__anki_no_result__"
TRAILING_NAME = "__anki_trailing__"
MAX_TRACE_LINES = 3

SUCCESS_NO_OUTPUT = "✓ Executed successfully (no output)"
FAILURE_NO_OUTPUT = "❌ Execution failed with no output"

BLOCKED_BUILTINS = frozenset(
    {
        "__import__",
        "_getattr_",
        "setattr",
        "delattr",
        "BaseException",
        "GeneratorExit",
        "KeyboardInterrupt",
        "SystemExit",
    }
)

# Attributes that lead from ordinary objects back to frames, code or
# interpreter globals, or that format strings can use to traverse them.
BLOCKED_ATTRIBUTES = frozenset(
    {
        "ag_code",
        "ag_frame",
        "cr_code",
        "cr_frame",
        "f_back",
        "f_builtins",
        "f_globals",
        "f_locals",
        "format",
        "format_map",
        "gi_code",
        "gi_frame",
        "mro",
        "tb_frame",
        "tb_next",
    }
)


@dataclass
class SandboxResult:
    """Outcome of one script execution."""

    success: bool
    output: List[Any] = field(default_factory=list)
    error: Optional[str] = None


class ScriptRejected(ValueError):
    """Raised when a script uses a construct the sandbox does not allow."""


# Returned when the script body runs off the end without a `return`.
_NO_RESULT = object()


@dataclass(frozen=True)
class _TrailingValue:
    """Value of a trailing expression statement; ``None`` is not recorded."""

    value: Any


class SandboxConsole:
    """Output sink injected into scripts as ``console``.

    All four channels feed one ordered list. One argument is recorded as
    is, several as a list; ``warn`` and ``error`` wrap the recorded value
    so they stay distinguishable from plain entries.
    """

    def __init__(self, output: List[Any]):
        self._output = output

    @staticmethod
    def _collapse(args: tuple) -> Any:
        if len(args) == 1:
            return args[0]
        return list(args)

    def log(self, *args: Any) -> None:
        self._output.append(self._collapse(args))

    def info(self, *args: Any) -> None:
        self._output.append(self._collapse(args))

    def warn(self, *args: Any) -> None:
        self._output.append({"warn": self._collapse(args)})

    def error(self, *args: Any) -> None:
        self._output.append({"error": self._collapse(args)})

    def print(self, *args: Any, sep: str = " ", **_ignored: Any) -> None:
        """Stand-in for the ``print`` builtin; records one joined string."""
        self._output.append(sep.join(str(arg) for arg in args))


class _ScriptGuard(ast.NodeVisitor):
    """Reject constructs that reach outside the injected bindings."""

    def _reject(self, node: ast.AST, detail: str) -> None:
        lineno = getattr(node, "lineno", "?")
        raise ScriptRejected(f"line {lineno}: {detail}")

    def visit_Import(self, node: ast.Import) -> Any:
        self._reject(node, "import statements are not available in scripts")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> Any:
        self._reject(node, "import statements are not available in scripts")

    def visit_Attribute(self, node: ast.Attribute) -> Any:
        if node.attr.startswith("_"):
            self._reject(node, f"access to private attribute {node.attr!r} is not allowed")
        if node.attr in BLOCKED_ATTRIBUTES:
            self._reject(node, f"attribute {node.attr!r} is not available in scripts (use f-strings for formatting)")
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> Any:
        if node.id.startswith("__"):
            self._reject(node, f"name {node.id!r} is not available in scripts")
        self.generic_visit(node)


def _build_safe_builtins(console: SandboxConsole) -> Dict[str, Any]:
    builtins = dict(safe_builtins)
    builtins.update(
        {
            "list": list,
            "dict": dict,
            "set": set,
            "frozenset": frozenset,
            "sorted": sorted,
            "reversed": reversed,
            "enumerate": enumerate,
            "map": map,
            "filter": filter,
            "any": any,
            "all": all,
            "sum": sum,
            "min": min,
            "max": max,
            "format": format,
            "getattr": safer_getattr,
            "print": console.print,
        }
    )
    for blocked in BLOCKED_BUILTINS:
        builtins.pop(blocked, None)
    return builtins


def compile_script(code: str) -> Any:
    """Compile script source into a code object defining the entrypoint.

    The body is wrapped in ``async def __anki_script__()``. A trailing
    expression statement is returned wrapped in ``__anki_trailing__``, and
    running off the end returns ``__anki_no_result__``; both names must be
    bound in the globals the code object runs with.

    Raises:
        SyntaxError: If the script does not parse.
        ScriptRejected: If the script uses a blocked construct.
    """
    tree = compile(
        code,
        SCRIPT_FILENAME,
        "exec",
        flags=ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT,
        dont_inherit=True,
    )
    _ScriptGuard().visit(tree)

    body = list(tree.body)
    if body and isinstance(body[-1], ast.Expr):
        last = body[-1]
        wrapped = ast.Call(
            func=ast.Name(id=TRAILING_NAME, ctx=ast.Load()),
            args=[last.value],
            keywords=[],
        )
        body[-1] = ast.copy_location(ast.Return(value=wrapped), last)
    body.append(ast.Return(value=ast.Name(id=NO_RESULT_NAME, ctx=ast.Load())))

    module = ast.parse(f"async def {ENTRYPOINT_NAME}():\n    pass\n", filename=SCRIPT_FILENAME)
    module.body[0].body = body
    ast.fix_missing_locations(module)
    return compile(module, SCRIPT_FILENAME, "exec")


def _describe_failure(exc: BaseException) -> str:
    message = str(exc) or type(exc).__name__
    frames = traceback.extract_tb(exc.__traceback__)[-MAX_TRACE_LINES:]
    if not frames:
        return message
    trace = [f'  File "{frame.filename}", line {frame.lineno}, in {frame.name}' for frame in frames]
    return message + "\n" + "\n".join(trace)


async def execute_sandbox(code: str, api: Any) -> SandboxResult:
    """Run a script against ``api`` and capture what it logs.

    Args:
        code: Script body. May use ``await``, ``return`` and ``console``.
        api: Capability object injected as ``anki``.

    Returns:
        A SandboxResult. Script failures never propagate; output logged
        before a failure is kept. An explicit ``return`` is recorded even
        when it is ``None``; a trailing expression only when it is not.
        An awaitable completion value is awaited first.
    """
    output: List[Any] = []
    console = SandboxConsole(output)

    try:
        compiled = compile_script(code)
        namespace: Dict[str, Any] = {
            "__name__": ENTRYPOINT_NAME,
            "__builtins__": _build_safe_builtins(console),
            NO_RESULT_NAME: _NO_RESULT,
            TRAILING_NAME: _TrailingValue,
            "anki": api,
            "console": console,
        }
        exec(compiled, namespace)  # noqa: S102
        entrypoint: Callable[[], Any] = namespace[ENTRYPOINT_NAME]
        result = await entrypoint()
        if result is not _NO_RESULT:
            trailing = isinstance(result, _TrailingValue)
            if trailing:
                result = result.value
            if inspect.isawaitable(result):
                result = await result
            if not (trailing and result is None):
                console.log(result)
    except Exception as e:
        logger.debug("Script failed: %s", e)
        return SandboxResult(success=False, output=output, error=_describe_failure(e))

    return SandboxResult(success=True, output=output)


def _render_entry(item: Any) -> str:
    if isinstance(item, str):
        return item
    return json.dumps(item, indent=2, ensure_ascii=False, default=str)


def format_sandbox_result(result: SandboxResult) -> str:
    """Format a sandbox result as text for the MCP response."""
    parts = [_render_entry(item) for item in result.output]

    if not result.success and result.error:
        parts.append(f"\n❌ Error: {result.error}")

    if not parts:
        return SUCCESS_NO_OUTPUT if result.success else FAILURE_NO_OUTPUT

    return "\n".join(parts)


__all__ = [
    "SandboxConsole",
    "SandboxResult",
    "ScriptRejected",
    "compile_script",
    "execute_sandbox",
    "format_sandbox_result",
]
