"""
Error Reporting

Compile errors are raised synchronously and render as rustc-style
diagnostics pointing at the offending pattern element.
"""

import os
from typing import Optional, List, Sequence, Any

from .source_location import TokenLocation
from ..utils.config import (
    ENV_COLOR,
    ENV_NO_COLOR,
    PATTERN_SOURCE_NAME,
    TOKEN_SEPARATOR,
    E_MALFORMED_TOKEN,
    E_DUPLICATE_NAME,
    E_NAMED_EDGE,
    E_ARGUMENT_EDGE,
    E_AMBIGUOUS_CHAIN,
    E_NO_BACKEND,
    E_EDGE_DIRECTION,
    E_UNBOUND_FORM_NAME,
)


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get(ENV_NO_COLOR):
        return False
    explicit = os.environ.get(ENV_COLOR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return True

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Pattern rendering
# ---------------------------------------------------------------------------

def render_element(element: Any) -> str:
    """Render one pattern element the way it appears in a diagnostic."""
    if isinstance(element, str):
        return element
    if callable(element):
        return f"<{getattr(element, '__qualname__', type(element).__name__)}>"
    return repr(element)


def render_pattern(pattern: Sequence[Any]) -> str:
    return TOKEN_SEPARATOR.join(render_element(e) for e in pattern)


def locate_element(pattern: Sequence[Any], index: int) -> TokenLocation:
    """Compute the rendered column/width of pattern element `index`."""
    column = 1
    for i, element in enumerate(pattern):
        text = render_element(element)
        if i == index:
            return TokenLocation(index=index, column=column, length=max(1, len(text)))
        column += len(text) + len(TOKEN_SEPARATOR)
    return TokenLocation(index=index, column=column, length=1)


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    message: str,
    code: Optional[str],
    location: Optional[TokenLocation],
    pattern_text: Optional[str],
    label: Optional[str] = None,
    help: Optional[str] = None,
    note: Optional[str] = None,
    color: bool = False,
) -> str:
    """
    Render a single diagnostic in rustc style.

    Example output (plain, no color)::

        error[P0001]: malformed pattern token `-x>`
         --> <pattern>:element 1
          |
          | f<Family> -x> m
          |           ^^^ not a node or edge token
          |
          = help: edges are written -name<Type>-> or <-name<Type>-
    """
    out: List[str] = []

    code_str = f"[{code}]" if code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {message}", _BOLD, color=color)
    )

    if location is None or pattern_text is None:
        where = f"{PATTERN_SOURCE_NAME}:{location}" if location else "<unknown location>"
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + where)
        _append_annotations(out, help, note, color)
        return "\n".join(out)

    gutter = _style("  |", _BOLD, _BLUE, color=color)
    out.append(_style(" --> ", _BOLD, _BLUE, color=color) + f"{PATTERN_SOURCE_NAME}:{location}")
    out.append(gutter)
    out.append(f"{gutter} {pattern_text}")
    carets = " " * max(location.column - 1, 0) + "^" * max(location.length, 1)
    label_suffix = f" {label}" if label else ""
    out.append(f"{gutter} {_style(carets + label_suffix, _BOLD, _RED, color=color)}")

    _append_annotations(out, help, note, color)
    return "\n".join(out)


def _append_annotations(
    out: List[str],
    help: Optional[str],
    note: Optional[str],
    color: bool,
) -> None:
    if not (help or note):
        return
    out.append(_style("  |", _BOLD, _BLUE, color=color))
    if help:
        out.append(
            _style("  = ", _BOLD, _CYAN, color=color)
            + _style("help: ", _BOLD, color=color)
            + help
        )
    if note:
        out.append(
            _style("  = ", _BOLD, _CYAN, color=color)
            + _style("note: ", _BOLD, color=color)
            + note
        )


# ============================================================================
# Exception Classes
# ============================================================================

class PatternError(Exception):
    """Base exception for all pmatch errors"""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PatternCompileError(PatternError):
    """
    Error detected while compiling a pattern. Compilation fails closed:
    no partial plan is ever returned alongside one of these.
    """
    code: Optional[str] = None

    def __init__(self,
                 message: str,
                 location: Optional[TokenLocation] = None,
                 pattern_text: Optional[str] = None,
                 label: Optional[str] = None,
                 help: Optional[str] = None,
                 note: Optional[str] = None):
        super().__init__(message)
        self.location = location
        self.pattern_text = pattern_text
        self.label_text = label
        self.help_text = help
        self.note_text = note

    def format(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(
            self.message,
            self.code,
            self.location,
            self.pattern_text,
            label=self.label_text,
            help=self.help_text,
            note=self.note_text,
            color=use_color,
        )

    def __str__(self):
        if self.location is not None:
            return f"error[{self.code}]: {self.message} (at {self.location})"
        return f"error[{self.code}]: {self.message}"


class MalformedToken(PatternCompileError):
    """A pattern element matches neither the node nor the edge grammar."""
    code = E_MALFORMED_TOKEN


class DuplicateOrConflictingName(PatternCompileError):
    """A name is declared twice with different types or collides across namespaces."""
    code = E_DUPLICATE_NAME


class UnsupportedNamedEdge(PatternCompileError):
    """Named edges cannot be bound by the containment backend."""
    code = E_NAMED_EDGE


class UnsupportedArgumentEdge(PatternCompileError):
    """Argument edges cannot be checked by the containment backend."""
    code = E_ARGUMENT_EDGE


class AmbiguousAnonymousChain(PatternCompileError):
    """An anonymous chain forks and cannot be linearized into one path."""
    code = E_AMBIGUOUS_CHAIN


class UnresolvedBackendContext(PatternCompileError):
    """Compilation was requested without a target backend."""
    code = E_NO_BACKEND


class UnsupportedEdgeDirection(PatternCompileError):
    """The containment backend only follows references forward."""
    code = E_EDGE_DIRECTION


class UnboundFormName(PatternCompileError):
    """A constraint or binding form names a variable not bound at its position."""
    code = E_UNBOUND_FORM_NAME


class PatternRuntimeError(PatternError):
    """
    Misuse of a compiled plan at execution time (wrong backend kind,
    missing argument values). Absent values are never reported here:
    they are ordinary guard failures.
    """
    pass
