"""Operator-facing output.

The lifecycle narrates each run (why it deploys or skips, which hooks ran,
what got pruned) through ConsoleProtocol. RichConsole renders that for a
terminal; MockConsole keeps it in memory for assertions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # step detail, shown with --verbose
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


# Label put in front of leveled messages, shared by both consoles.
_LABELS: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}

_THEME = {
    "artdeploy.success": "green",
    "artdeploy.error": "red bold",
    "artdeploy.warning": "yellow",
    "artdeploy.info": "cyan",
    "artdeploy.dim": "dim",
    "artdeploy.header": "blue bold",
}


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Terminal console.

    Messages are printed literally: a path or version containing "[...]" is
    never interpreted as Rich markup.

    Args:
        verbose: Also print DIM step detail.
        stderr: Write to stderr instead of stdout.
    """

    def __init__(self, *, verbose: bool = False, stderr: bool = False) -> None:
        from rich.console import Console
        from rich.theme import Theme

        self._console = Console(stderr=stderr, theme=Theme(_THEME))
        self._verbose = verbose

    @property
    def verbose(self) -> bool:
        return self._verbose

    def _emit(self, message: str, style: Style) -> None:
        from rich.text import Text

        if style is Style.DIM and not self._verbose:
            return
        line = Text()
        label = _LABELS.get(style)
        if label:
            line.append(label, style=f"artdeploy.{style}")
            line.append(" ")
            line.append(message)
        elif style is Style.DEFAULT:
            line.append(message)
        else:
            line.append(message, style=f"artdeploy.{style}")
        self._console.print(line)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(message, style)

    def success(self, message: str) -> None:
        self._emit(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._emit(message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._emit(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._emit(message, Style.INFO)

    def header(self, message: str) -> None:
        self._console.print()
        self._emit(message, Style.HEADER)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    message: str
    style: Style


def _no_records() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """In-memory console; leveled messages keep their text label."""

    outputs: list[OutputRecord] = field(default_factory=_no_records)

    def _record(self, message: str, style: Style) -> None:
        label = _LABELS.get(style)
        self.outputs.append(OutputRecord(f"{label} {message}" if label else message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self._record(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._record(message, Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    # assertions helpers

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return self.count(Style.ERROR) > 0

    def has_warning(self) -> bool:
        return self.count(Style.WARNING) > 0

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style is style)
