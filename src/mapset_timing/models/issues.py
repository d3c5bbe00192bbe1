"""Issue models - the only output of the checks."""

from dataclasses import dataclass
from enum import IntEnum


class IssueLevel(IntEnum):
    """Severity of an issue, ordered from least to most severe."""

    MINOR = 1
    WARNING = 2
    PROBLEM = 3

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class IssueTemplate:
    """A message format with a fixed severity."""

    level: IssueLevel
    format: str
    cause: str = ""

    def render(self, *args: object) -> str:
        return self.format.format(*args)


@dataclass(frozen=True)
class Issue:
    """A single reported issue."""

    check: str  # name of the check that produced it
    template: str  # template key within that check
    level: IssueLevel
    message: str
    beatmap: str | None = None  # difficulty name, None for set-wide issues
    time: float | None = None  # ms, first timestamp the issue refers to


def format_timestamp(time: float) -> str:
    """Format a time in ms the way the editor shows it, e.g. 01:02:345."""
    ms = round(time)
    sign = "-" if ms < 0 else ""
    ms = abs(ms)
    minutes, ms = divmod(ms, 60000)
    seconds, ms = divmod(ms, 1000)
    return f"{sign}{minutes:02d}:{seconds:02d}:{ms:03d}"
