"""Calendar date keys for diary entries.

A :class:`DateKey` identifies exactly one entry. Its canonical text form
``YYYY-MM-DD`` is both the file stem on disk and the sort key.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from inkwell.core.exceptions import DecodeSkipped

# Stricter than date.fromisoformat, which also accepts "20240101" and
# week dates; those would break the one-string-per-date guarantee.
_CANONICAL_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)


@dataclass(frozen=True, order=True)
class DateKey:
    """An immutable calendar date used as the unique identifier of an entry.

    Ordering follows the calendar, so ``sorted(keys, reverse=True)`` yields
    most-recent-first.
    """

    year: int
    month: int
    day: int

    def __post_init__(self):
        try:
            date(self.year, self.month, self.day)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid calendar date: {self.year}-{self.month}-{self.day}") from e

    @classmethod
    def from_date(cls, value: date) -> DateKey:
        return cls(value.year, value.month, value.day)

    @classmethod
    def today(cls) -> DateKey:
        return cls.from_date(date.today())

    @classmethod
    def parse(cls, text: str) -> DateKey:
        """Decode a canonical ``YYYY-MM-DD`` string.

        Raises:
            DecodeSkipped: If *text* is not exactly a canonical, valid date.
        """
        match = _CANONICAL_RE.fullmatch(text)
        if not match:
            raise DecodeSkipped(f"Not a canonical date: {text!r}")
        year, month, day = (int(part) for part in match.groups())
        try:
            return cls(year, month, day)
        except ValueError as e:
            raise DecodeSkipped(str(e)) from None

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def encode(self) -> str:
        """Return the canonical ``YYYY-MM-DD`` form."""
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        return f"DateKey('{self.encode()}')"
