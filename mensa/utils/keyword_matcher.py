import re
from typing import Generic, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

# Spaces and tabs are the only insignificant characters between tokens.
WHITESPACE = re.compile(r"[ \t]*")


def skip_whitespace(text: str, pos: int) -> int:
    """Return the first position at or after `pos` that is not a space or tab."""
    return WHITESPACE.match(text, pos).end()


class Keyword:
    """A case-insensitive literal with an optional trailing fragment.

    ``Keyword("tue", "sday")`` matches ``tue`` and ``Tuesday`` but not ``tues``.
    Words of a multi-word literal may be separated by any run of spaces or tabs.
    A match must end on a word boundary and swallows the whitespace after it.
    """

    def __init__(self, literal: str, suffix: str = ""):
        self.literal = literal
        self.suffix = suffix
        body = r"[ \t]+".join(re.escape(word) for word in literal.split())
        if suffix:
            body += f"(?:{re.escape(suffix)})?"
        self._pattern = re.compile(body + r"(?!\w)", re.IGNORECASE)

    def match(self, text: str, pos: int = 0) -> Optional[int]:
        """Match at `pos` and return the position after trailing whitespace, or None."""
        found = self._pattern.match(text, pos)
        if not found:
            return None
        return skip_whitespace(text, found.end())

    def __repr__(self) -> str:
        if self.suffix:
            return f"Keyword({self.literal!r}, {self.suffix!r})"
        return f"Keyword({self.literal!r})"


class Vocabulary(Generic[T]):
    """Priority-ordered alternatives for one concept.

    Entries are tried in declared order and the first one that matches wins,
    even when a later entry would consume more text.
    """

    def __init__(self, name: str, entries: Sequence[Tuple[Keyword, T]]):
        self.name = name
        self.entries = tuple(entries)

    def match(self, text: str, pos: int = 0) -> Optional[Tuple[T, int]]:
        for keyword, value in self.entries:
            end = keyword.match(text, pos)
            if end is not None:
                return value, end
        return None
