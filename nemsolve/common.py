"""Shared constants, boundary kinds and the whitespace token reader used by the input parser."""

from __future__ import annotations

import enum
import re

NU = 1.0
END_MARK = ");"

X_DIR = 0
Y_DIR = 1
Z_DIR = 2

LEFT = 0
RIGHT = 1

_WHITESPACE = re.compile(r"\s*")
_NON_SPACE_RUN = re.compile(r"\S+")


class BoundaryType(enum.Enum):
    """Condition applied at a node face that has no neighbouring node."""

    REFLECTIVE = "REFLECTIVE"
    VACUUM = "VACUUM"


class TokenStream:
    """Reads whitespace separated tokens and whole lines from a block of text."""

    def __init__(self, text):
        self._text = text
        self._pos = 0

    def _skip_whitespace(self):
        self._pos = _WHITESPACE.match(self._text, self._pos).end()

    def next_token(self):
        """Return the next whitespace separated token; raise EOFError at the end."""
        self._skip_whitespace()
        match = _NON_SPACE_RUN.match(self._text, self._pos)
        if match is None:
            raise EOFError("unexpected end of input")
        self._pos = match.end()
        return match.group()

    def next_int(self):
        """Return the next token as an integer."""
        word = self.next_token()
        try:
            return int(word)
        except ValueError:
            raise ValueError(f"expected an integer, found {word!r}") from None

    def next_float(self):
        """Return the next token as a float."""
        word = self.next_token()
        try:
            return float(word)
        except ValueError:
            raise ValueError(f"expected a number, found {word!r}") from None

    def skip_char(self):
        """Skip whitespace, then consume and return one character."""
        self._skip_whitespace()
        if self._pos >= len(self._text):
            raise EOFError("unexpected end of input")
        char = self._text[self._pos]
        self._pos += 1
        return char

    def read_line(self):
        """Return the rest of the current line, or None when the text is exhausted."""
        if self._pos >= len(self._text):
            return None
        end = self._text.find("\n", self._pos)
        if end == -1:
            line = self._text[self._pos:]
            self._pos = len(self._text)
        else:
            line = self._text[self._pos:end]
            self._pos = end + 1
        return line.rstrip("\r")

    def at_end(self):
        """Return True when only whitespace is left."""
        return _WHITESPACE.match(self._text, self._pos).end() >= len(self._text)