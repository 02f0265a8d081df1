"""Tokenizer for the scene description language."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from .errors import LexError

KEYWORDS = frozenset(
    {
        "Animation",
        "Bild",
        "Mitte",
        "Zoom",
        "Zeit",
        "Dauer",
        "Pins",
        "Pingrösse",
        "Checkpoints",
    }
)

_WORD_SYMBOLS = "_-.:"
_NUMBER_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")
_TIME_RE = re.compile(r"^(\d+)T(\d+):(\d+)$")


class TokenKind(enum.Enum):
    COMMENT = "comment"
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    COORDINATE = "coordinate"
    TIME = "time"
    SEMICOLON = "semicolon"
    LBRACKET = "lbracket"
    RBRACKET = "rbracket"
    NEWLINE = "newline"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int
    value: Any = None


class Lexer:
    """Lazily tokenize scene text.

    Iterating a :class:`Lexer` starts a fresh pass over the text, so the
    token stream can be consumed more than once. Comments run from ``#`` to
    the end of the line and are dropped unless ``keep_comments`` is set.
    """

    def __init__(self, text: str, keep_comments: bool = False) -> None:
        self.text = text
        self.keep_comments = keep_comments

    def __iter__(self) -> Iterator[Token]:
        for line_number, line in enumerate(self.text.splitlines(), start=1):
            yield from self._tokenize_line(line, line_number)
            yield Token(TokenKind.NEWLINE, "\n", line_number, len(line) + 1)

    def _tokenize_line(self, line: str, line_number: int) -> Iterator[Token]:
        position = 0
        open_bracket: Optional[int] = None
        length = len(line)

        while position < length:
            char = line[position]
            column = position + 1

            if char.isspace():
                position += 1
            elif char == "#":
                if self.keep_comments:
                    yield Token(TokenKind.COMMENT, line[position:], line_number, column)
                break
            elif char == ";":
                yield Token(TokenKind.SEMICOLON, char, line_number, column)
                position += 1
            elif char == "[":
                if open_bracket is not None:
                    raise LexError("nested '['", line_number, column)
                open_bracket = column
                yield Token(TokenKind.LBRACKET, char, line_number, column)
                position += 1
            elif char == "]":
                if open_bracket is None:
                    raise LexError("']' without matching '['", line_number, column)
                open_bracket = None
                yield Token(TokenKind.RBRACKET, char, line_number, column)
                position += 1
            elif char == "(":
                token, position = self._coordinate(line, line_number, position)
                yield token
            elif _is_word_char(char):
                end = position
                while end < length and _is_word_char(line[end]):
                    end += 1
                yield _classify_word(line[position:end], line_number, column)
                position = end
            else:
                raise LexError(f"unexpected character {char!r}", line_number, column)

        if open_bracket is not None:
            raise LexError("unterminated '['", line_number, open_bracket)

    @staticmethod
    def _coordinate(line: str, line_number: int, position: int) -> Tuple[Token, int]:
        column = position + 1
        close = line.find(")", position)
        comment = line.find("#", position)
        if close == -1 or (comment != -1 and comment < close):
            raise LexError("unterminated '('", line_number, column)

        text = line[position : close + 1]
        parts = [part.strip() for part in line[position + 1 : close].split(",")]
        if len(parts) != 2 or not all(_NUMBER_RE.match(part) for part in parts):
            raise LexError(f"coordinate must be '(lat, lon)', got {text!r}", line_number, column)
        value = (float(parts[0]), float(parts[1]))
        return Token(TokenKind.COORDINATE, text, line_number, column, value), close + 1


def _is_word_char(char: str) -> bool:
    """Letters (umlauts included), digits and the symbols of time literals and names."""

    return char.isalnum() or char in _WORD_SYMBOLS


def _classify_word(word: str, line_number: int, column: int) -> Token:
    if word in KEYWORDS:
        return Token(TokenKind.KEYWORD, word, line_number, column, word)
    match = _TIME_RE.match(word)
    if match:
        day, hour, minute = (int(group) for group in match.groups())
        return Token(TokenKind.TIME, word, line_number, column, (day, hour, minute))
    if _NUMBER_RE.match(word):
        return Token(TokenKind.NUMBER, word, line_number, column, float(word))
    return Token(TokenKind.IDENTIFIER, word, line_number, column, word)


def tokenize(text: str, keep_comments: bool = False) -> List[Token]:
    """Return every token of ``text`` as a list."""

    return list(Lexer(text, keep_comments=keep_comments))
