"""Keyword driven parser turning scene text into a :class:`SceneDescription`."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import (
    DuplicateKeyword,
    MalformedRange,
    MissingField,
    ParseError,
    UnexpectedToken,
    UnknownKeyword,
)
from .lexer import Lexer, Token, TokenKind
from .scene import (
    EntityAtTime,
    LiteralPosition,
    Mode,
    ParamValue,
    PositionRef,
    Range,
    SceneDescription,
    Single,
    Timestamp,
)

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]

DEFAULT_PIN_SIZE_PX = 100

_MODES = {"Bild": Mode.SINGLE_FRAME, "Animation": Mode.ANIMATION}


class _Statement:
    """Cursor over the tokens of one keyword statement."""

    def __init__(self, keyword: Token, tokens: List[Token], end: Token) -> None:
        self.keyword = keyword
        self.tokens = tokens
        self.end = end
        self.index = 0

    def peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def next(self, expected: str) -> Token:
        token = self.peek()
        if token is None:
            raise UnexpectedToken(
                f"{self.keyword.text}: expected {expected}, found end of line",
                self.end.line,
                self.end.column,
            )
        self.index += 1
        return token

    def expect(self, kind: TokenKind, expected: str) -> Token:
        token = self.next(expected)
        if token.kind is not kind:
            raise UnexpectedToken(
                f"{self.keyword.text}: expected {expected}, found {token.text!r}",
                token.line,
                token.column,
            )
        return token

    def at(self, kind: TokenKind) -> bool:
        token = self.peek()
        return token is not None and token.kind is kind

    def finish(self) -> None:
        token = self.peek()
        if token is None:
            return
        if token.kind is TokenKind.SEMICOLON:
            raise MalformedRange(
                f"{self.keyword.text} takes at most a start and an end value",
                token.line,
                token.column,
            )
        raise UnexpectedToken(
            f"{self.keyword.text}: unexpected {token.text!r}", token.line, token.column
        )


def _statements(tokens: Iterable[Token]) -> Iterator[Tuple[Token, List[Token], Token]]:
    current: List[Token] = []
    for token in tokens:
        if token.kind is TokenKind.COMMENT:
            continue
        if token.kind is TokenKind.NEWLINE:
            if current:
                yield current[0], current[1:], token
            current = []
        else:
            current.append(token)
    if current:
        last = current[-1]
        yield current[0], current[1:], Token(TokenKind.NEWLINE, "", last.line, last.column + len(last.text))


class SceneParser:
    """Single forward pass over a token stream.

    Each statement starts with a keyword which selects the grammar of the
    values that follow it. A mode keyword (``Animation`` or ``Bild``) may
    only appear as the first statement; without one the scene is a single
    frame.
    """

    def __init__(self, name: str = "", bounds: Optional[Bounds] = None) -> None:
        self.name = name
        self.bounds = bounds

    def parse(self, tokens: Iterable[Token]) -> SceneDescription:
        mode: Optional[Mode] = None
        # Missing keywords are reported just past the last statement.
        end_line, end_column = 1, 1
        values: Dict[str, object] = {}
        lines: Dict[str, int] = {}
        handlers: Dict[str, Callable[[_Statement, Mode], object]] = {
            "Mitte": self._center,
            "Zoom": self._zoom,
            "Zeit": self._time,
            "Dauer": self._duration,
            "Pins": self._pins,
            "Pingrösse": self._pin_size,
            "Checkpoints": self._checkpoints,
        }

        for index, (head, rest, end) in enumerate(_statements(tokens)):
            end_line, end_column = end.line, end.column
            if head.kind is TokenKind.IDENTIFIER:
                raise UnknownKeyword(head.text, head.line, head.column)
            if head.kind is not TokenKind.KEYWORD:
                raise UnexpectedToken(f"expected a keyword, found {head.text!r}", head.line, head.column)

            keyword = head.text
            if keyword in lines:
                raise DuplicateKeyword(keyword, head.line, head.column, lines[keyword])

            if keyword in _MODES:
                if mode is not None or index != 0:
                    raise ParseError(
                        f"mode keyword {keyword!r} must be the first statement", head.line, head.column
                    )
                mode = _MODES[keyword]
                lines[keyword] = head.line
                _Statement(head, rest, end).finish()
                continue

            if mode is None:
                mode = Mode.SINGLE_FRAME
            statement = _Statement(head, rest, end)
            values[keyword] = handlers[keyword](statement, mode)
            lines[keyword] = head.line

        if mode is None:
            mode = Mode.SINGLE_FRAME

        required = ["Mitte", "Zoom"]
        if mode is Mode.ANIMATION:
            required += ["Zeit", "Dauer"]
        for keyword in required:
            if keyword not in values:
                raise MissingField(keyword, end_line, end_column)

        duration = values.get("Dauer")
        if mode is Mode.SINGLE_FRAME and duration is not None:
            logger.warning("%s: 'Dauer' on line %d is ignored for a still frame", self.name, lines["Dauer"])
            duration = None

        scene = SceneDescription(
            mode=mode,
            center=values["Mitte"],  # type: ignore[arg-type]
            zoom=values["Zoom"],  # type: ignore[arg-type]
            time_range=values.get("Zeit"),  # type: ignore[arg-type]
            duration_seconds=duration,  # type: ignore[arg-type]
            pins=values.get("Pins", ()),  # type: ignore[arg-type]
            pin_size_px=values.get("Pingrösse", DEFAULT_PIN_SIZE_PX),  # type: ignore[arg-type]
            checkpoints_enabled=bool(values.get("Checkpoints", False)),
            name=self.name,
            lines=lines,
        )
        logger.debug("parsed scene %r in %s mode", self.name, mode.value)
        return scene

    # ------------------------------------------------------------------
    # Value grammars
    # ------------------------------------------------------------------

    def _ranged(self, statement: _Statement, mode: Mode, value: Callable[[_Statement], object]) -> ParamValue:
        first = value(statement)
        if not statement.at(TokenKind.SEMICOLON):
            statement.finish()
            if mode is Mode.ANIMATION:
                return Range(first, first)
            return Single(first)

        separator = statement.next("';'")
        if mode is Mode.SINGLE_FRAME:
            raise MalformedRange(
                f"{statement.keyword.text} cannot take a range in a still frame",
                separator.line,
                separator.column,
            )
        if statement.peek() is None:
            raise MalformedRange(
                f"{statement.keyword.text}: range is missing its end value",
                separator.line,
                separator.column,
            )
        second = value(statement)
        statement.finish()
        return Range(first, second)

    def _center(self, statement: _Statement, mode: Mode) -> ParamValue:
        return self._ranged(statement, mode, self._position)

    def _zoom(self, statement: _Statement, mode: Mode) -> ParamValue:
        return self._ranged(statement, mode, self._number)

    def _time(self, statement: _Statement, mode: Mode) -> ParamValue:
        return self._ranged(statement, mode, self._timestamp)

    def _duration(self, statement: _Statement, mode: Mode) -> float:
        duration = self._number(statement)
        statement.finish()
        return duration

    def _pins(self, statement: _Statement, mode: Mode) -> Tuple[str, ...]:
        pins: List[str] = []
        while statement.peek() is not None:
            if statement.at(TokenKind.SEMICOLON):
                statement.next("';'")
                continue
            token = statement.expect(TokenKind.IDENTIFIER, "an entity name")
            if token.text not in pins:
                pins.append(token.text)
        return tuple(pins)

    def _pin_size(self, statement: _Statement, mode: Mode) -> int:
        token = statement.expect(TokenKind.NUMBER, "a pin size in pixels")
        statement.finish()
        if not token.text.isdigit() or int(token.text) <= 0:
            raise ParseError(
                f"Pingrösse must be a positive whole number, got {token.text!r}", token.line, token.column
            )
        return int(token.text)

    def _checkpoints(self, statement: _Statement, mode: Mode) -> bool:
        return True

    def _number(self, statement: _Statement) -> float:
        return float(statement.expect(TokenKind.NUMBER, "a number").value)

    def _timestamp(self, statement: _Statement) -> Timestamp:
        token = statement.expect(TokenKind.TIME, "a time '<day>T<hour>:<minute>'")
        day, hour, minute = token.value
        if hour > 23 or minute > 59:
            raise ParseError(f"invalid time of day {token.text!r}", token.line, token.column)
        return Timestamp(day, hour, minute)

    def _position(self, statement: _Statement) -> PositionRef:
        token = statement.next("a coordinate '(lat, lon)' or 'Name[<time>]'")
        if token.kind is TokenKind.COORDINATE:
            lat, lon = token.value
            if self.bounds is not None:
                lat_min, lat_max, lon_min, lon_max = self.bounds
                if not lat_min <= lat <= lat_max:
                    raise ParseError(f"latitude {lat} outside [{lat_min}, {lat_max}]", token.line, token.column)
                if not lon_min <= lon <= lon_max:
                    raise ParseError(f"longitude {lon} outside [{lon_min}, {lon_max}]", token.line, token.column)
            return LiteralPosition((lat, lon))
        if token.kind is TokenKind.IDENTIFIER:
            statement.expect(TokenKind.LBRACKET, "'[' after the entity name")
            timestamp = self._timestamp(statement)
            statement.expect(TokenKind.RBRACKET, "']'")
            return EntityAtTime(token.text, timestamp)
        raise UnexpectedToken(
            f"{statement.keyword.text}: expected a position, found {token.text!r}", token.line, token.column
        )


def parse_scene(text: str, name: str = "", bounds: Optional[Bounds] = None) -> SceneDescription:
    """Parse scene ``text`` into a :class:`SceneDescription`."""

    return SceneParser(name=name, bounds=bounds).parse(Lexer(text))


def parse_file(path: Path, bounds: Optional[Bounds] = None) -> SceneDescription:
    path = Path(path)
    with path.open("r", encoding="utf8") as handle:
        text = handle.read()
    return parse_scene(text, name=path.stem, bounds=bounds)
