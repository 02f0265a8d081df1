"""Exception types raised while turning a scene file into frames."""
from __future__ import annotations

from typing import Optional


class SceneError(ValueError):
    """Base class for every failure of the scene pipeline."""


class LexError(SceneError):
    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class ParseError(SceneError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        location = f"{line}:{column}: " if line is not None else ""
        super().__init__(f"{location}{message}")
        self.message = message
        self.line = line
        self.column = column


class UnexpectedToken(ParseError):
    pass


class UnknownKeyword(ParseError):
    def __init__(self, keyword: str, line: int, column: int) -> None:
        super().__init__(f"unknown keyword {keyword!r}", line, column)
        self.keyword = keyword


class MissingField(ParseError):
    def __init__(self, keyword: str, line: int, column: int) -> None:
        super().__init__(f"required keyword {keyword!r} is missing", line, column)
        self.keyword = keyword


class DuplicateKeyword(ParseError):
    def __init__(self, keyword: str, line: int, column: int, first_line: int) -> None:
        super().__init__(f"keyword {keyword!r} already given on line {first_line}", line, column)
        self.keyword = keyword
        self.first_line = first_line


class MalformedRange(ParseError):
    pass


class ResolveError(SceneError):
    def __init__(self, message: str, entity_id: str) -> None:
        super().__init__(message)
        self.entity_id = entity_id


class UnknownEntity(ResolveError):
    def __init__(self, entity_id: str) -> None:
        super().__init__(f"no recorded track for entity {entity_id!r}", entity_id)


class EmptyTrack(ResolveError):
    def __init__(self, entity_id: str) -> None:
        super().__init__(f"track of entity {entity_id!r} has no samples", entity_id)


class InterpolationError(SceneError):
    pass


class InvalidDuration(InterpolationError):
    pass
