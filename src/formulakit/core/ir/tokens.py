"""
Display tokens produced by linearizing a formula tree.

The token sequence is the alphabet shared with the external editor and the
save format; producing it has no evaluation side effects.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum, auto


class TokenKind(StrEnum):
    """Token types of a linearized formula."""

    # Structure
    BRACKET_OPEN = auto()
    BRACKET_CLOSE = auto()
    FUNCTION_PARAMETERS_BRACKET_OPEN = auto()
    FUNCTION_PARAMETER_DELIMITER = auto()
    FUNCTION_PARAMETERS_BRACKET_CLOSE = auto()

    # Symbols
    OPERATOR = auto()
    FUNCTION_NAME = auto()

    # Leaves
    NUMBER = auto()
    STRING = auto()
    SENSOR = auto()
    USER_VARIABLE = auto()
    USER_LIST = auto()
    COLLISION_FORMULA = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """A single display token."""

    kind: TokenKind
    value: str = ""


class TokenSequence:
    """Lazy, restartable view over the tokens of a tree.

    Each iteration walks the tree afresh, so edits made between iterations
    are reflected.
    """

    __slots__ = ("_walk",)

    def __init__(self, walk: Callable[[], Iterator[Token]]) -> None:
        self._walk = walk

    def __iter__(self) -> Iterator[Token]:
        return self._walk()

    def __repr__(self) -> str:
        return f"TokenSequence({list(self)!r})"
