"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from src.chess.square import Square
from src.core.shared_types import Color


class CastlingSide(Enum):
    """Values are the castling markers used in move notation."""

    KING_SIDE = "O-O"
    QUEEN_SIDE = "O-O-O"


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    `between` are the squares that must be empty, `king_path` the squares that must not be attacked
    (start, pass-through and destination of the king).
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    between: tuple[Square, ...]
    king_path: tuple[Square, ...]

    @classmethod
    def from_algebraic(
        cls, k_from: str, k_to: str, r_from: str, r_to: str, between: str, path: str
    ) -> Self:
        """Convenience method: to make mapping shown below more readable"""
        return cls(
            king_from=Square.from_algebraic(k_from),
            king_to=Square.from_algebraic(k_to),
            rook_from=Square.from_algebraic(r_from),
            rook_to=Square.from_algebraic(r_to),
            between=tuple(Square.from_algebraic(sq) for sq in between.split()),
            king_path=tuple(Square.from_algebraic(sq) for sq in path.split()),
        )


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (Color.WHITE, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1", between="f1 g1", path="e1 f1 g1"
    ),
    (Color.WHITE, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1", between="b1 c1 d1", path="e1 d1 c1"
    ),
    (Color.BLACK, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8", between="f8 g8", path="e8 f8 g8"
    ),
    (Color.BLACK, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8", between="b8 c8 d8", path="e8 d8 c8"
    ),
}


def castling_rule_for_king_move(
    color: Color, from_square: Square, to_square: Square
) -> CastlingSquares | None:
    """The castling rule a king move from/to these squares corresponds to (if any)."""
    for side in CastlingSide:
        rule = CASTLING_RULES[(color, side)]
        if rule.king_from == from_square and rule.king_to == to_square:
            return rule
    return None
