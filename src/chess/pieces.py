"""Defines the chess pieces"""

from dataclasses import dataclass, field
from typing import Self

from src.chess.square import Square
from src.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}


PIECE_POINTS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
}

# Rank a pawn starts on / has to reach to promote, per color
PAWN_HOME_RANK: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: 6}
PROMOTION_RANK: dict[Color, int] = {Color.WHITE: 7, Color.BLACK: 0}
BACK_RANK: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 7}


def forward(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


@dataclass(eq=False)
class Piece:
    """
    A piece on (or about to be put on) the board.

    NOTE: compared by identity. The same object travels from square to square until it gets captured.
    """

    type: PieceType
    color: Color
    square: Square
    has_moved: bool = False
    points: int = field(init=False)

    def __post_init__(self):
        # NOTE: The King's worth is undefined (does not count towards total points)
        self.points = PIECE_POINTS.get(self.type, 0)

    @classmethod
    def from_fen(cls, character: str, square: Square) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color, square)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def promote_to(self, new_type: PieceType) -> None:
        self.type = new_type
        self.points = PIECE_POINTS.get(new_type, 0)

    def __repr__(self) -> str:
        moved = "*" if self.has_moved else ""
        return f"Piece({self.color} {self.type} @ {self.square.to_algebraic()}{moved})"
