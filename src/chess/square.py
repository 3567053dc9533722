"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)

FILE_NAMES = "abcdefgh"


@dataclass(frozen=True, order=True)
class Square:
    """Zero-based coordinates: file 0 is the a-file, rank 0 is the 1st rank."""

    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        name = sq.strip().lower()
        if len(name) != 2 or name[0] not in FILE_NAMES or not name[1].isdigit():
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square name.")

        square = cls(FILE_NAMES.index(name[0]), int(name[1]) - 1)
        if not square.is_within_bounds():
            raise InvalidSquareError(f"Square {sq!r} is not on the board.")
        return square

    def to_algebraic(self) -> str:
        if not self.is_within_bounds():
            raise InvalidSquareError(f"{self} is not on the board.")
        return f"{FILE_NAMES[self.file]}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        return Square(self.file + df, self.rank + dr)

    @property
    def index(self) -> int:
        """Position in the flat 64-entry board array."""
        return self.rank * BOARD_DIMENSIONS[0] + self.file


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for rank in range(BOARD_DIMENSIONS[1])
    for file in range(BOARD_DIMENSIONS[0])
)


def name_to_square(name: str) -> Square:
    return Square.from_algebraic(name)


def square_to_name(square: Square) -> str:
    return square.to_algebraic()
