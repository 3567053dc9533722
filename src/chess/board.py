"""The Game board: the single source of truth for where the pieces are (in chess: the `position`)"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Self

from src.chess.pieces import Piece
from src.chess.square import ALL_SQUARES, BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidSquareError
from src.core.shared_types import Color, PieceType

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
NUMBER_OF_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]


@dataclass(frozen=True)
class EnPassantTarget:
    """The square a pawn skipped over with its double step, and the color of that pawn."""

    square: Square
    color: Color


def _empty_squares() -> list[Optional[Piece]]:
    return [None] * NUMBER_OF_SQUARES


@dataclass
class Board:
    squares: list[Optional[Piece]] = field(default_factory=_empty_squares)
    turn: Color = Color.WHITE
    en_passant: Optional[EnPassantTarget] = None

    @classmethod
    def standard(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def from_fen(cls, fen_str: str, turn: Color = Color.WHITE) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        Every piece starts out as unmoved: castling and double steps still check the squares they start from.
        """
        board = cls(turn=turn)
        fen_by_ranks = fen_str.split(" ")[0].split("/")
        if len(fen_by_ranks) != BOARD_DIMENSIONS[1]:
            raise InvalidSquareError(f"FEN placement must have 8 ranks: {fen_str!r}")

        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    square = Square(file, rank)
                    board.place_piece(Piece.from_fen(character, square))
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
            if file != BOARD_DIMENSIONS[0]:
                raise InvalidSquareError(
                    f"Rank {rank + 1} of FEN {fen_str!r} does not describe 8 files."
                )
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece_at(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        if not square.is_within_bounds():
            return None
        return self.squares[square.index]

    def is_empty(self, square: Square) -> bool:
        return self.piece_at(square) is None

    def all_pieces(self) -> Iterator[Piece]:
        return (piece for piece in self.squares if piece is not None)

    def pieces(self, color: Color) -> list[Piece]:
        """Snapshot list: safe to iterate while simulating moves."""
        return [piece for piece in self.all_pieces() if piece.color == color]

    def find_piece(self, piece_type: PieceType, color: Color) -> Optional[Piece]:
        return next(
            (piece for piece in self.pieces(color) if piece.type == piece_type), None
        )

    def king(self, color: Color) -> Optional[Piece]:
        return self.find_piece(PieceType.KING, color)

    def empty_squares(self) -> list[Square]:
        return [square for square in ALL_SQUARES if self.is_empty(square)]

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: sum(piece.points for piece in self.pieces(color)) for color in Color}

    # --- MUTATIONS (keep Piece.square and the array in sync) ---
    def place_piece(self, piece: Piece) -> Optional[Piece]:
        """Put the piece on its square. Returns whatever stood there before (it is off the board now)."""
        if not piece.square.is_within_bounds():
            raise InvalidSquareError(f"Cannot place a piece on {piece.square}.")
        displaced = self.squares[piece.square.index]
        self.squares[piece.square.index] = piece
        return displaced

    def remove_piece(self, square: Square) -> Optional[Piece]:
        piece = self.piece_at(square)
        if piece is not None:
            self.squares[square.index] = None
        return piece

    def relocate(self, piece: Piece, destination: Square) -> Optional[Piece]:
        """Move a piece to a new square, returning the piece that got displaced (captured) there."""
        if not destination.is_within_bounds():
            raise InvalidSquareError(f"Cannot move {piece!r} to {destination}.")
        if self.piece_at(piece.square) is piece:
            self.squares[piece.square.index] = None
        piece.square = destination
        displaced = self.place_piece(piece)
        return displaced if displaced is not piece else None
