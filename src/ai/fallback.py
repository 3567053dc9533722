"""
Fallback move synthesis
---

Used whenever the model's answer cannot be played. Always produces a move, so the turn always moves on:

1. pick a random own piece and play one of its legal moves at random
2. in check and that piece has no legal moves: try random destinations (at most `destination_cap`)
   that get the king out of check, ignoring the rest of the rules
3. no pieces at all: spawn a pawn on a random square
4. nothing found within `max_attempts`: one last forced move (or spawn) that only avoids the own king
"""

import logging
import random

from src.chess.game import Game, MoveOutcome
from src.chess.legality import leaves_king_safe
from src.chess.pieces import Piece
from src.chess.square import ALL_SQUARES, Square
from src.core.shared_types import Color, PieceType

log = logging.getLogger(__name__)


class FallbackSynthesizer:
    def __init__(
        self,
        game: Game,
        color: Color,
        rng: random.Random,
        max_attempts: int = 1000,
        destination_cap: int = 64,
    ):
        self.game = game
        self.color = color
        self.rng = rng
        self.max_attempts = max_attempts
        self.destination_cap = destination_cap

    def synthesize(self) -> MoveOutcome:
        in_check = self.game.king_in_check(self.color)
        for _ in range(self.max_attempts):
            pieces = self.game.board.pieces(self.color)
            if not pieces:
                return self._spawn_pawn()

            piece = self.rng.choice(pieces)
            destinations = sorted(self.game.legal_moves_for(piece))
            if destinations:
                destination = self.rng.choice(destinations)
                log.info("Fallback: %r to %s", piece, destination.to_algebraic())
                return self.game.apply_move(piece, destination)

            if in_check:
                outcome = self._escape_check(piece)
                if outcome is not None:
                    return outcome

        log.warning("Fallback: no move found after %d attempts, forcing one", self.max_attempts)
        return self._last_resort()

    def _escape_check(self, piece: Piece) -> MoveOutcome | None:
        """Anywhere on the board, as long as the king is safe afterwards."""
        for _ in range(self.destination_cap):
            destination = self._random_square()
            if destination == piece.square or self._holds_own_king(destination):
                continue
            if leaves_king_safe(piece, destination, self.game.board):
                log.info("Fallback: %r breaks the rules to %s to escape check", piece, destination.to_algebraic())
                return self.game.apply_forced_move(piece, destination)
        return None

    def _spawn_pawn(self) -> MoveOutcome:
        empty = self.game.board.empty_squares()
        square = self.rng.choice(empty) if empty else self._random_square()
        log.info("Fallback: %s has no pieces, spawning a pawn on %s", self.color, square.to_algebraic())
        return self.game.spawn_piece(PieceType.PAWN, self.color, square, end_turn=True)

    def _last_resort(self) -> MoveOutcome:
        pieces = self.game.board.pieces(self.color)
        if not pieces:
            return self._spawn_pawn()

        piece = self.rng.choice(pieces)
        destinations = [
            square
            for square in ALL_SQUARES
            if square != piece.square and not self._holds_own_king(square)
        ]
        if not destinations:
            return self._spawn_pawn()
        destination = self.rng.choice(destinations)
        log.warning("Fallback: last resort, %r to %s", piece, destination.to_algebraic())
        return self.game.apply_forced_move(piece, destination)

    def _random_square(self) -> Square:
        return self.rng.choice(ALL_SQUARES)

    def _holds_own_king(self, square: Square) -> bool:
        occupant = self.game.board.piece_at(square)
        return occupant is not None and occupant.type == PieceType.KING and occupant.color == self.color
