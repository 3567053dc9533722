"""
The Game class is the entrypoint into the domain layer for the service layer.
It is the only thing that mutates the Board during play: it tracks the turn, runs the move mechanics,
handles promotion and en passant bookkeeping, and decides when the game is over.

Every public operation returns a `MoveOutcome` instead of raising: a rejected move is a no-op.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Self

from src.chess.board import Board, EnPassantTarget
from src.chess.legality import (
    is_checkmate,
    is_stalemate,
    king_in_check,
    legal_moves,
)
from src.chess.moves import MoveEffects, move_pieces
from src.chess.pieces import PIECE_TO_FEN, PROMOTION_RANK, Piece, forward
from src.chess.square import Square
from src.core.models import GameModel
from src.core.shared_types import Color, PieceType, Rejection, Status

log = logging.getLogger(__name__)

# Asked which piece a pawn becomes when the human's pawn reaches the last rank
PromotionChooser = Callable[[Piece], PieceType]


@dataclass(frozen=True)
class MoveOutcome:
    """Result of any attempt to change the board: either applied, or rejected with a reason."""

    applied: bool
    reason: Optional[Rejection] = None
    notation: str = ""
    detail: str = ""

    @classmethod
    def accepted(cls, notation: str) -> Self:
        return cls(applied=True, notation=notation)

    @classmethod
    def rejected(cls, reason: Rejection, detail: str = "") -> Self:
        return cls(applied=False, reason=reason, detail=detail)


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    player_color: Color
    status: Status = Status.NOT_STARTED
    message: str = ""
    moves: list[str] = field(default_factory=list)
    promotion_chooser: Optional[PromotionChooser] = None

    @classmethod
    def new_game(
        cls,
        player_color: Color,
        promotion_chooser: Optional[PromotionChooser] = None,
    ) -> Self:
        """A game in the standard starting position, waiting for `start()`. The human plays `player_color`."""
        return cls(
            board=Board.standard(),
            player_color=player_color,
            promotion_chooser=promotion_chooser,
        )

    @property
    def ai_color(self) -> Color:
        return self.player_color.opposite

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    @property
    def turn(self) -> Color:
        return self.board.turn

    def start(self) -> None:
        if self.status == Status.NOT_STARTED:
            self._change_status(Status.IN_PROGRESS)

    def reset(self) -> None:
        """Back to the starting position, white to move, game in progress. Clears every bit of transient state."""
        self.board = Board.standard()
        self.moves.clear()
        self.message = ""
        self._change_status(Status.IN_PROGRESS)
        log.info("Game reset. Human plays %s.", self.player_color)

    # --- QUERIES ---
    def legal_moves(self, square: Square) -> list[Square]:
        """Legal destinations for the piece on this square (for highlighting). Empty if there is no piece."""
        piece = self.board.piece_at(square)
        if piece is None:
            return []
        return sorted(legal_moves(piece, self.board))

    def legal_moves_for(self, piece: Piece) -> set[Square]:
        return legal_moves(piece, self.board)

    def king_in_check(self, color: Color) -> bool:
        return king_in_check(color, self.board)

    def is_checkmate(self, color: Color) -> bool:
        return is_checkmate(color, self.board)

    def is_stalemate(self, color: Color) -> bool:
        return is_stalemate(color, self.board)

    def snapshot(self) -> GameModel:
        """Encode into a format the Service layer uses"""
        en_passant = self.board.en_passant
        return GameModel(
            position_fen=self.board.to_fen(),
            pieces={
                piece.square.to_algebraic(): piece.to_fen()
                for piece in self.board.all_pieces()
            },
            color_to_move=str(self.board.turn),
            player_color=str(self.player_color),
            status=str(self.status),
            message=self.message,
            moves=list(self.moves),
            en_passant_square=en_passant.square.to_algebraic() if en_passant else None,
        )

    # --- MUTATIONS ---
    def apply_move(
        self,
        piece: Piece,
        destination: Square,
        promote_to: Optional[PieceType] = None,
    ) -> MoveOutcome:
        """Make a move that obeys the rules of chess. Anything else is rejected without touching the board."""
        rejection = self._check_can_move(piece, destination)
        if rejection:
            return rejection

        if destination not in legal_moves(piece, self.board):
            return MoveOutcome.rejected(
                Rejection.ILLEGAL_DESTINATION,
                f"{piece!r} cannot move to {destination.to_algebraic()}",
            )

        return self._execute(piece, destination, promote_to)

    def apply_forced_move(
        self,
        piece: Piece,
        destination: Square,
        promote_to: Optional[PieceType] = None,
    ) -> MoveOutcome:
        """
        Same mechanics as `apply_move()` without consulting the rules of chess.

        NOTE: the caller is responsible for the rule-breaking safety checks (no self king capture, check must be resolved).
        """
        rejection = self._check_can_move(piece, destination)
        if rejection:
            return rejection
        return self._execute(piece, destination, promote_to, forced=True)

    def spawn_piece(
        self,
        piece_type: PieceType,
        color: Color,
        square: Square,
        end_turn: bool = False,
    ) -> MoveOutcome:
        """
        Create a new piece (counts as already moved). Whatever stood on the square is removed.
        Only ever used when rules are being broken. With `end_turn` the spawn is the player's whole move.
        """
        if self.is_over:
            return MoveOutcome.rejected(Rejection.GAME_OVER, self.message)
        if self.status != Status.IN_PROGRESS:
            return MoveOutcome.rejected(Rejection.NOT_STARTED, "Game has not started yet.")
        if not square.is_within_bounds():
            return MoveOutcome.rejected(Rejection.INVALID_SQUARE, str(square))

        piece = Piece(piece_type, color, square, has_moved=True)
        displaced = self.board.place_piece(piece)
        notation = f"{PIECE_TO_FEN[piece_type].upper()}@{square.to_algebraic()}"
        log.info(
            "Spawned %s %s at %s%s",
            color,
            piece_type,
            square.to_algebraic(),
            f" (removing {displaced!r})" if displaced else "",
        )
        if end_turn:
            self.moves.append(notation)
            self._end_turn()
        else:
            self._check_for_missing_kings()
        return MoveOutcome.accepted(notation)

    # -- PRIVATE HELPERS ---
    def _check_can_move(self, piece: Piece, destination: Square) -> Optional[MoveOutcome]:
        if self.is_over:
            return MoveOutcome.rejected(Rejection.GAME_OVER, self.message)
        if self.status != Status.IN_PROGRESS:
            return MoveOutcome.rejected(Rejection.NOT_STARTED, "Game has not started yet.")
        if not destination.is_within_bounds():
            return MoveOutcome.rejected(Rejection.INVALID_SQUARE, str(destination))
        if self.board.piece_at(piece.square) is not piece:
            return MoveOutcome.rejected(
                Rejection.MISSING_PIECE, f"{piece!r} is not on the board."
            )
        if piece.color != self.board.turn:
            return MoveOutcome.rejected(
                Rejection.NOT_YOUR_TURN, f"It is {self.board.turn}'s turn."
            )
        return None

    def _execute(
        self,
        piece: Piece,
        destination: Square,
        promote_to: Optional[PieceType],
        forced: bool = False,
    ) -> MoveOutcome:
        """
        Update the board:
        ----

        1. castling rook relocation / en passant capture / ordinary capture / moving the piece (moves.py)
        2. the piece has now moved
        3. pawn on the last rank gets promoted
        4. update the en passant target
        5. flip the turn and check for the end of the game
        """
        from_square = piece.square

        # The en passant chance of the side that is moving now has expired.
        if self.board.en_passant and self.board.en_passant.color == piece.color:
            self.board.en_passant = None

        effects = move_pieces(piece, destination, self.board)
        piece.has_moved = True
        if effects.castling_rook is not None:
            effects.castling_rook.has_moved = True

        promoted_to = self._promote_if_needed(piece, promote_to)
        self._update_en_passant_target(piece, from_square, destination, effects)

        notation = f"{from_square.to_algebraic()}{destination.to_algebraic()}"
        if promoted_to:
            notation += PIECE_TO_FEN[promoted_to]
        self.moves.append(notation)
        self._log_move(piece, notation, effects, forced)

        self._end_turn()
        return MoveOutcome.accepted(notation)

    def _promote_if_needed(
        self, piece: Piece, promote_to: Optional[PieceType]
    ) -> Optional[PieceType]:
        """Explicit choice first, then ask the human (if it is their pawn), otherwise a Queen."""
        if piece.type != PieceType.PAWN:
            return None
        if piece.square.rank != PROMOTION_RANK[piece.color]:
            return None

        new_type = promote_to
        if new_type is None and piece.color == self.player_color and self.promotion_chooser:
            new_type = self.promotion_chooser(piece)
        if new_type in (None, PieceType.PAWN, PieceType.KING):
            new_type = PieceType.QUEEN

        assert new_type is not None
        piece.promote_to(new_type)
        return new_type

    def _update_en_passant_target(
        self,
        piece: Piece,
        from_square: Square,
        destination: Square,
        effects: MoveEffects,
    ) -> None:
        if effects.en_passant_capture:
            self.board.en_passant = None

        step = forward(piece.color)
        advanced_two = destination.rank - from_square.rank == 2 * step
        if piece.type == PieceType.PAWN and advanced_two and from_square.file == destination.file:
            skipped = destination.offset(0, -step)
            self.board.en_passant = EnPassantTarget(skipped, piece.color)

    def _end_turn(self) -> None:
        """
        Flip the turn and see if the game has ended.

        NOTE a missing king ends the game before checkmate / stalemate are even considered.
        """
        self.board.turn = self.board.turn.opposite
        if self._check_for_missing_kings():
            return

        next_color = self.board.turn
        if is_checkmate(next_color, self.board):
            self.message = f"{next_color.opposite.capitalize()} wins by checkmate!"
            self._change_status(Status.CHECKMATE)
        elif is_stalemate(next_color, self.board):
            self.message = "Stalemate! The game is a draw."
            self._change_status(Status.STALEMATE)

    def _check_for_missing_kings(self) -> bool:
        for color in Color:
            if self.board.king(color) is None:
                self.message = (
                    f"{color.opposite.capitalize()} wins! "
                    f"{color.capitalize()} king has been captured."
                )
                self._change_status(Status.KING_CAPTURED)
                return True
        return False

    def _change_status(self, new_status: Status) -> None:
        if new_status.is_terminal:
            log.info("Game over (%s): %s", new_status, self.message)
        self.status = new_status

    def _log_move(
        self, piece: Piece, notation: str, effects: MoveEffects, forced: bool
    ) -> None:
        extras = []
        if effects.castling:
            extras.append("castling")
        if effects.en_passant_capture:
            extras.append("en passant")
        if effects.captured:
            extras.append(f"captures {effects.captured!r}")
        if forced:
            extras.append("forced")
        log.info(
            "%s %s plays %s%s",
            piece.color,
            piece.type,
            notation,
            f" ({', '.join(extras)})" if extras else "",
        )
