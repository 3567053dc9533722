"""
The referee decides whether an interpreted move may be played, and plays it.
---

Always enforced, whatever the mode:
* you only move your own pieces
* you never capture your own king
* if your king is in check, the move has to get it out of check

With normal rules the destination must also be a legal move of that piece.
When rules are being broken that last requirement is dropped and the move is forced onto the board.
"""

import logging
from typing import Optional

from src.chess.board import Board
from src.chess.game import Game, MoveOutcome
from src.chess.legality import king_in_check, leaves_king_safe, legal_moves
from src.chess.notation import MoveCandidate, ParseFailure, interpret
from src.core.shared_types import Color, PieceType, Rejection

log = logging.getLogger(__name__)


def validate(
    candidate: MoveCandidate, color: Color, board: Board, rule_breaking: bool
) -> Optional[ParseFailure]:
    """Return the reason the move is not allowed, or None if it may be played."""
    piece = candidate.piece
    destination = candidate.destination

    if piece.color != color:
        return ParseFailure(Rejection.WRONG_COLOR, f"{piece!r} does not belong to {color}")

    target = board.piece_at(destination)
    if target is not None and target.type == PieceType.KING and target.color == color:
        return ParseFailure(
            Rejection.SELF_KING_CAPTURE,
            f"{destination.to_algebraic()} holds your own king",
        )

    if king_in_check(color, board) and not leaves_king_safe(piece, destination, board):
        return ParseFailure(
            Rejection.UNRESOLVED_CHECK,
            f"{color} king is in check and {destination.to_algebraic()} does not resolve it",
        )

    if rule_breaking:
        return None

    if candidate.synthesized or candidate.spawn:
        return ParseFailure(
            Rejection.MISSING_PIECE,
            f"no {color} piece to move to {destination.to_algebraic()}",
        )
    if destination not in legal_moves(piece, board):
        return ParseFailure(
            Rejection.ILLEGAL_DESTINATION,
            f"{piece!r} cannot legally move to {destination.to_algebraic()}",
        )
    return None


def play_candidate(game: Game, candidate: MoveCandidate, rule_breaking: bool) -> MoveOutcome:
    """Put an already validated move on the board."""
    piece = candidate.piece
    if not rule_breaking:
        return game.apply_move(piece, candidate.destination, candidate.promote_to)

    if candidate.spawn:
        return game.spawn_piece(piece.type, piece.color, candidate.destination, end_turn=True)

    if candidate.synthesized:
        spawned = game.spawn_piece(piece.type, piece.color, piece.square)
        if not spawned.applied:
            return spawned
        conjured = game.board.piece_at(piece.square)
        assert conjured is not None
        piece = conjured

    return game.apply_forced_move(piece, candidate.destination, candidate.promote_to)


def submit_move(game: Game, text: str, color: Color, rule_breaking: bool = False) -> MoveOutcome:
    """
    Interpret `text` as a move for `color`, validate it and play it.
    Never raises: any problem comes back as a rejected MoveOutcome and the board is left untouched.
    """
    if game.is_over:
        return MoveOutcome.rejected(Rejection.GAME_OVER, game.message)
    if game.turn != color:
        return MoveOutcome.rejected(Rejection.NOT_YOUR_TURN, f"It is {game.turn}'s turn.")

    interpretation = interpret(text, color, game.board)
    if isinstance(interpretation, ParseFailure):
        log.warning("Rejected %r for %s: %s", text, color, interpretation.detail)
        return MoveOutcome.rejected(interpretation.reason, interpretation.detail)

    failure = validate(interpretation, color, game.board, rule_breaking)
    if failure is not None:
        log.warning("Rejected %r for %s: %s", text, color, failure.detail)
        return MoveOutcome.rejected(failure.reason, failure.detail)

    if interpretation.synthesized:
        log.warning(
            "%r moves from an empty square: a %s pawn is conjured up on %s first",
            text,
            color,
            interpretation.piece.square.to_algebraic(),
        )
    return play_candidate(game, interpretation, rule_breaking)
