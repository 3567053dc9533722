"""
Legality filter
---

Pseudo-legal moves come from the movement rules in moves.py. A move is legal if, after making it,
your own king is not in check. We find that out by making the move on the real board,
asking the question, and putting everything back exactly as it was.

This one test covers both "do not walk into check" and "you must get out of check".
"""

from contextlib import contextmanager
from typing import Iterator

from src.chess.board import Board
from src.chess.moves import (
    MoveEffects,
    castling_rule_for,
    is_square_attacked,
    move_pieces,
    pseudo_moves,
)
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import Color


@contextmanager
def simulated_move(board: Board, piece: Piece, destination: Square) -> Iterator[MoveEffects]:
    """
    Temporarily make the move. Everything it touches is restored on exit, whatever happens inside the block:
    the squares array, the en passant target, and square/has_moved of the pieces that get relocated.

    Works for pieces that are not on the board yet too (they are simply dropped on the destination).
    """
    touched = [piece]
    rule = castling_rule_for(piece, destination, board)
    if rule is not None:
        rook = board.piece_at(rule.rook_from)
        assert rook is not None
        touched.append(rook)

    saved_squares = list(board.squares)
    saved_en_passant = board.en_passant
    saved_pieces = [(p, p.square, p.has_moved) for p in touched]
    try:
        effects = move_pieces(piece, destination, board)
        if effects.en_passant_capture:
            board.en_passant = None
        yield effects
    finally:
        board.squares[:] = saved_squares
        board.en_passant = saved_en_passant
        for moved_piece, square, has_moved in saved_pieces:
            moved_piece.square = square
            moved_piece.has_moved = has_moved


def king_in_check(color: Color, board: Board) -> bool:
    """Find the king and check if the opponent attacks its square. No king means no check."""
    king = board.king(color)
    if king is None:
        return False
    return is_square_attacked(king.square, color.opposite, board)


def leaves_king_safe(piece: Piece, destination: Square, board: Board) -> bool:
    """Would your own king be out of check after this move?"""
    with simulated_move(board, piece, destination):
        return not king_in_check(piece.color, board)


def legal_moves(piece: Piece, board: Board) -> set[Square]:
    """Candidate moves that do not put (or leave) your own king in check."""
    return {
        destination
        for destination in pseudo_moves(piece, board)
        if leaves_king_safe(piece, destination, board)
    }


def has_legal_moves(color: Color, board: Board) -> bool:
    # stops at the first piece that can move
    return any(legal_moves(piece, board) for piece in board.pieces(color))


def is_checkmate(color: Color, board: Board) -> bool:
    return king_in_check(color, board) and not has_legal_moves(color, board)


def is_stalemate(color: Color, board: Board) -> bool:
    return not king_in_check(color, board) and not has_legal_moves(color, board)
