"""Unit tests for /src/chess/legality.py"""

import copy

import pytest

from src.chess.board import STARTING_POSITION, Board, EnPassantTarget
from src.chess.game import Game
from src.chess.legality import (
    has_legal_moves,
    is_checkmate,
    is_stalemate,
    king_in_check,
    leaves_king_safe,
    legal_moves,
    simulated_move,
)
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import Color, PieceType, Status


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def names(squares: set[Square]) -> set[str]:
    return {square.to_algebraic() for square in squares}


CHECKMATE_POSITION = {"g1": "K", "f2": "P", "g2": "P", "h2": "P", "a1": "r", "g8": "k"}
STALEMATE_POSITION = {"h8": "k", "g6": "Q", "f7": "K"}


# --- SIMULATION ---
def test_simulated_move_restores_everything(make_board) -> None:
    board = make_board({"e1": "K", "h1": "R", "e5": "P", "d5": "p", "e8": "k"})
    board.en_passant = EnPassantTarget(sq("d6"), Color.BLACK)
    before = list(board.squares)
    king = board.piece_at(sq("e1"))
    rook = board.piece_at(sq("h1"))
    pawn = board.piece_at(sq("e5"))

    with simulated_move(board, king, sq("g1")) as effects:
        assert effects.castling is not None
        assert rook.square == sq("f1")
    with simulated_move(board, pawn, sq("d6")) as effects:
        assert effects.en_passant_capture
        assert board.en_passant is None

    assert board.squares == before
    assert board.en_passant == EnPassantTarget(sq("d6"), Color.BLACK)
    assert king.square == sq("e1") and not king.has_moved
    assert rook.square == sq("h1") and not rook.has_moved
    assert pawn.square == sq("e5")


def test_simulated_move_restores_after_exception(make_board) -> None:
    board = make_board({"a1": "R", "a8": "r"})
    before = list(board.squares)
    rook = board.piece_at(sq("a1"))
    with pytest.raises(RuntimeError):
        with simulated_move(board, rook, sq("a8")):
            raise RuntimeError("boom")
    assert board.squares == before
    assert rook.square == sq("a1")


def test_simulating_a_piece_that_is_not_on_the_board(make_board) -> None:
    """Conjured pieces (rule-breaking) can still be checked for king safety."""
    board = make_board({"e1": "K", "e8": "q"})
    blocker = Piece(PieceType.PAWN, Color.WHITE, sq("a3"))
    assert leaves_king_safe(blocker, sq("e4"), board)
    assert not leaves_king_safe(blocker, sq("a4"), board)
    assert board.is_empty(sq("e4"))
    assert blocker.square == sq("a3")


# --- CHECK ---
def test_no_king_means_no_check(make_board) -> None:
    assert not king_in_check(Color.WHITE, make_board({"e8": "q"}))


def test_queen_gives_check_and_d1_is_available(make_board) -> None:
    board = make_board({"e1": "K", "e8": "q", "h8": "k"})
    king = board.king(Color.WHITE)
    assert king_in_check(Color.WHITE, board)
    assert names(legal_moves(king, board)) == {"d1", "d2", "f1", "f2"}


def test_d1_excluded_when_attacked(make_board) -> None:
    board = make_board({"e1": "K", "e8": "q", "d8": "r", "h8": "k"})
    assert names(legal_moves(board.king(Color.WHITE), board)) == {"f1", "f2"}


def test_king_cannot_retreat_along_the_checking_line(make_board) -> None:
    """e1 looks safe while the king itself still blocks the rook's ray. The simulation sees through that."""
    board = make_board({"e2": "K", "e8": "r", "a8": "k"})
    assert "e1" not in names(legal_moves(board.king(Color.WHITE), board))


def test_pinned_piece_has_no_legal_moves(make_board) -> None:
    board = make_board({"e1": "K", "e2": "B", "e8": "r"})
    assert legal_moves(board.piece_at(sq("e2")), board) == set()


def test_only_check_resolving_moves_remain(make_board) -> None:
    board = make_board({"e1": "K", "a2": "R", "e8": "r", "a8": "k"})
    rook = board.piece_at(sq("a2"))
    assert names(legal_moves(rook, board)) == {"e2"}


def test_en_passant_cannot_expose_the_king(make_board) -> None:
    """Taking en passant removes two pawns from the 5th rank, opening it for the rook."""
    board = make_board({"a5": "K", "b5": "P", "c5": "p", "h5": "r", "h8": "k"})
    board.en_passant = EnPassantTarget(sq("c6"), Color.BLACK)
    assert "c6" not in names(legal_moves(board.piece_at(sq("b5")), board))


# --- TERMINAL PREDICATES ---
def test_checkmate(make_board) -> None:
    board = make_board(CHECKMATE_POSITION)
    assert is_checkmate(Color.WHITE, board)
    assert not is_stalemate(Color.WHITE, board)
    assert not has_legal_moves(Color.WHITE, board)


def test_stalemate(make_board) -> None:
    board = make_board(STALEMATE_POSITION, turn=Color.BLACK)
    assert is_stalemate(Color.BLACK, board)
    assert not is_checkmate(Color.BLACK, board)


@pytest.mark.parametrize(
    "placement",
    [
        CHECKMATE_POSITION,
        STALEMATE_POSITION,
        {"e1": "K", "e8": "q", "h8": "k"},
        {"e1": "K", "e8": "k"},
        {"a1": "K", "b3": "q", "h8": "k"},
    ],
)
@pytest.mark.parametrize("color", list(Color))
def test_checkmate_and_stalemate_are_exclusive(placement: dict[str, str], color: Color, make_board) -> None:
    board = make_board(placement)
    assert not (is_checkmate(color, board) and is_stalemate(color, board))


def test_starting_position_has_twenty_legal_moves() -> None:
    board = Board.standard()
    assert sum(len(legal_moves(piece, board)) for piece in board.pieces(Color.WHITE)) == 20


# --- MOVE TREE SWEEP ---
KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R"
ENDGAME = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8"


def count_leaf_moves(game: Game, depth: int) -> int:
    """
    Walk the tree of legal moves (a perft count). Every move is played with `apply_move()` on a copy of the game
    and must never leave the mover's own king in check.
    """
    if depth == 0:
        return 1
    total = 0
    mover = game.turn
    for piece in game.board.pieces(mover):
        for destination in sorted(game.legal_moves_for(piece)):
            child = copy.deepcopy(game)
            outcome = child.apply_move(child.board.piece_at(piece.square), destination)
            assert outcome.applied, f"{outcome.notation or destination} rejected: {outcome.reason}"
            assert not child.king_in_check(mover), f"{child.moves[-1]} leaves the {mover} king in check"
            total += count_leaf_moves(child, depth - 1)
    return total


@pytest.mark.parametrize(
    "fen, depth, expected",
    [
        (STARTING_POSITION, 2, 400),
        (KIWIPETE, 2, 2039),
        (ENDGAME, 3, 2812),
    ],
)
def test_legal_moves_never_leave_the_king_in_check(fen: str, depth: int, expected: int) -> None:
    game = Game(board=Board.from_fen(fen), player_color=Color.WHITE, status=Status.IN_PROGRESS)
    assert count_leaf_moves(game, depth) == expected
