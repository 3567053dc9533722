"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.
None of this knows whose turn it is.

Legality (not leaving your own king in check) is checked later by the legality module
"""

from dataclasses import dataclass
from typing import Callable, Optional

from src.chess.board import Board
from src.chess.castling import (
    CASTLING_RULES,
    CastlingSide,
    CastlingSquares,
    castling_rule_for_king_move,
)
from src.chess.pieces import PAWN_HOME_RANK, Piece, forward
from src.chess.square import Square
from src.core.shared_types import Color, PieceType

Vector = tuple[int, int]

KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = [
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]


# --- MOVEMENT RULES ---
def raycasting_move(piece: Piece, board: Board, directions: list[Vector]) -> set[Square]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moves: set[Square] = set()
    for df, dr in directions:
        target_square = piece.square.offset(df, dr)
        while target_square.is_within_bounds():
            occupant = board.piece_at(target_square)
            if occupant is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if occupant.color != piece.color:
                    moves.add(target_square)
                break

            moves.add(target_square)
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(piece: Piece, board: Board, deltas: list[Vector]) -> set[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moves: set[Square] = set()
    for df, dr in deltas:
        target_square = piece.square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece_at(target_square)
        if occupant is None or occupant.color != piece.color:
            moves.add(target_square)

    return moves


def candidate_pawn_moves(piece: Piece, board: Board) -> set[Square]:
    """
    A pawn:
    - moves by a single square forward (never captures that way).
    - It can move by two in their first move (so when unmoved and on their starting rank)
    - takes diagonally
    - takes en passant, onto the square the enemy pawn skipped over.
    """
    moves: set[Square] = set()
    direction = forward(piece.color)

    one_step = piece.square.offset(0, direction)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.add(one_step)

        two_steps = piece.square.offset(0, 2 * direction)
        on_home_rank = piece.square.rank == PAWN_HOME_RANK[piece.color]
        if not piece.has_moved and on_home_rank and board.is_empty(two_steps):
            moves.add(two_steps)

    # pawns take diagonally:
    for df in (1, -1):
        target_square = piece.square.offset(df, direction)
        if not target_square.is_within_bounds():
            continue
        occupant = board.piece_at(target_square)
        if occupant is not None and occupant.color != piece.color:
            moves.add(target_square)

        target = board.en_passant
        if target and target.square == target_square and target.color != piece.color:
            moves.add(target_square)
    return moves


def candidate_knight_moves(piece: Piece, board: Board) -> set[Square]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(piece, board, KNIGHT_DELTAS)


def candidate_bishop_moves(piece: Piece, board: Board) -> set[Square]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(piece, board, DIAGONALS)


def candidate_rook_moves(piece: Piece, board: Board) -> set[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(piece, board, STRAIGHTS)


def candidate_queen_moves(piece: Piece, board: Board) -> set[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_bishop_moves(piece, board) | candidate_rook_moves(piece, board)


def candidate_king_moves(piece: Piece, board: Board) -> set[Square]:
    """
    The king can move by a single square at the time, but never onto a square the opponent attacks.

    NOTE: this is the one piece whose candidate set already excludes squares that are under attack.
    Castling is modelled as a special king move (handled separately).
    """
    opponent = piece.color.opposite
    moves = {
        square
        for square in single_step_move(piece, board, KING_DELTAS)
        if not is_square_attacked(square, opponent, board)
    }
    moves.update(castling_moves(piece, board))
    return moves


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Piece, Board], set[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pseudo_moves(piece: Piece, board: Board) -> set[Square]:
    return MOVEMENT_RULES[piece.type](piece, board)


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_


    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered is an opponent's piece of one of the specified types.
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            piece_found = board.piece_at(target_square)
            if piece_found is not None:
                # only the first occupied square matters: anything behind it is blocked.
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.

    ---
    Returns TRUE if a piece of the specified color and type stands one step away along any of the deltas.
    """
    for df, dr in deltas:
        piece_found = board.piece_at(square.offset(df, dr))
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. Hence, vectors are exactly opposite to the ones used in `candidate_pawn_moves()`.
    A pawn attacks its diagonals whether or not something stands there; its forward push attacks nothing.
    """
    back = -forward(by_color)
    inverse_pawn_take_deltas: list[Vector] = [(1, back), (-1, back)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_on_diagonal(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and queens"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_on_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and queens"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    """
    The king's plain single steps. Castling never attacks anything, which also keeps
    `candidate_king_moves()` -> `is_square_attacked()` from recursing.
    """
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: list[IsAttackedFn] = [
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_on_diagonal,
    is_attacked_on_straight,
    is_attacked_by_king,
]


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


# -- CASTLING MOVES ---
def can_castle(king: Piece, side: CastlingSide, board: Board) -> bool:
    """
    **you are allowed to castle if**

    * king and rook both stand on their starting squares and neither has moved.
    * All squares strictly between them are empty.
    * None of the squares the king touches (start, pass-through, destination) is under attack.
      (So you cannot castle out of, through, or into check.)
    """
    if king.type != PieceType.KING or king.has_moved:
        return False

    rule = CASTLING_RULES[(king.color, side)]
    if king.square != rule.king_from:
        return False

    rook = board.piece_at(rule.rook_from)
    if (
        rook is None
        or rook.type != PieceType.ROOK
        or rook.color != king.color
        or rook.has_moved
    ):
        return False

    if any(not board.is_empty(square) for square in rule.between):
        return False

    opponent = king.color.opposite
    return not any(
        is_square_attacked(square, opponent, board) for square in rule.king_path
    )


def castling_moves(king: Piece, board: Board) -> set[Square]:
    return {
        CASTLING_RULES[(king.color, side)].king_to
        for side in CastlingSide
        if can_castle(king, side, board)
    }


# -- MOVE MECHANICS (shared by real moves and simulated ones) --
@dataclass
class MoveEffects:
    """What happened on the board besides the moving piece changing squares."""

    captured: Optional[Piece] = None
    castling: Optional[CastlingSquares] = None
    castling_rook: Optional[Piece] = None
    en_passant_capture: bool = False


def castling_rule_for(piece: Piece, destination: Square, board: Board) -> Optional[CastlingSquares]:
    """
    An unmoved king going two files along its home rank, with its own unmoved rook in the corner
    and nothing in between, is castling. Anything else is just a (forced) king move.
    """
    if piece.type != PieceType.KING or piece.has_moved:
        return None
    rule = castling_rule_for_king_move(piece.color, piece.square, destination)
    if rule is None:
        return None
    rook = board.piece_at(rule.rook_from)
    if rook is None or rook.type != PieceType.ROOK or rook.color != piece.color or rook.has_moved:
        return None
    if any(not board.is_empty(square) for square in rule.between):
        return None
    return rule


def en_passant_victim_square(piece: Piece, destination: Square, board: Board) -> Optional[Square]:
    """If this is an en passant capture: the square of the pawn that gets taken (one rank behind the destination)."""
    target = board.en_passant
    if (
        piece.type != PieceType.PAWN
        or target is None
        or target.color == piece.color
        or target.square != destination
    ):
        return None
    victim_square = destination.offset(0, -forward(piece.color))
    victim = board.piece_at(victim_square)
    if victim is None or victim.type != PieceType.PAWN or victim.color == piece.color:
        return None
    return victim_square


def move_pieces(piece: Piece, destination: Square, board: Board) -> MoveEffects:
    """
    Displace the pieces involved in moving `piece` to `destination`:
    1. castling: the rook jumps over the king
    2. en passant: the pawn behind the destination disappears
    3. ordinary capture at the destination
    4. the piece itself lands on the destination

    Flags (`has_moved`, en passant target) are left alone. The caller decides what to do with those.
    """
    effects = MoveEffects()

    rule = castling_rule_for(piece, destination, board)
    if rule is not None:
        rook = board.piece_at(rule.rook_from)
        assert rook is not None
        board.relocate(rook, rule.rook_to)
        effects.castling = rule
        effects.castling_rook = rook

    victim_square = en_passant_victim_square(piece, destination, board)
    if victim_square is not None:
        effects.captured = board.remove_piece(victim_square)
        effects.en_passant_capture = True

    captured_on_destination = board.relocate(piece, destination)
    if captured_on_destination is not None:
        effects.captured = captured_on_destination
    return effects
