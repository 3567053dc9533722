"""
Turning free-form move text into a (piece, destination) pair.
---

Accepted (best effort, first match wins):
1. castling markers: "O-O", "O-O-O" (also written with zeros)
2. coordinate pairs: "e2e4", "e7e8Q", "e7e8=Q"
3. piece letter + destination: "Nf3", "Bxe5", "Nbd7", bare pawn moves "e4", "exd5", "e8=Q"

Nothing here touches the board. Whether the move may actually be made is decided by the referee.
"""

import re
from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingSide
from src.chess.legality import legal_moves
from src.chess.pieces import FEN_TO_PIECE, Piece
from src.chess.square import FILE_NAMES, Square
from src.core.exceptions import InvalidSquareError
from src.core.shared_types import Color, PieceType, Rejection

PROMOTION_LETTERS = "qrbn"

# Piece letter (optional), disambiguation hint (optional), destination, promotion (optional)
PIECE_MOVE_PATTERN = re.compile(
    r"^(?P<piece>[PNBRQKnrqk])?(?P<hint>[a-h]?[1-8]?)(?P<dest>[a-h][1-8])(?:=?(?P<promo>[QRBNqrbn]))?$"
)
CASTLING_PATTERN = re.compile(r"[O0]-?[O0](?P<long>-?[O0])?", re.IGNORECASE)


@dataclass(frozen=True)
class MoveCandidate:
    """
    What the text asks for.

    `synthesized`: the source square was empty, so a pawn would have to be created there first.
    `spawn`: the mover has no pieces at all, so the piece would be created on the destination.
    Both only make sense when rules are being broken.
    """

    piece: Piece
    destination: Square
    promote_to: Optional[PieceType] = None
    synthesized: bool = False
    spawn: bool = False


@dataclass(frozen=True)
class ParseFailure:
    reason: Rejection
    detail: str = ""


Interpretation = MoveCandidate | ParseFailure


def normalize(text: str) -> str:
    """Strip whitespace, quotes and trailing punctuation, and drop check/capture markers."""
    cleaned = "".join(text.split())
    cleaned = cleaned.strip("\"'`.,;:!?()[]")
    for marker in ("+", "#", "x", "X", ":"):
        cleaned = cleaned.replace(marker, "")
    return cleaned


def interpret(text: str, moving_color: Color, board: Board) -> Interpretation:
    """
    Parse the text as a move for `moving_color`.
    Chatty replies are common, so if the whole text does not parse, each word is tried in turn.
    """
    result = _interpret_token(text, moving_color, board)
    if isinstance(result, MoveCandidate):
        return result

    words = text.split()
    if len(words) > 1:
        for word in words:
            attempt = _interpret_token(word, moving_color, board)
            if isinstance(attempt, MoveCandidate):
                return attempt
            if attempt.reason != Rejection.UNPARSEABLE:
                # it did read as a move, just not one we can accept. Report that rather than "unparseable".
                result = attempt
                break
    return result


def _interpret_token(text: str, moving_color: Color, board: Board) -> Interpretation:
    cleaned = normalize(text)
    if not cleaned:
        return ParseFailure(Rejection.UNPARSEABLE, "empty move text")

    castling = _parse_castling(cleaned, moving_color, board)
    if castling is not None:
        return castling

    coordinates = _parse_coordinates(cleaned, moving_color, board)
    if coordinates is not None:
        return coordinates

    piece_move = _parse_piece_move(cleaned, moving_color, board)
    if piece_move is not None:
        return piece_move

    return ParseFailure(Rejection.UNPARSEABLE, f"cannot read {text!r} as a move")


# --- 1. CASTLING ---
def _parse_castling(cleaned: str, moving_color: Color, board: Board) -> Optional[Interpretation]:
    match = CASTLING_PATTERN.fullmatch(cleaned)
    if match is None:
        return None

    side = CastlingSide.QUEEN_SIDE if match.group("long") else CastlingSide.KING_SIDE
    king = board.king(moving_color)
    if king is None:
        return ParseFailure(Rejection.MISSING_PIECE, f"{moving_color} has no king to castle with")
    return MoveCandidate(king, CASTLING_RULES[(moving_color, side)].king_to)


# --- 2. COORDINATE PAIRS ---
def _parse_coordinates(cleaned: str, moving_color: Color, board: Board) -> Optional[Interpretation]:
    text = cleaned.replace("-", "").replace("=", "")
    if len(text) < 4:
        return None
    try:
        source = Square.from_algebraic(text[:2])
        destination = Square.from_algebraic(text[2:4])
    except InvalidSquareError:
        return None

    rest = text[4:]
    promote_to: Optional[PieceType] = None
    if rest:
        if len(rest) != 1 or rest.lower() not in PROMOTION_LETTERS:
            return None
        promote_to = FEN_TO_PIECE[rest.lower()]

    occupant = board.piece_at(source)
    if occupant is not None and occupant.color != moving_color:
        return ParseFailure(
            Rejection.WRONG_COLOR,
            f"{source.to_algebraic()} holds {occupant!r}; cannot move the opponent's piece",
        )

    if occupant is None:
        # Nothing on the source square: a pawn would have to be conjured up there first.
        pawn = Piece(PieceType.PAWN, moving_color, source, has_moved=True)
        return MoveCandidate(pawn, destination, promote_to, synthesized=True)

    return MoveCandidate(occupant, destination, promote_to)


# --- 3. PIECE LETTER + DESTINATION ---
def _parse_piece_move(cleaned: str, moving_color: Color, board: Board) -> Optional[Interpretation]:
    if not 2 <= len(cleaned) <= 5:
        return None
    match = PIECE_MOVE_PATTERN.match(cleaned)
    if match is None:
        # pawn moves written in capitals ("E4", "ED5"): lower everything but a leading piece letter
        match = PIECE_MOVE_PATTERN.match(_lower_squares(cleaned))
        if match is None:
            return None

    letter = match.group("piece")
    piece_type = FEN_TO_PIECE[letter.lower()] if letter else PieceType.PAWN
    destination = Square.from_algebraic(match.group("dest"))
    promo = match.group("promo")
    promote_to = FEN_TO_PIECE[promo.lower()] if promo else None
    hint = match.group("hint")

    piece = _choose_piece(piece_type, moving_color, destination, hint, board)
    if piece is None:
        # Nothing of that color is left at all: this is a request to create the piece on the destination.
        spawned = Piece(piece_type, moving_color, destination, has_moved=True)
        return MoveCandidate(spawned, destination, promote_to, spawn=True)
    return MoveCandidate(piece, destination, promote_to)


def _lower_squares(cleaned: str) -> str:
    """'E4' -> 'e4', 'NF3' -> 'Nf3'. A leading B stays a bishop."""
    if cleaned[0] in "NBRQK" and len(cleaned) > 2:
        return cleaned[0] + cleaned[1:].lower()
    return cleaned.lower()


def _choose_piece(
    piece_type: PieceType,
    color: Color,
    destination: Square,
    hint: str,
    board: Board,
) -> Optional[Piece]:
    """
    Which piece is meant?
    1. pieces of the requested type matching the hint (file and/or rank)
    2. any piece of the requested type
    3. any piece of that color at all
    Within 1. and 2. a piece that can legally go there is preferred.
    """
    own_pieces = board.pieces(color)
    same_type = [piece for piece in own_pieces if piece.type == piece_type]
    matching_hint = [piece for piece in same_type if _matches_hint(piece, hint)]

    for candidates in (matching_hint, same_type):
        if not candidates:
            continue
        for piece in candidates:
            if destination in legal_moves(piece, board):
                return piece
        return candidates[0]
    if own_pieces:
        return own_pieces[0]
    return None


def _matches_hint(piece: Piece, hint: str) -> bool:
    for character in hint:
        if character in FILE_NAMES and piece.square.file != FILE_NAMES.index(character):
            return False
        if character.isdigit() and piece.square.rank != int(character) - 1:
            return False
    return True
