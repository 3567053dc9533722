"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.chess.square import Square
from src.core.exceptions import InvalidRequestError, InvalidSquareError
from src.core.shared_types import Color, PieceType, Rejection, Status

SquareName = str
PieceCode = str


def _validate_square_name(value: str) -> str:
    try:
        return Square.from_algebraic(value).to_algebraic()
    except InvalidSquareError as e:
        raise InvalidRequestError(f"Cannot interpret {value!r} as a valid square name.") from e


# --- REQUEST MODELS ---
class MoveRequest(BaseModel):
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.PAWN, PieceType.KING):
            raise InvalidRequestError(f"A pawn cannot be promoted to a {value}.")
        return value


class LegalMovesRequest(BaseModel):
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    position_fen: str
    pieces: dict[SquareName, PieceCode]
    color_to_move: Color
    player_color: Color
    status: Status
    message: str
    move_history: list[str]
    en_passant_square: Optional[SquareName] = None
    in_check: list[Color] = []


class MoveResponse(BaseModel):
    accepted: bool
    notation: str = ""
    reason: Optional[Rejection] = None
    detail: str = ""
    ai_move: Optional[str] = None
    ai_broke_rules: bool = False
    game: GameResponse


class LegalMovesResponse(BaseModel):
    square: SquareName
    legal_moves: list[SquareName]
