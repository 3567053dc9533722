import pytest

from src.api.models import GameResponse, LegalMovesRequest, MoveRequest
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, PieceType, Status


# -- Validation - MoveRequest --
def test_valid_square_names() -> None:
    """Test that MoveRequest accepts correctly written squares in algebraic notation."""
    request = MoveRequest(from_square="e2", to_square="e4")
    assert request.from_square == "e2"
    assert request.to_square == "e4"
    assert request.promote_to is None


def test_square_names_are_normalized() -> None:
    request = MoveRequest(from_square="E7", to_square=" e8 ", promote_to=PieceType.KNIGHT)
    assert request.from_square == "e7"
    assert request.to_square == "e8"
    assert request.promote_to == PieceType.KNIGHT


@pytest.mark.parametrize("invalid_square", ["e9", "z1", "e", "e44", "", "4e"])
def test_invalid_square_names(invalid_square: str) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(from_square=invalid_square, to_square="e4")
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(from_square="e2", to_square=invalid_square)


@pytest.mark.parametrize("piece_type", [PieceType.PAWN, PieceType.KING])
def test_invalid_promotion(piece_type: PieceType) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveRequest(from_square="e7", to_square="e8", promote_to=piece_type)


# -- Validation - LegalMovesRequest --
def test_legal_moves_request() -> None:
    assert LegalMovesRequest(square="G1").square == "g1"
    with pytest.raises(InvalidRequestError):
        _ = LegalMovesRequest(square="j1")


# -- Responses --
def test_game_response_accepts_enum_values() -> None:
    response = GameResponse(
        position_fen="8/8/8/8/8/8/8/8",
        pieces={},
        color_to_move="white",
        player_color="black",
        status="checkmate",
        message="",
        move_history=[],
    )
    assert response.color_to_move == Color.WHITE
    assert response.status == Status.CHECKMATE
    assert response.in_check == []
