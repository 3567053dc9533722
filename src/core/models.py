"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain layer (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the API layer or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass

# Type aliases to make GameModel easier to read
SquareName = str
PieceCode = str


@dataclass
class GameModel:
    """Transport-safe representation of a chess game used between API, Service and Game layers."""

    position_fen: str
    pieces: dict[SquareName, PieceCode]
    color_to_move: str
    player_color: str
    status: str
    message: str
    moves: list[str]
    en_passant_square: SquareName | None = None
