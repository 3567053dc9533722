"""Orchestration of communication from the front end (terminal, UI) to the game and the AI opponent (and the reverse direction)."""

import logging
import random
from typing import Optional

from src.ai.client import ChatCompletionClient, CompletionClient
from src.ai.player import AIPlayer, TurnReport
from src.api.models import (
    GameResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
)
from src.chess.game import Game, MoveOutcome, PromotionChooser
from src.chess.square import Square
from src.core.config import Settings
from src.core.models import GameModel
from src.core.shared_types import Color, Rejection

log = logging.getLogger(__name__)


class ChessService:
    """One human against one AI opponent."""

    def __init__(
        self,
        player_color: Color = Color.WHITE,
        settings: Optional[Settings] = None,
        client: Optional[CompletionClient] = None,
        rng: Optional[random.Random] = None,
        promotion_chooser: Optional[PromotionChooser] = None,
    ) -> None:
        self.settings = settings or Settings()
        # only a client we created ourselves gets closed by us
        self._owned_client: Optional[ChatCompletionClient] = None
        if client is None:
            self._owned_client = ChatCompletionClient(self.settings)
            client = self._owned_client

        self.game = Game.new_game(player_color, promotion_chooser)
        self.ai = AIPlayer(self.game, client, self.settings, rng)

    # -- Front end logic ---
    async def start(self) -> GameResponse:
        """Start the game. If the AI plays white it makes its first move straight away."""
        self.game.start()
        log.info("New game. Human plays %s, AI plays %s.", self.game.player_color, self.game.ai_color)
        await self._ai_turn()
        return self.get_game_state()

    async def make_move(self, request: MoveRequest) -> MoveResponse:
        """Human move attempt. If it is accepted, the AI answers before this returns."""
        from_square = Square.from_algebraic(request.from_square)
        to_square = Square.from_algebraic(request.to_square)

        outcome = self._human_move(from_square, to_square, request)
        if not outcome.applied:
            log.info("Human move %s%s rejected: %s", request.from_square, request.to_square, outcome.reason)
            return self._create_move_response(outcome)

        self.ai.on_opponent_move(outcome.notation)
        report = await self._ai_turn()
        return self._create_move_response(outcome, report)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Destinations to highlight for the piece on the requested square."""
        destinations = self.game.legal_moves(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            square=request.square,
            legal_moves=[square.to_algebraic() for square in destinations],
        )

    def get_game_state(self) -> GameResponse:
        return self._create_game_response(self.game.snapshot())

    async def reset(self) -> GameResponse:
        """Back to the starting position. A pending AI turn from the previous game is dropped."""
        self.game.reset()
        self.ai.reset()
        await self._ai_turn()
        return self.get_game_state()

    async def close(self) -> None:
        if self._owned_client is not None:
            await self._owned_client.close()

    # -- Internal helpers --
    def _human_move(self, from_square: Square, to_square: Square, request: MoveRequest) -> MoveOutcome:
        if self.game.is_over:
            return MoveOutcome.rejected(Rejection.GAME_OVER, self.game.message)
        if self.game.turn != self.game.player_color:
            return MoveOutcome.rejected(Rejection.NOT_YOUR_TURN, "Wait for the AI to move.")

        piece = self.game.board.piece_at(from_square)
        if piece is None:
            return MoveOutcome.rejected(Rejection.MISSING_PIECE, f"No piece on {request.from_square}.")
        if piece.color != self.game.player_color:
            return MoveOutcome.rejected(Rejection.WRONG_COLOR, f"{piece!r} is not yours.")
        return self.game.apply_move(piece, to_square, request.promote_to)

    async def _ai_turn(self) -> Optional[TurnReport]:
        if not self.ai.is_my_turn:
            return None
        return await self.ai.play_turn()

    def _create_move_response(self, outcome: MoveOutcome, report: Optional[TurnReport] = None) -> MoveResponse:
        ai_move = None
        if report is not None and report.outcome is not None and report.outcome.applied:
            ai_move = report.outcome.notation
        return MoveResponse(
            accepted=outcome.applied,
            notation=outcome.notation,
            reason=outcome.reason,
            detail=outcome.detail,
            ai_move=ai_move,
            ai_broke_rules=report.rule_breaking if report else False,
            game=self.get_game_state(),
        )

    def _create_game_response(self, model: GameModel) -> GameResponse:
        """Convert info in GameModel to a GameResponse."""
        return GameResponse(
            position_fen=model.position_fen,
            pieces=model.pieces,
            color_to_move=Color(model.color_to_move),
            player_color=Color(model.player_color),
            status=model.status,
            message=model.message,
            move_history=model.moves,
            en_passant_square=model.en_passant_square,
            in_check=[color for color in Color if self.game.king_in_check(color)],
        )
