"""
The AI Turn Controller
---

One AI turn:
1. wait a moment (feels less like a machine gun)
2. decide whether rules may be broken this turn
3. ask the completion service for a move
4. interpret / validate / play the answer
5. anything goes wrong: synthesize a move instead. The turn always moves on.

Every time we come back from waiting we check whether the game is still on (and was not reset in between).
If not, the turn is quietly dropped: nothing is played.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from src.ai.client import CompletionClient
from src.ai.conversation import Conversation
from src.ai.fallback import FallbackSynthesizer
from src.ai.policy import RuleAdherencePolicy
from src.ai.prompts import correction_prompt, first_move_prompt, move_prompt
from src.chess.game import Game, MoveOutcome
from src.chess.referee import submit_move
from src.core.config import Settings
from src.core.exceptions import CompletionServiceError
from src.core.shared_types import Color, Status

log = logging.getLogger(__name__)


class TurnPhase(StrEnum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting response"
    APPLYING = "applying"
    RETRY_PENDING = "retry pending"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class TurnReport:
    """What happened during one AI turn. `outcome` is None when the turn was abandoned."""

    outcome: Optional[MoveOutcome]
    rule_breaking: bool = False
    reply: Optional[str] = None
    used_fallback: bool = False
    attempts: int = 0

    @property
    def abandoned(self) -> bool:
        return self.outcome is None


class AIPlayer:
    def __init__(
        self,
        game: Game,
        client: CompletionClient,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.game = game
        self.client = client
        self.settings = settings or Settings()
        self.rng = rng or random.Random()
        self.policy = RuleAdherencePolicy(
            start_move=self.settings.rule_breaking_start_move,
            probability=self.settings.rule_breaking_probability,
            rng=self.rng,
        )
        self.conversation = Conversation()
        self.phase = TurnPhase.IDLE
        # bumped on every reset: a turn started before the reset must not touch the new game
        self._generation = 0

    @property
    def color(self) -> Color:
        return self.game.ai_color

    @property
    def is_my_turn(self) -> bool:
        return self.game.status == Status.IN_PROGRESS and self.game.turn == self.color

    def reset(self) -> None:
        self._generation += 1
        self.conversation = Conversation()
        self.phase = TurnPhase.IDLE

    def on_opponent_move(self, notation: str) -> None:
        self.conversation.record_move(notation)

    async def play_turn(self) -> TurnReport:
        if not self.is_my_turn:
            log.debug("Not the AI's turn (status %s, %s to move)", self.game.status, self.game.turn)
            return TurnReport(outcome=None)

        generation = self._generation
        log.info("AI (%s) thinking. Move count: %d", self.color, self.conversation.move_count)
        await asyncio.sleep(self.settings.response_delay_s)
        if self._cancelled(generation):
            return self._abandon("before sending the request")

        rule_breaking = self.policy.sample(self.conversation.move_count)
        self.conversation.should_break_rules = rule_breaking
        self.conversation.add("user", self._build_prompt(rule_breaking))
        if rule_breaking:
            log.info("AI may break the rules this turn")

        attempts = 0
        while True:
            attempts += 1
            self.phase = TurnPhase.AWAITING_RESPONSE
            try:
                reply = await self.client.complete(self.conversation.messages())
            except CompletionServiceError as e:
                if self._cancelled(generation):
                    return self._abandon("while waiting for the completion service")
                log.warning("Completion service failed (%s): %s", type(e).__name__, e)
                return self._fallback(rule_breaking, reply=None, attempts=attempts)

            if self._cancelled(generation):
                return self._abandon("after the completion service answered")

            log.info("AI wants to move: %r", reply)
            self.conversation.add("assistant", reply)

            self.phase = TurnPhase.APPLYING
            outcome = submit_move(self.game, reply, self.color, rule_breaking)
            if outcome.applied:
                return self._finish(outcome, rule_breaking, reply, attempts)

            log.warning("AI move %r rejected: %s %s", reply, outcome.reason, outcome.detail)
            if attempts > self.settings.max_retries:
                return self._fallback(rule_breaking, reply=reply, attempts=attempts)

            self.phase = TurnPhase.RETRY_PENDING
            self.conversation.add("user", correction_prompt(reply, outcome.detail or str(outcome.reason)))

    # --- PRIVATE HELPERS ---
    def _build_prompt(self, rule_breaking: bool) -> str:
        if self.conversation.is_first_request:
            self.conversation.is_first_request = False
            return first_move_prompt(
                self.color,
                self.settings.rule_breaking_start_move,
                self.settings.rule_breaking_probability,
            )
        return move_prompt(
            own_king_in_check=self.game.king_in_check(self.color),
            opponent_king_in_check=self.game.king_in_check(self.color.opposite),
            rule_breaking=rule_breaking,
            history=self.conversation.move_history,
        )

    def _cancelled(self, generation: int) -> bool:
        return generation != self._generation or self.game.is_over

    def _abandon(self, when: str) -> TurnReport:
        log.info("Game ended or was reset %s: AI turn abandoned", when)
        self.phase = TurnPhase.IDLE
        return TurnReport(outcome=None)

    def _finish(
        self,
        outcome: MoveOutcome,
        rule_breaking: bool,
        reply: Optional[str],
        attempts: int,
        used_fallback: bool = False,
    ) -> TurnReport:
        if outcome.applied:
            self.conversation.record_move(outcome.notation)
        self.phase = TurnPhase.IDLE
        return TurnReport(
            outcome=outcome,
            rule_breaking=rule_breaking,
            reply=reply,
            used_fallback=used_fallback,
            attempts=attempts,
        )

    def _fallback(self, rule_breaking: bool, reply: Optional[str], attempts: int) -> TurnReport:
        self.phase = TurnPhase.FALLBACK
        synthesizer = FallbackSynthesizer(
            self.game,
            self.color,
            self.rng,
            max_attempts=self.settings.fallback_max_attempts,
            destination_cap=self.settings.fallback_destination_cap,
        )
        outcome = synthesizer.synthesize()
        log.info("AI fallback move: %s", outcome.notation or outcome.reason)
        return self._finish(outcome, rule_breaking, reply, attempts, used_fallback=True)
