"""Everything the AI player remembers about the current game. Thrown away on reset."""

from dataclasses import dataclass, field

from src.ai.client import ChatMessage, Role
from src.ai.prompts import SYSTEM_PROMPT


@dataclass
class Conversation:
    system_prompt: str = SYSTEM_PROMPT
    history: list[ChatMessage] = field(default_factory=list)
    # plies played so far by both sides
    move_count: int = 0
    # notation of every move played, both sides
    move_history: list[str] = field(default_factory=list)
    is_first_request: bool = True
    should_break_rules: bool = False

    def add(self, role: Role, content: str) -> None:
        self.history.append(ChatMessage(role=role, content=content))

    def messages(self) -> list[ChatMessage]:
        """What gets sent: the system instruction followed by the whole exchange so far."""
        return [ChatMessage(role="system", content=self.system_prompt), *self.history]

    def record_move(self, notation: str) -> None:
        self.move_count += 1
        self.move_history.append(notation)
