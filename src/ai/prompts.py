"""Texts sent to the language model."""

from typing import Sequence

from src.core.shared_types import Color

SYSTEM_PROMPT = (
    "You are a chess player. Respond with moves in algebraic notation "
    "(e.g., 'e2e4', 'Nf3', 'O-O'). Only respond with the move, nothing else."
)

RESPONSE_FORMAT = "Respond with only the move in algebraic notation (e.g., 'e2e4' or 'Nf3')."

# plies of history repeated in every request after the first
HISTORY_LENGTH = 3


def first_move_prompt(ai_color: Color, start_move: int, probability: float) -> str:
    """The rules briefing sent with the very first request of a game."""
    normal_share = round((1 - probability) * 100)
    breaking_share = round(probability * 100)
    return (
        "You are playing a chess game. Play to win. "
        f"You are playing as {ai_color.capitalize()}. "
        f"Your opponent is playing as {ai_color.opposite.capitalize()}. "
        "The game has just started. "
        "You can make moves in algebraic notation (e.g., 'e2e4' for moving from e2 to e4, "
        "or 'Nf3' for moving a knight to f3). "
        f"For the first {start_move} moves, you must fully obey chess rules. "
        f"After move {start_move}, {normal_share}% of the time you should play normally following chess rules, "
        f"and {breaking_share}% of the time you can 'go nuts' and break chess rules - "
        "move pieces anywhere, spawn pieces, be creative! "
        "However, you CANNOT capture your own king or move enemy pieces. "
        "If your king is in check, you MUST get out of check. "
        "Make your first move. " + RESPONSE_FORMAT
    )


def move_prompt(
    own_king_in_check: bool,
    opponent_king_in_check: bool,
    rule_breaking: bool,
    history: Sequence[str],
) -> str:
    """The short request sent for every move after the first."""
    parts = ["Make your move."]
    if own_king_in_check:
        parts.append("WARNING: Your king is in CHECK! You must get out of check.")
    if opponent_king_in_check:
        parts.append("Your opponent's king is in check.")
    if rule_breaking:
        parts.append("You can BREAK CHESS RULES - move pieces anywhere, spawn pieces, be creative!")
    else:
        parts.append("Follow normal chess rules - make legal moves only.")
    recent = list(history)[-HISTORY_LENGTH:]
    if recent:
        parts.append(f"PGN: {', '.join(recent)}.")
    parts.append(RESPONSE_FORMAT)
    return " ".join(parts)


def correction_prompt(move_text: str, reason: str) -> str:
    """Sent before re-asking when the previous answer could not be played."""
    return f"Your move {move_text!r} was rejected ({reason}). Try a different move. " + RESPONSE_FORMAT
