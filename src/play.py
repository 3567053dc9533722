"""
Play against the AI in the terminal.

    python -m src.play --color white --seed 7 --log-level INFO

Type moves as coordinates ("e2e4", "e2 e4", "e7e8q"). Other commands: `moves <square>`, `reset`, `quit`.
"""

import argparse
import asyncio
import logging
import random
from typing import Optional

from src.api.models import GameResponse, LegalMovesRequest, MoveRequest
from src.chess.pieces import FEN_TO_PIECE, Piece
from src.chess.square import BOARD_DIMENSIONS, FILE_NAMES
from src.core.config import Settings
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, PieceType
from src.services.chess_service import ChessService

log = logging.getLogger("play")


def render_board(state: GameResponse) -> str:
    """Board as text, from the human player's side. Upper case is white."""
    ranks = range(BOARD_DIMENSIONS[1], 0, -1)
    files = list(FILE_NAMES)
    if state.player_color == Color.BLACK:
        ranks = range(1, BOARD_DIMENSIONS[1] + 1)
        files.reverse()

    lines = []
    for rank in ranks:
        row = [state.pieces.get(f"{file}{rank}", ".") for file in files]
        lines.append(f"{rank}  {' '.join(row)}")
    lines.append(f"   {' '.join(files)}")
    return "\n".join(lines)


def describe(state: GameResponse) -> str:
    if state.message:
        return state.message
    text = f"{state.color_to_move.capitalize()} to move."
    if state.in_check:
        text += f" {' and '.join(color.capitalize() for color in state.in_check)} in check!"
    return text


def parse_move(text: str) -> MoveRequest:
    """'e2e4', 'e2 e4', 'e2-e4', 'e7e8q'"""
    cleaned = text.replace(" ", "").replace("-", "").replace("=", "")
    if len(cleaned) not in (4, 5):
        raise InvalidRequestError(f"Cannot read {text!r} as a move.")
    promote_to = None
    if len(cleaned) == 5:
        promote_to = FEN_TO_PIECE.get(cleaned[4].lower())
        if promote_to is None:
            raise InvalidRequestError(f"Unknown promotion piece {cleaned[4]!r}.")
    return MoveRequest(from_square=cleaned[:2], to_square=cleaned[2:4], promote_to=promote_to)


def ask_promotion(piece: Piece) -> PieceType:
    answer = input(f"Promote pawn on {piece.square.to_algebraic()} to (q/r/b/n) [q]: ").strip().lower()
    return FEN_TO_PIECE.get(answer[:1], PieceType.QUEEN) if answer else PieceType.QUEEN


async def run(service: ChessService) -> None:
    state = await service.start()
    print(render_board(state))
    print(describe(state))

    while True:
        line = (await asyncio.to_thread(input, "> ")).strip()
        if not line:
            continue
        command, _, argument = line.partition(" ")

        try:
            if command == "quit":
                return
            if command == "reset":
                state = await service.reset()
            elif command == "moves":
                moves = service.legal_moves(LegalMovesRequest(square=argument.strip()))
                print(f"{moves.square}: {', '.join(moves.legal_moves) or 'no legal moves'}")
                continue
            else:
                response = await service.make_move(parse_move(line))
                state = response.game
                if not response.accepted:
                    print(f"Move rejected: {response.reason} {response.detail}".rstrip())
                    continue
                if response.ai_move:
                    suffix = " (breaking the rules!)" if response.ai_broke_rules else ""
                    print(f"AI plays {response.ai_move}{suffix}")
        except InvalidRequestError as e:
            print(e)
            continue

        print(render_board(state))
        print(describe(state))


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Play chess against a language model that sometimes cheats.")
    ap.add_argument("--color", choices=[c.value for c in Color], default="white", help="Which side you play")
    ap.add_argument("--seed", type=int, default=None, help="Seed for the AI's random choices")
    ap.add_argument("--model", default=None, help="Completion model (overrides CHESS_LLM_MODEL)")
    ap.add_argument("--log-level", default="WARNING", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env()
    if args.model:
        settings = settings.model_copy(update={"model": args.model})
    if not settings.has_api_key:
        log.warning("No API key configured: the AI will play random moves.")

    service = ChessService(
        player_color=Color(args.color),
        settings=settings,
        rng=random.Random(args.seed),
        promotion_chooser=ask_promotion,
    )

    async def _session() -> None:
        try:
            await run(service)
        finally:
            await service.close()

    try:
        asyncio.run(_session())
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == "__main__":
    main()
