from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

from dotenv import load_dotenv


def run(games: int, max_plies: int, seed: int) -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    load_dotenv(root / ".env")

    from dama.game.engine import (
        CaptureSequence, apply_action, check_game_over, count_pieces,
        generate_captures, generate_moves,
    )
    from dama.game.storage import create_game, end_game
    from dama.logging_setup import setup_logging

    setup_logging()
    log = logging.getLogger("dama.smoke")
    rng = random.Random(seed)

    finished = 0
    captures_played = 0
    for _ in range(games):
        gs = create_game()
        for _ in range(max_plies):
            if gs.finished:
                break
            before = gs.position
            caps = generate_captures(gs.position, gs.turn)
            assert caps == generate_captures(gs.position, gs.turn), "Capture generation is not repeatable"
            assert len({len(c) for c in caps}) <= 1, "Captures of different lengths returned"

            legal = gs.legal_actions()
            assert legal == (caps or generate_moves(gs.position, gs.turn)), "Mandatory capture not enforced"

            action = rng.choice(legal)
            mover = gs.turn
            res = gs.play(action)
            assert gs.history[-1].action == action, "History does not record the played action"
            assert res.position == apply_action(before, action).position, "Apply is not deterministic"
            if isinstance(action, CaptureSequence):
                captures_played += 1
                assert count_pieces(res.position, mover.opponent) == count_pieces(before, mover.opponent) - res.captured

        if gs.finished:
            finished += 1
            if gs.winner is not None:
                assert check_game_over(gs.position, gs.turn.opponent).over
        else:
            assert not check_game_over(gs.position, gs.turn).over
        log.info("Game %s: plies=%d result=%s", gs.gid, len(gs.history), gs.result)
        end_game(gs.gid)

    print(f"OK games={games}")
    print(f"OK finished={finished}")
    print(f"OK captures_played={captures_played}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Play random legal games and check engine invariants.")
    parser.add_argument("--games", type=int, default=20, help="Number of games to play")
    parser.add_argument("--max-plies", type=int, default=400, help="Stop a game after this many actions")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for action choice")
    args = parser.parse_args()
    run(args.games, args.max_plies, args.seed)


if __name__ == "__main__":
    main()
