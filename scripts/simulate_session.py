"""Play the game headless on a virtual clock.

Contract
- Inputs: a seed, a duration and a reaction delay.
- Bot policy: hold while the principal is safe; once the warning shows, wait
  `reaction_ms` and let go. Restarts after each game over.
- Outputs: one line per playthrough plus a summary, all via logging.

Usage:
    uv run python scripts/simulate_session.py --seed 7 --seconds 120 --reaction-ms 300

This script is deterministic for a given seed.
"""

from __future__ import annotations

import argparse
import logging
import random

from secretkiss.core.clock import ManualScheduler
from secretkiss.core.session import GameSession
from secretkiss.fsm import AttentionPhase, SessionMode
from secretkiss.score_store import InMemoryBestScoreStore

logger = logging.getLogger("simulate_session")


def run(*, seed: int, seconds: float, reaction_ms: float, step_ms: float = 10.0) -> list[int]:
    scheduler = ManualScheduler(frame_ms=step_ms)
    session = GameSession(scheduler=scheduler, store=InMemoryBestScoreStore(), rng=random.Random(seed))
    scores: list[int] = []
    warned_at: float | None = None

    elapsed = 0.0
    while elapsed < seconds * 1000:
        if session.mode == SessionMode.game_over:
            scores.append(session.score)
            logger.info("caught: %-26s score=%4d best=%4d", session.game_over_message, session.score, session.best_score)
            session.reset()
            warned_at = None

        phase = session.phase
        now = scheduler.now_ms()
        if phase == AttentionPhase.safe:
            warned_at = None
            session.press()
        elif phase == AttentionPhase.warning:
            warned_at = now if warned_at is None else warned_at
            if now - warned_at >= reaction_ms:
                session.release()
        else:
            session.release()

        scheduler.advance(step_ms)
        elapsed += step_ms

    scores.append(session.score)
    session.close()
    return scores


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--seconds", type=float, default=120.0)
    parser.add_argument("--reaction-ms", type=float, default=300.0)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    scores = run(seed=args.seed, seconds=args.seconds, reaction_ms=args.reaction_ms)
    logger.info("playthroughs=%d best=%d last=%d", len(scores), max(scores), scores[-1])


if __name__ == "__main__":
    main()
