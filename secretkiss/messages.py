from __future__ import annotations

import random

GAME_OVER_MESSAGES: tuple[str, ...] = (
    "YAKALANDIN!",
    "MÜDÜR GÖRDÜ!",
    "DOĞRU MÜDÜRÜN ODASINA!",
    "VELİNİ ÇAĞIRIYORUZ!",
    "DİSİPLİNE SEVK EDİLDİN!",
)


def pick_game_over_message(rng: random.Random) -> str:
    return rng.choice(GAME_OVER_MESSAGES)
