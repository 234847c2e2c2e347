from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Dict, List, Sequence, Tuple

from monbattle.core.engine.errors import CreatureNotFound, SameCreature, TypeMismatch
from monbattle.core.engine.state import Creature

EXP_PER_LEVEL = 100

# EV прибавка к множителю: stat' = stat * (1 + ev), ev в [0.5, 1.0)
EV_MIN = 0.5
EV_MAX = 1.0

UNSCALED_STATS = frozenset({"speed"})


@dataclass
class LevelUp:
    creature: str
    level: int
    ev: float
    stats: Dict[str, int]


@dataclass
class ExperienceShare:
    total: int
    share: int
    recipients: List[str] = field(default_factory=list)
    level_ups: List[LevelUp] = field(default_factory=list)


def exp_threshold(level: int) -> int:
    return level * EXP_PER_LEVEL


def roll_ev(rng: Random) -> float:
    return EV_MIN + rng.random() * (EV_MAX - EV_MIN)


def apply_level_ups(creature: Creature, rng: Random) -> List[LevelUp]:
    """
    Пока накопленного опыта хватает на порог текущего уровня:
    списываем порог, +1 уровень, растим все статы кроме speed.
    Ниже порога ничего не меняется (повторный вызов идемпотентен).
    """
    ups: List[LevelUp] = []
    while creature.accumulated_exp >= exp_threshold(creature.level):
        creature.accumulated_exp -= exp_threshold(creature.level)
        creature.level += 1

        ev = roll_ev(rng)
        for name, value in creature.stats.items():
            if name in UNSCALED_STATS:
                continue
            creature.stats[name] = int(value * (1 + ev))

        ups.append(
            LevelUp(
                creature=creature.name,
                level=creature.level,
                ev=ev,
                stats=dict(creature.stats),
            )
        )
    return ups


def credit_experience(creature: Creature, amount: int, rng: Random) -> List[LevelUp]:
    if amount < 0:
        raise ValueError(f"Experience credit must be non-negative, got {amount}")
    creature.accumulated_exp += amount
    return apply_level_ups(creature, rng)


def distribute_battle_experience(
    losers: Sequence[Creature], winners: Sequence[Creature], rng: Random
) -> ExperienceShare:
    """
    Опыт проигравшей стороны суммируется и делится поровну между победителями
    (целочисленно, остаток теряется). Делим на len(winners), а не на 3.
    """
    total = sum(c.accumulated_exp for c in losers)
    if not winners:
        return ExperienceShare(total=total, share=0)

    share = total // len(winners)
    result = ExperienceShare(total=total, share=share)
    for c in winners:
        result.recipients.append(c.name)
        result.level_ups.extend(credit_experience(c, share, rng))
    return result


def transfer_experience(
    roster: List[Creature], donor_name: str, recipient_name: str, rng: Random
) -> Tuple[List[Creature], int, List[LevelUp]]:
    """
    Донор отдаёт весь накопленный опыт реципиенту того же ростера
    (нужен общий тип) и удаляется из ростера.
    Возвращаем (новый ростер, сколько передано, level-ups реципиента).
    """
    if donor_name == recipient_name:
        raise SameCreature("Donor and recipient must differ", donor_name)

    donor = next((c for c in roster if c.name == donor_name), None)
    if donor is None:
        raise CreatureNotFound("Donor not in roster", donor_name)
    recipient = next((c for c in roster if c.name == recipient_name), None)
    if recipient is None:
        raise CreatureNotFound("Recipient not in roster", recipient_name)

    if not donor.shares_type_with(recipient):
        raise TypeMismatch(
            "Donor and recipient share no type",
            donor_name,
            recipient_name,
            donor_types=list(donor.types),
            recipient_types=list(recipient.types),
        )

    transferred = donor.accumulated_exp
    ups = credit_experience(recipient, transferred, rng)
    donor.accumulated_exp = 0

    remaining = [c for c in roster if c is not donor]
    return remaining, transferred, ups
