from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence

from monbattle.core.engine.events import AttackKind
from monbattle.core.engine.state import BattleState, Creature


# --- контекст урона ---


@dataclass(frozen=True)
class DamageContext:
    attacker_owner: str
    defender_owner: str
    kind: AttackKind
    offense: int
    defense: int


# --- middleware протокол ---


class DamageMiddleware(Protocol):
    def damage_multiplier(
        self,
        state: BattleState,
        attacker: Creature,
        defender: Creature,
        ctx: DamageContext,
    ) -> float: ...


# --- утилита: перемножить множители всей цепочки ---
def combined_multiplier(
    middlewares: Sequence[DamageMiddleware],
    state: BattleState,
    attacker: Creature,
    defender: Creature,
    ctx: DamageContext,
) -> float:
    mult = 1.0
    for mw in middlewares:
        mult *= mw.damage_multiplier(state, attacker, defender, ctx)
    return mult


# --- типовая эффективность: пока всегда 1 ---
class NeutralTypeChart:
    """
    Точка расширения для преимущества по стихиям.
    Таблицы эффективности нет, множитель всегда 1.0.
    """

    def damage_multiplier(
        self,
        state: BattleState,
        attacker: Creature,
        defender: Creature,
        ctx: DamageContext,
    ) -> float:
        return 1.0


DEFAULT_DAMAGE_MIDDLEWARES: List[DamageMiddleware] = [
    NeutralTypeChart(),
]
