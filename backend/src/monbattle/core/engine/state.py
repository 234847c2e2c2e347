from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Dict, List, Literal, Optional

Phase = Literal["awaiting_action", "concluded"]

# порядок статов как в каталоге (pokeapi)
STAT_NAMES = (
    "hp",
    "attack",
    "defense",
    "special-attack",
    "special-defense",
    "speed",
)

BATTLE_SIZE = 3


@dataclass
class Creature:
    name: str
    types: List[str]
    stats: Dict[str, int]
    hp: int
    level: int = 1
    accumulated_exp: int = 0

    # из каталога; в расчётах боя не участвует
    base_exp: int = 0

    @property
    def max_hp(self) -> int:
        return int(self.stats.get("hp", self.hp))

    @property
    def fainted(self) -> bool:
        return self.hp <= 0

    def stat(self, name: str) -> int:
        return int(self.stats.get(name, 0))

    def shares_type_with(self, other: "Creature") -> bool:
        return bool(set(self.types) & set(other.types))


@dataclass
class BattleSide:
    player: str
    # снапшот 3 существ на момент старта боя, index 0 = active
    creatures: List[Creature] = field(default_factory=list)

    @property
    def active(self) -> Creature:
        return self.creatures[0]

    def alive(self) -> List[Creature]:
        return [c for c in self.creatures if not c.fainted]

    @property
    def defeated(self) -> bool:
        return not self.alive()

    def find(self, name: str) -> Optional[Creature]:
        for c in self.creatures:
            if c.name == name:
                return c
        return None

    def index_of(self, name: str) -> int:
        for i, c in enumerate(self.creatures):
            if c.name == name:
                return i
        return -1


@dataclass
class BattleState:
    id: str
    sides: List[BattleSide]
    turn_owner: Optional[str]

    phase: Phase = "awaiting_action"  # awaiting_action | concluded
    winner: Optional[str] = None

    # сколько действий принято (отклонённые не считаются)
    turn: int = 0

    seq: int = 0

    rng_seed: int = 0
    rng: Random = field(default_factory=Random)

    def with_seed(self, seed: int) -> "BattleState":
        self.rng_seed = seed
        self.rng = Random(seed)
        return self

    @property
    def players(self) -> List[str]:
        return [s.player for s in self.sides]

    @property
    def concluded(self) -> bool:
        return self.phase == "concluded"

    def side_of(self, player: str) -> Optional[BattleSide]:
        for s in self.sides:
            if s.player == player:
                return s
        return None

    def opponent_of(self, player: str) -> Optional[BattleSide]:
        for s in self.sides:
            if s.player != player:
                return s
        return None


def first_healthy(creatures: List[Creature], count: int = BATTLE_SIZE) -> List[Creature]:
    return [c for c in creatures if not c.fainted][:count]
