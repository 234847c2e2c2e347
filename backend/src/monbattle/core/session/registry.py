from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from random import Random
from typing import Callable, Dict, List, Optional, Sequence

from monbattle.core.adapters.mapper import snapshot_creature
from monbattle.core.engine.commands import Action
from monbattle.core.engine.errors import (
    AlreadyInBattle,
    AlreadyRegistered,
    ErrorCode,
    InsufficientRoster,
    InvalidOpponent,
    NoActiveBattle,
    UnknownPlayer,
    error_for_code,
)
from monbattle.core.engine.rules.apply import apply_action
from monbattle.core.engine.rules.middleware import DamageMiddleware
from monbattle.core.engine.state import (
    BATTLE_SIZE,
    BattleSide,
    BattleState,
    Creature,
    first_healthy,
)
from monbattle.core.persistence.state_codec import battle_state_to_dict
from monbattle.core.session.rosters import DonationResult, RosterBook

log = logging.getLogger(__name__)


@dataclass
class Player:
    name: str


@dataclass
class BattleStarted:
    battle_id: str
    first_mover: str
    opponent: str


@dataclass
class TurnOutcome:
    battle_id: str
    player: str
    events: List[dict] = field(default_factory=list)
    concluded: bool = False
    winner: Optional[str] = None


def _new_battle_id() -> str:
    return uuid.uuid4().hex


class SessionRegistry:
    """
    Игроки, бои и отображение игрок -> бой.

    Дисциплина блокировок:
      - self._lock (RLock) защищает таблицы игроков/боёв/маппинга; таблица боёв
        и маппинг меняются только вместе под ним;
      - на каждый бой свой Lock: не больше одной мутации боя одновременно;
      - ростеры меняются под per-player lock'ами RosterBook.
    Порядок вложенности: registry -> roster, battle -> roster, battle -> registry.
    """

    def __init__(
        self,
        rosters: RosterBook,
        *,
        rng: Optional[Random] = None,
        battle_size: int = BATTLE_SIZE,
        middlewares: Optional[Sequence[DamageMiddleware]] = None,
        id_factory: Callable[[], str] = _new_battle_id,
    ):
        self.rosters = rosters
        self.battle_size = battle_size
        self._rng = rng or Random()
        self._middlewares = middlewares
        self._id_factory = id_factory

        self._lock = threading.RLock()
        self._players: Dict[str, Player] = {}
        self._battles: Dict[str, BattleState] = {}
        self._battle_locks: Dict[str, threading.Lock] = {}
        self._player_battle: Dict[str, str] = {}

    # --- players ---

    def register(self, name: str) -> Player:
        with self._lock:
            if name in self._players:
                # повторная регистрация отклоняется, а не сливается
                raise AlreadyRegistered("Player already registered", name)
            player = self._players[name] = Player(name=name)
        log.info("player registered name=%s", name)
        return player

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._players

    def require_player(self, name: str) -> Player:
        with self._lock:
            player = self._players.get(name)
        if player is None:
            raise UnknownPlayer("Player is not registered", name)
        return player

    def players(self) -> List[str]:
        with self._lock:
            return sorted(self._players)

    # --- battles ---

    def _check_can_battle(self, name_a: str, name_b: str) -> None:
        # вызывать под self._lock
        for name in (name_a, name_b):
            if name not in self._players:
                raise UnknownPlayer("Player is not registered", name)
        for name in (name_a, name_b):
            if name in self._player_battle:
                raise AlreadyInBattle(
                    "Player is already in a battle",
                    name,
                    battle_id=self._player_battle[name],
                )

    def _snapshot_side(self, name: str) -> BattleSide:
        healthy = first_healthy(self.rosters.load(name), self.battle_size)
        if len(healthy) < self.battle_size:
            raise InsufficientRoster(
                "Player needs more healthy creatures",
                name,
                have=len(healthy),
                need=self.battle_size,
            )
        return BattleSide(player=name, creatures=[snapshot_creature(c) for c in healthy])

    def begin_battle(self, name_a: str, name_b: str) -> BattleStarted:
        """
        Старт боя. Первым ходит инициатор (name_a), скорость не учитывается.
        Ростеры читаются вне lock'а реестра, после чтения проверки повторяются.
        """
        if name_a == name_b:
            raise InvalidOpponent("Cannot battle yourself", name_a)

        with self._lock:
            self._check_can_battle(name_a, name_b)

        sides = [self._snapshot_side(name) for name in (name_a, name_b)]

        with self._lock:
            # пока читали ростеры, кто-то из игроков мог уйти в другой бой
            self._check_can_battle(name_a, name_b)

            battle_id = self._id_factory()
            state = BattleState(id=battle_id, sides=sides, turn_owner=name_a).with_seed(
                self._rng.randrange(2**32)
            )

            # таблица боёв и маппинг меняются вместе
            self._battles[battle_id] = state
            self._battle_locks[battle_id] = threading.Lock()
            self._player_battle[name_a] = battle_id
            self._player_battle[name_b] = battle_id

        log.info(
            "battle started id=%s first=%s opponent=%s seed=%d",
            battle_id,
            name_a,
            name_b,
            state.rng_seed,
        )
        return BattleStarted(battle_id=battle_id, first_mover=name_a, opponent=name_b)

    def end_battle(self, battle_id: str) -> bool:
        """Удалить бой и маппинг обоих игроков. Повторный вызов ничего не делает (False)."""
        with self._lock:
            state = self._battles.pop(battle_id, None)
            self._battle_locks.pop(battle_id, None)
            if state is None:
                return False
            for name in state.players:
                if self._player_battle.get(name) == battle_id:
                    del self._player_battle[name]
        log.info("battle ended id=%s winner=%s turns=%d", battle_id, state.winner, state.turn)
        return True

    def battle_for(self, player: str) -> Optional[str]:
        with self._lock:
            return self._player_battle.get(player)

    def get_battle(self, battle_id: str) -> Optional[dict]:
        """Снапшот боя в виде dict (копия под lock'ом боя)."""
        with self._lock:
            state = self._battles.get(battle_id)
            lock = self._battle_locks.get(battle_id)
        if state is None or lock is None:
            return None
        with lock:
            return battle_state_to_dict(state)

    def battle_count(self) -> int:
        with self._lock:
            return len(self._battles)

    def process_turn(self, player: str, action: Action) -> TurnOutcome:
        with self._lock:
            if player not in self._players:
                raise UnknownPlayer("Player is not registered", player)
            battle_id = self._player_battle.get(player)
            if battle_id is None:
                raise NoActiveBattle("No active battle for player", player)
            state = self._battles[battle_id]
            lock = self._battle_locks[battle_id]

        with lock:
            _, events = apply_action(state, player, action, self._middlewares)

            if len(events) == 1 and events[0]["type"] == "ActionRejected":
                payload = events[0]["payload"]
                log.info(
                    "action rejected battle=%s player=%s action=%s code=%s",
                    battle_id,
                    player,
                    action.kind,
                    payload["code"],
                )
                code = ErrorCode(payload["code"])
                meta = payload["meta"]
                if "creature" in meta:
                    details = [meta["creature"]]
                elif code is ErrorCode.NO_ACTIVE_BATTLE:
                    # как и отказ до захвата lock'а боя: NoActiveBattle:<player>
                    details = [player]
                else:
                    details = []
                raise error_for_code(code, payload["message"], *details, **meta)

            if state.concluded:
                for e in events:
                    if e["type"] == "LeveledUp":
                        p = e["payload"]
                        log.info(
                            "level up battle=%s owner=%s creature=%s level=%d",
                            battle_id,
                            e["actor"],
                            p["creature"],
                            p["level"],
                        )
                self._finish(state)

        return TurnOutcome(
            battle_id=battle_id,
            player=player,
            events=events,
            concluded=state.concluded,
            winner=state.winner,
        )

    def _finish(self, state: BattleState) -> None:
        # вызывается ровно один раз: под lock'ом боя сразу после перехода в concluded.
        # Сбой записи одной стороны не должен терять итог другой.
        failure: Optional[Exception] = None
        for side in state.sides:
            try:
                self.rosters.write_back(side.player, side.creatures)
            except Exception as e:
                log.exception("write-back failed battle=%s player=%s", state.id, side.player)
                if failure is None:
                    failure = e
        self.end_battle(state.id)
        if failure is not None:
            raise failure

    # --- rosters (через реестр, т.к. нужно знать про игроков и активные бои) ---

    def capture(self, player: str, creature_name: str) -> Creature:
        # ловить можно и во время боя: write_back сливает по имени
        self.require_player(player)
        return self.rosters.capture(player, creature_name)

    def roster(self, player: str) -> List[Creature]:
        self.require_player(player)
        return self.rosters.load(player)

    def donate(self, player: str, donor: str, recipient: str) -> DonationResult:
        with self._lock:
            self.require_player(player)
            if player in self._player_battle:
                # снапшот боя потом перезаписал бы ростер с уже удалённым донором
                raise AlreadyInBattle(
                    "Cannot donate during a battle",
                    player,
                    battle_id=self._player_battle[player],
                )
            return self.rosters.donate(player, donor, recipient)
