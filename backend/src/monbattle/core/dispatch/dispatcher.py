from __future__ import annotations

import logging
from typing import List, Sequence

from monbattle.core.dispatch.wire import parse_command, split_datagram
from monbattle.core.engine.commands import (
    Capture,
    Command,
    Donate,
    ListRoster,
    Register,
    StartBattle,
    TakeTurn,
)
from monbattle.core.engine.errors import ErrorCode, MonBattleError
from monbattle.core.engine.results import Ok, Result, err, err_from_exception, ok, to_wire
from monbattle.core.engine.state import Creature
from monbattle.core.session.registry import SessionRegistry, TurnOutcome

log = logging.getLogger(__name__)


def roster_entry(c: Creature) -> str:
    return f"{c.name}/{c.level}/{c.hp}/{c.max_hp}/{c.accumulated_exp}"


def turn_result(outcome: TurnOutcome) -> Ok:
    """
    Из событий хода выбираем главное для ответа:
    won > fainted > switched > damage.
    """
    by_type = {e["type"]: e for e in outcome.events}

    if "BattleConcluded" in by_type:
        return ok("won", by_type["BattleConcluded"]["payload"]["winner"])
    if "CreatureFainted" in by_type:
        return ok("fainted", by_type["CreatureFainted"]["payload"]["creature"])
    if "CreatureSwitched" in by_type:
        return ok("switched", by_type["CreatureSwitched"]["payload"]["to"])
    if "DamageApplied" in by_type:
        p = by_type["DamageApplied"]["payload"]
        return ok("damage", p["damage"], p["hp_after"])
    return ok("ok")


class CommandDispatcher:
    """
    Граница, которую зовёт транспорт: команда -> компонент -> Result.
    Все доменные ошибки превращаются в Err, процесс от них не падает.
    """

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    def handle_datagram(self, text: str) -> str:
        name, args = split_datagram(text)
        return to_wire(self.dispatch(name, args))

    def dispatch(self, name: str, args: Sequence[str]) -> Result:
        try:
            cmd = parse_command(name, args)
        except MonBattleError as e:
            log.warning("bad command name=%r args=%r: %s", name, list(args), e.message)
            return err_from_exception(e)
        return self.execute(cmd)

    def execute(self, cmd: Command) -> Result:
        try:
            return self._execute(cmd)
        except MonBattleError as e:
            log.info("%s rejected: %s %s", cmd.type, e.code.value, e.message)
            return err_from_exception(e)
        except Exception:
            log.exception("unexpected error while handling %s", cmd.type)
            return err(ErrorCode.INTERNAL_ERROR, "Internal server error")

    def _execute(self, cmd: Command) -> Ok:
        if isinstance(cmd, Register):
            self.registry.register(cmd.player)
            return ok("registered")

        if isinstance(cmd, StartBattle):
            started = self.registry.begin_battle(cmd.player, cmd.opponent)
            return ok("started", started.battle_id, started.first_mover)

        if isinstance(cmd, TakeTurn):
            outcome = self.registry.process_turn(cmd.player, cmd.action)
            return turn_result(outcome)

        if isinstance(cmd, Capture):
            creature = self.registry.capture(cmd.player, cmd.creature)
            return ok("captured", creature.name)

        if isinstance(cmd, Donate):
            res = self.registry.donate(cmd.player, cmd.donor, cmd.recipient)
            return ok("transferred", res.transferred)

        if isinstance(cmd, ListRoster):
            entries: List[str] = [roster_entry(c) for c in self.registry.roster(cmd.player)]
            return ok("roster", ",".join(entries))

        raise TypeError(f"Unhandled command: {cmd!r}")
