from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from random import Random
from typing import Dict, List, Optional, Sequence

from monbattle.core.adapters.mapper import CaptureOverrides, creature_from_catalog
from monbattle.core.catalog import CreatureCatalog
from monbattle.core.engine.errors import AlreadyCaptured, CreatureCatalogMiss
from monbattle.core.engine.leveling import LevelUp, transfer_experience
from monbattle.core.engine.state import Creature
from monbattle.core.persistence.roster_store import RosterGateway

log = logging.getLogger(__name__)


@dataclass
class DonationResult:
    donor: str
    recipient: str
    transferred: int
    level_ups: List[LevelUp] = field(default_factory=list)


class RosterBook:
    """
    Операции над ростерами поверх RosterGateway.
    Каждый read-modify-write одного игрока идёт под его личным lock'ом.
    """

    def __init__(
        self,
        gateway: RosterGateway,
        catalog: CreatureCatalog,
        *,
        rng: Optional[Random] = None,
    ):
        self.gateway = gateway
        self.catalog = catalog
        self._rng = rng or Random()
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, player: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(player)
            if lock is None:
                lock = self._locks[player] = threading.Lock()
            return lock

    def load(self, player: str) -> List[Creature]:
        return self.gateway.get(player)

    def capture(
        self,
        player: str,
        creature_name: str,
        overrides: Optional[CaptureOverrides] = None,
    ) -> Creature:
        entry = self.catalog.lookup(creature_name)
        if entry is None:
            raise CreatureCatalogMiss("Creature not in catalog", creature_name)

        creature = creature_from_catalog(entry, overrides)
        with self.lock_for(player):
            roster = self.gateway.get(player)
            # имя уникально внутри ростера
            if any(c.name == creature.name for c in roster):
                raise AlreadyCaptured("Creature already in roster", creature.name)
            roster.append(creature)
            self.gateway.put(player, roster)

        log.info("captured player=%s creature=%s roster_size=%d", player, creature.name, len(roster))
        return creature

    def donate(self, player: str, donor: str, recipient: str) -> DonationResult:
        with self.lock_for(player):
            roster = self.gateway.get(player)
            remaining, transferred, ups = transfer_experience(
                roster, donor, recipient, self._rng
            )
            self.gateway.put(player, remaining)

        log.info(
            "donation player=%s donor=%s recipient=%s exp=%d level_ups=%d",
            player,
            donor,
            recipient,
            transferred,
            len(ups),
        )
        return DonationResult(
            donor=donor, recipient=recipient, transferred=transferred, level_ups=ups
        )

    def write_back(self, player: str, creatures: Sequence[Creature]) -> None:
        """
        Итог боя -> ростер: записи с тем же именем заменяются снапшотом
        (HP, обмороки, опыт, уровни). Остальной ростер и его порядок не трогаем.
        """
        by_name = {c.name: c for c in creatures}
        with self.lock_for(player):
            roster = self.gateway.get(player)
            merged = [by_name.get(c.name, c) for c in roster]
            self.gateway.put(player, merged)
        log.debug("battle result written back player=%s creatures=%s", player, list(by_name))
