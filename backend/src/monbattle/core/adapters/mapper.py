from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Optional

from monbattle.core.catalog import CatalogEntry
from monbattle.core.engine.state import STAT_NAMES, Creature


@dataclass(frozen=True)
class CaptureOverrides:
    # удобно для тестов: поймать сразу не с 1 уровня / с опытом
    level: Optional[int] = None
    accumulated_exp: Optional[int] = None
    hp: Optional[int] = None


def creature_from_catalog(
    entry: CatalogEntry, overrides: Optional[CaptureOverrides] = None
) -> Creature:
    """
    Свежепойманное существо: level=1, опыт 0, HP = стат hp из справочника.
    Отсутствующие в записи статы считаем нулевыми.
    """
    ov = overrides or CaptureOverrides()

    stats = {name: 0 for name in STAT_NAMES}
    stats.update(entry.stat_map())

    hp = stats["hp"] if ov.hp is None else max(0, min(int(ov.hp), stats["hp"]))

    return Creature(
        name=entry.name,
        types=list(entry.type),
        stats=stats,
        hp=hp,
        level=1 if ov.level is None else max(1, int(ov.level)),
        accumulated_exp=0 if ov.accumulated_exp is None else max(0, int(ov.accumulated_exp)),
        base_exp=entry.base_exp,
    )


def snapshot_creature(creature: Creature) -> Creature:
    # снапшот для боя: глубокая копия, бой не трогает живой ростер
    return copy.deepcopy(creature)
