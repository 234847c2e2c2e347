from __future__ import annotations

import inspect
from typing import Any, Dict, Iterable, List, Type, TypeVar, cast

from monbattle.core.engine.state import STAT_NAMES, BattleSide, BattleState, Creature

TModel = TypeVar("TModel")


# ---------- универсальные helpers ----------


def _build_model(model_cls: Type[TModel], data: dict[str, Any]) -> TModel:
    """Создать dataclass, отфильтровав лишние ключи по сигнатуре конструктора."""
    params = inspect.signature(model_cls).parameters
    allowed = {
        name
        for name, p in params.items()
        if p.kind
        in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    }
    filtered = {k: v for k, v in data.items() if k in allowed}
    return cast(TModel, model_cls(**filtered))


def _as_str_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    if isinstance(v, (list, tuple, set)):
        return [str(x) for x in v]
    return [str(v)]


def _as_stats(v: Any) -> dict[str, int]:
    """
    Статы приходят либо списком [{"name": ..., "value": ...}] (формат каталога),
    либо уже словарём {"attack": 49, ...}.
    """
    if isinstance(v, dict):
        return {str(k): int(val) for k, val in v.items()}
    out: dict[str, int] = {}
    if isinstance(v, (list, tuple)):
        for item in v:
            if isinstance(item, dict) and "name" in item:
                out[str(item["name"])] = int(item.get("value", 0))
    return out


def _stats_as_list(stats: Dict[str, int]) -> list[dict[str, Any]]:
    # сначала известные статы в каноническом порядке, потом всё остальное
    ordered = [n for n in STAT_NAMES if n in stats]
    ordered += [n for n in stats if n not in STAT_NAMES]
    return [{"name": n, "value": int(stats[n])} for n in ordered]


# ---------- Creature codec ----------


def creature_to_dict(c: Creature) -> dict[str, Any]:
    return {
        "name": c.name,
        "type": list(c.types),
        "base_exp": c.base_exp,
        "stats": _stats_as_list(c.stats),
        "level": c.level,
        "hp": c.hp,
        "accumulated_exp": c.accumulated_exp,
    }


def creature_from_dict(d: dict[str, Any]) -> Creature:
    dd = dict(d)

    # "type" в json-файле, "types" в dataclass
    dd["types"] = _as_str_list(dd.pop("type", dd.get("types")))
    dd["stats"] = _as_stats(dd.get("stats"))

    dd["level"] = max(1, int(dd.get("level") or 1))
    dd["accumulated_exp"] = max(0, int(dd.get("accumulated_exp") or 0))
    dd["base_exp"] = int(dd.get("base_exp") or 0)

    max_hp = dd["stats"].get("hp")
    hp = dd.get("hp")
    if hp is None:
        hp = max_hp if max_hp is not None else 0
    hp = max(0, int(hp))
    if max_hp is not None:
        hp = min(hp, int(max_hp))
    else:
        dd["stats"]["hp"] = hp
    dd["hp"] = hp

    return _build_model(Creature, dd)


def roster_to_list(creatures: Iterable[Creature]) -> list[dict[str, Any]]:
    return [creature_to_dict(c) for c in creatures]


def roster_from_list(items: Any) -> List[Creature]:
    if not isinstance(items, list):
        return []
    return [creature_from_dict(x) for x in items if isinstance(x, dict)]


# ---------- BattleState codec (read-only view) ----------


def side_to_dict(side: BattleSide) -> dict[str, Any]:
    return {
        "player": side.player,
        "active": side.active.name if side.creatures else None,
        "creatures": [
            {**creature_to_dict(c), "max_hp": c.max_hp, "fainted": c.fainted}
            for c in side.creatures
        ],
    }


def battle_state_to_dict(state: BattleState) -> dict[str, Any]:
    """
    Снапшот боя для HTTP/логов. rng не сериализуем, только seed.
    """
    return {
        "id": state.id,
        "phase": state.phase,
        "turn_owner": state.turn_owner,
        "winner": state.winner,
        "turn": state.turn,
        "seq": state.seq,
        "rng_seed": state.rng_seed,
        "sides": [side_to_dict(s) for s in state.sides],
    }
