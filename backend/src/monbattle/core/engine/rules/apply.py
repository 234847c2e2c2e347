from __future__ import annotations

from typing import Dict, List, Literal, Optional, Sequence, Tuple

from monbattle.core.engine.commands import (
    Action,
    AttackAction,
    SurrenderAction,
    SwitchAction,
)
from monbattle.core.engine.events import (
    AttackKind,
    ev_action_rejected,
    ev_attack_declared,
    ev_battle_concluded,
    ev_creature_fainted,
    ev_creature_switched,
    ev_damage_applied,
    ev_experience_distributed,
    ev_leveled_up,
    ev_surrendered,
    ev_turn_passed,
)
from monbattle.core.engine.leveling import distribute_battle_experience
from monbattle.core.engine.rules.middleware import (
    DEFAULT_DAMAGE_MIDDLEWARES,
    DamageContext,
    DamageMiddleware,
    combined_multiplier,
)
from monbattle.core.engine.rules.validator import validate_action
from monbattle.core.engine.state import BattleSide, BattleState

# атакующий стат -> защитный стат
ATTACK_PAIRS: Dict[AttackKind, Tuple[str, str]] = {
    "normal": ("attack", "defense"),
    "special": ("special-attack", "special-defense"),
}

MIN_DAMAGE = 1


def _bump(state: BattleState) -> int:
    state.seq += 1
    return state.seq


def compute_damage(offense: int, defense: int, multiplier: float = 1.0) -> int:
    return max(MIN_DAMAGE, int((offense - defense) * multiplier))


def _roll_attack_kind(state: BattleState) -> AttackKind:
    # 50/50 обычная или специальная
    return "normal" if state.rng.randrange(2) == 0 else "special"


def _rotate_out_fainted(side: BattleSide) -> None:
    # живые вперёд (порядок сохраняем), index 0 всегда не в обмороке, пока сторона жива
    alive = [c for c in side.creatures if not c.fainted]
    fainted = [c for c in side.creatures if c.fainted]
    side.creatures = alive + fainted


def _conclude(
    state: BattleState,
    *,
    winner: BattleSide,
    loser: BattleSide,
    actor: str,
    reason: Literal["knockout", "surrender"],
) -> List[dict]:
    evs: List[dict] = []

    state.phase = "concluded"
    state.winner = winner.player
    state.turn_owner = None

    evs.append(
        ev_battle_concluded(
            seq=_bump(state),
            battle_id=state.id,
            turn=state.turn,
            actor=actor,
            winner=winner.player,
            loser=loser.player,
            reason=reason,
        ).model_dump()
    )

    share = distribute_battle_experience(loser.creatures, winner.creatures, state.rng)
    evs.append(
        ev_experience_distributed(
            seq=_bump(state),
            battle_id=state.id,
            turn=state.turn,
            winner=winner.player,
            total=share.total,
            share=share.share,
            recipients=share.recipients,
        ).model_dump()
    )
    for up in share.level_ups:
        evs.append(
            ev_leveled_up(
                seq=_bump(state),
                battle_id=state.id,
                turn=state.turn,
                owner=winner.player,
                creature=up.creature,
                level=up.level,
                ev=up.ev,
                stats=up.stats,
            ).model_dump()
        )
    return evs


def _pass_turn(state: BattleState, player: str) -> List[dict]:
    opponent = state.opponent_of(player)
    assert opponent is not None
    state.turn_owner = opponent.player
    return [
        ev_turn_passed(
            seq=_bump(state),
            battle_id=state.id,
            turn=state.turn,
            previous=player,
            next_owner=opponent.player,
        ).model_dump()
    ]


def _resolve_attack(
    state: BattleState,
    player: str,
    middlewares: Sequence[DamageMiddleware],
) -> List[dict]:
    evs: List[dict] = []
    own = state.side_of(player)
    foe = state.opponent_of(player)
    assert own is not None and foe is not None

    attacker = own.active
    defender = foe.active

    kind = _roll_attack_kind(state)
    off_stat, def_stat = ATTACK_PAIRS[kind]
    offense = attacker.stat(off_stat)
    defense = defender.stat(def_stat)

    evs.append(
        ev_attack_declared(
            seq=_bump(state),
            battle_id=state.id,
            turn=state.turn,
            actor=player,
            attacker=attacker.name,
            defender=defender.name,
            kind=kind,
        ).model_dump()
    )

    ctx = DamageContext(
        attacker_owner=own.player,
        defender_owner=foe.player,
        kind=kind,
        offense=offense,
        defense=defense,
    )
    multiplier = combined_multiplier(middlewares, state, attacker, defender, ctx)
    damage = compute_damage(offense, defense, multiplier)

    hp_before = defender.hp
    defender.hp = max(0, defender.hp - damage)

    evs.append(
        ev_damage_applied(
            seq=_bump(state),
            battle_id=state.id,
            turn=state.turn,
            actor=player,
            target=defender.name,
            kind=kind,
            offense=offense,
            defense=defense,
            multiplier=multiplier,
            damage=damage,
            hp_before=hp_before,
            hp_after=defender.hp,
        ).model_dump()
    )

    if defender.fainted:
        _rotate_out_fainted(foe)
        evs.append(
            ev_creature_fainted(
                seq=_bump(state),
                battle_id=state.id,
                turn=state.turn,
                actor=player,
                owner=foe.player,
                creature=defender.name,
                remaining=len(foe.alive()),
            ).model_dump()
        )
        if foe.defeated:
            # победа нокаутом: ход НЕ передаём
            evs.extend(
                _conclude(state, winner=own, loser=foe, actor=player, reason="knockout")
            )
            return evs

    evs.extend(_pass_turn(state, player))
    return evs


def _resolve_switch(state: BattleState, player: str, creature: str) -> List[dict]:
    own = state.side_of(player)
    assert own is not None

    idx = own.index_of(creature)
    previous = own.active.name
    own.creatures[0], own.creatures[idx] = own.creatures[idx], own.creatures[0]
    # обморочные остаются в хвосте
    _rotate_out_fainted(own)

    evs = [
        ev_creature_switched(
            seq=_bump(state),
            battle_id=state.id,
            turn=state.turn,
            actor=player,
            from_creature=previous,
            to_creature=own.active.name,
        ).model_dump()
    ]
    # смена тоже тратит ход
    evs.extend(_pass_turn(state, player))
    return evs


def _resolve_surrender(state: BattleState, player: str) -> List[dict]:
    own = state.side_of(player)
    foe = state.opponent_of(player)
    assert own is not None and foe is not None

    evs = [
        ev_surrendered(
            seq=_bump(state), battle_id=state.id, turn=state.turn, actor=player
        ).model_dump()
    ]
    evs.extend(_conclude(state, winner=foe, loser=own, actor=player, reason="surrender"))
    return evs


def apply_action(
    state: BattleState,
    player: str,
    action: Action,
    middlewares: Optional[Sequence[DamageMiddleware]] = None,
) -> Tuple[BattleState, List[dict]]:
    """
    Возвращаем (state, events_as_dicts).
    При ошибке валидации возвращаем ActionRejected и НЕ меняем state
    (в т.ч. не передаём ход).
    """
    vr = validate_action(state, player, action)
    if not vr.ok:
        e = vr.errors[0]
        # seq не двигаем: отказ не меняет состояние боя
        rej = ev_action_rejected(
            seq=state.seq + 1,
            battle_id=state.id,
            turn=state.turn,
            turn_owner=state.turn_owner,
            actor=player,
            action=action.model_dump(),
            code=e.code.value,
            message=e.message,
            meta=e.meta,
        ).model_dump()
        return state, [rej]

    if middlewares is None:
        middlewares = DEFAULT_DAMAGE_MIDDLEWARES

    state.turn += 1

    if isinstance(action, AttackAction):
        return state, _resolve_attack(state, player, middlewares)

    if isinstance(action, SwitchAction):
        return state, _resolve_switch(state, player, action.creature)

    if isinstance(action, SurrenderAction):
        return state, _resolve_surrender(state, player)

    # валидатор уже отсекает неизвестные действия
    raise TypeError(f"Unhandled action: {action!r}")
