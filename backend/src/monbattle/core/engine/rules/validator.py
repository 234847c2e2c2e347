from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from monbattle.core.engine.commands import (
    Action,
    AttackAction,
    SurrenderAction,
    SwitchAction,
)
from monbattle.core.engine.errors import ErrorCode
from monbattle.core.engine.state import BattleState


@dataclass
class ValidationError:
    code: ErrorCode
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[ValidationError] = field(default_factory=list)


def _err(code: ErrorCode, message: str, **meta: Any) -> ValidationResult:
    return ValidationResult(
        ok=False, errors=[ValidationError(code=code, message=message, meta=meta)]
    )


def validate_action(state: BattleState, player: str, action: Action) -> ValidationResult:
    # --- lifecycle gating ---
    # после завершения любые повторы (в т.ч. дубли датаграмм) отклоняются
    if state.concluded:
        return _err(
            ErrorCode.NO_ACTIVE_BATTLE,
            "Battle already concluded",
            battle_id=state.id,
            winner=state.winner,
        )

    side = state.side_of(player)
    if side is None:
        return _err(
            ErrorCode.UNKNOWN_PLAYER,
            "Player is not part of this battle",
            player=player,
        )

    if player != state.turn_owner:
        return _err(
            ErrorCode.NOT_YOUR_TURN,
            "It's not your turn",
            player=player,
            turn_owner=state.turn_owner,
        )

    if isinstance(action, AttackAction):
        opponent = state.opponent_of(player)
        if opponent is None or opponent.defeated:
            return _err(ErrorCode.NO_ACTIVE_BATTLE, "No opponent left to attack")
        return ValidationResult(ok=True)

    if isinstance(action, SwitchAction):
        target = side.find(action.creature)
        if target is None:
            # выбирать можно только из 3 существ снапшота, не из всего ростера
            return _err(
                ErrorCode.CREATURE_NOT_FOUND,
                "Creature is not in the battle snapshot",
                creature=action.creature,
            )
        if target.fainted:
            return _err(
                ErrorCode.CREATURE_FAINTED,
                "Cannot switch to a fainted creature",
                creature=action.creature,
            )
        return ValidationResult(ok=True)

    if isinstance(action, SurrenderAction):
        return ValidationResult(ok=True)

    return _err(ErrorCode.MALFORMED, "Unknown action", action=repr(action))
