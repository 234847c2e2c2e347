from __future__ import annotations

from typing import Any, Literal, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

AttackKind = Literal["normal", "special"]


class EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    event_id: UUID = Field(default_factory=uuid4)
    seq: int
    type: str

    battle_id: str
    turn: int
    turn_owner: Optional[str] = None
    actor: Optional[str] = None

    payload: dict[str, Any] = Field(default_factory=dict)


def ev_action_rejected(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    turn_owner: Optional[str],
    actor: Optional[str],
    action: dict,
    code: str,
    message: str,
    meta: dict,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="ActionRejected",
        battle_id=battle_id,
        turn=turn,
        turn_owner=turn_owner,
        actor=actor,
        payload={
            "action": action,
            "code": code,
            "message": message,
            "meta": meta,
        },
    )


def ev_attack_declared(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    actor: str,
    attacker: str,
    defender: str,
    kind: AttackKind,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="AttackDeclared",
        battle_id=battle_id,
        turn=turn,
        turn_owner=actor,
        actor=actor,
        payload={"attacker": attacker, "defender": defender, "kind": kind},
    )


def ev_damage_applied(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    actor: str,
    target: str,
    kind: AttackKind,
    offense: int,
    defense: int,
    multiplier: float,
    damage: int,
    hp_before: int,
    hp_after: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="DamageApplied",
        battle_id=battle_id,
        turn=turn,
        turn_owner=actor,
        actor=actor,
        payload={
            "target": target,
            "kind": kind,
            "offense": offense,
            "defense": defense,
            "multiplier": multiplier,
            "damage": damage,
            "hp_before": hp_before,
            "hp_after": hp_after,
        },
    )


def ev_creature_fainted(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    actor: str,
    owner: str,
    creature: str,
    remaining: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="CreatureFainted",
        battle_id=battle_id,
        turn=turn,
        turn_owner=actor,
        actor=actor,
        payload={"owner": owner, "creature": creature, "remaining": remaining},
    )


def ev_creature_switched(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    actor: str,
    from_creature: str,
    to_creature: str,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="CreatureSwitched",
        battle_id=battle_id,
        turn=turn,
        turn_owner=actor,
        actor=actor,
        payload={"from": from_creature, "to": to_creature},
    )


def ev_surrendered(
    *, seq: int, battle_id: str, turn: int, actor: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="Surrendered",
        battle_id=battle_id,
        turn=turn,
        turn_owner=actor,
        actor=actor,
        payload={"player": actor},
    )


def ev_battle_concluded(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    actor: str,
    winner: str,
    loser: str,
    reason: Literal["knockout", "surrender"],
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="BattleConcluded",
        battle_id=battle_id,
        turn=turn,
        turn_owner=None,
        actor=actor,
        payload={"winner": winner, "loser": loser, "reason": reason},
    )


def ev_experience_distributed(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    winner: str,
    total: int,
    share: int,
    recipients: list[str],
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="ExperienceDistributed",
        battle_id=battle_id,
        turn=turn,
        turn_owner=None,
        actor=winner,
        payload={
            "total": total,
            "share": share,
            "remainder": total - share * len(recipients),
            "recipients": recipients,
        },
    )


def ev_leveled_up(
    *,
    seq: int,
    battle_id: str,
    turn: int,
    owner: str,
    creature: str,
    level: int,
    ev: float,
    stats: dict[str, int],
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="LeveledUp",
        battle_id=battle_id,
        turn=turn,
        turn_owner=None,
        actor=owner,
        payload={"creature": creature, "level": level, "ev": ev, "stats": stats},
    )


def ev_turn_passed(
    *, seq: int, battle_id: str, turn: int, previous: str, next_owner: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        type="TurnPassed",
        battle_id=battle_id,
        turn=turn,
        turn_owner=next_owner,
        actor=previous,
        payload={"from": previous, "to": next_owner},
    )
