from monbattle.core.engine.commands import AttackAction, SurrenderAction, SwitchAction
from monbattle.core.engine.errors import ErrorCode
from monbattle.core.engine.rules.apply import apply_action
from monbattle.core.engine.state import BattleSide, BattleState
from monbattle.core.persistence.state_codec import battle_state_to_dict


def _battle(a, b, seed=3):
    return BattleState(
        id="b1",
        sides=[BattleSide(player="A", creatures=a), BattleSide(player="B", creatures=b)],
        turn_owner="A",
    ).with_seed(seed)


def _trio(make_mon, prefix, **kw):
    return [make_mon(f"{prefix}{i}", **kw) for i in (1, 2, 3)]


def test_not_your_turn_rejected_without_mutation(make_mon):
    state = _battle(_trio(make_mon, "a"), _trio(make_mon, "b"))
    before = battle_state_to_dict(state)

    state, events = apply_action(state, "B", AttackAction())
    assert len(events) == 1
    rej = events[0]
    assert rej["type"] == "ActionRejected"
    assert rej["payload"]["code"] == ErrorCode.NOT_YOUR_TURN.value
    assert rej["turn_owner"] == "A"

    assert battle_state_to_dict(state) == before


def test_turns_alternate_on_attack_and_switch(make_mon):
    state = _battle(_trio(make_mon, "a"), _trio(make_mon, "b"))

    owners = []
    state, _ = apply_action(state, "A", AttackAction())
    owners.append(state.turn_owner)
    state, events = apply_action(state, "B", SwitchAction(creature="b3"))
    owners.append(state.turn_owner)
    state, _ = apply_action(state, "A", SwitchAction(creature="a2"))
    owners.append(state.turn_owner)

    assert owners == ["B", "A", "B"]
    assert [e["type"] for e in events] == ["CreatureSwitched", "TurnPassed"]
    assert events[0]["payload"] == {"from": "b1", "to": "b3"}
    assert state.sides[1].active.name == "b3"
    assert state.sides[0].active.name == "a2"
    assert state.turn == 3


def test_switch_outside_snapshot_is_not_found(make_mon):
    state = _battle(_trio(make_mon, "a"), _trio(make_mon, "b"))

    state, events = apply_action(state, "A", SwitchAction(creature="a9"))
    payload = events[0]["payload"]
    assert payload["code"] == ErrorCode.CREATURE_NOT_FOUND.value
    assert payload["meta"] == {"creature": "a9"}
    assert state.turn_owner == "A"
    assert state.turn == 0


def test_switch_to_fainted_is_rejected(make_mon):
    a = _trio(make_mon, "a")
    a[2].hp = 0
    state = _battle(a, _trio(make_mon, "b"))

    state, events = apply_action(state, "A", SwitchAction(creature="a3"))
    assert events[0]["payload"]["code"] == ErrorCode.CREATURE_FAINTED.value
    assert state.sides[0].active.name == "a1"


def test_surrender_concludes_and_credits_once(make_mon):
    state = _battle(_trio(make_mon, "a", exp=30), _trio(make_mon, "b"))

    state, events = apply_action(state, "A", SurrenderAction())
    types = [e["type"] for e in events]
    assert types == ["Surrendered", "BattleConcluded", "ExperienceDistributed"]
    assert events[1]["payload"]["winner"] == "B"
    assert events[1]["payload"]["reason"] == "surrender"

    dist = events[2]["payload"]
    assert dist["total"] == 90
    assert dist["share"] == 30
    assert dist["remainder"] == 0
    assert dist["recipients"] == ["b1", "b2", "b3"]
    assert [c.accumulated_exp for c in state.sides[1].creatures] == [30, 30, 30]

    # дубль датаграммы
    state, events = apply_action(state, "A", SurrenderAction())
    assert events[0]["type"] == "ActionRejected"
    assert events[0]["payload"]["code"] == ErrorCode.NO_ACTIVE_BATTLE.value
    assert [c.accumulated_exp for c in state.sides[1].creatures] == [30, 30, 30]


def test_surrender_is_allowed_only_on_own_turn(make_mon):
    state = _battle(_trio(make_mon, "a"), _trio(make_mon, "b"))

    state, events = apply_action(state, "B", SurrenderAction())
    assert events[0]["payload"]["code"] == ErrorCode.NOT_YOUR_TURN.value
    assert not state.concluded


def test_outsider_is_unknown_player(make_mon):
    state = _battle(_trio(make_mon, "a"), _trio(make_mon, "b"))

    _, events = apply_action(state, "C", AttackAction())
    assert events[0]["payload"]["code"] == ErrorCode.UNKNOWN_PLAYER.value
