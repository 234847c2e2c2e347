from monbattle.core.engine.commands import AttackAction
from monbattle.core.engine.rules.apply import apply_action, compute_damage
from monbattle.core.engine.state import BattleSide, BattleState


def _battle(a, b, seed=1):
    return BattleState(
        id="b1",
        sides=[BattleSide(player="A", creatures=a), BattleSide(player="B", creatures=b)],
        turn_owner="A",
    ).with_seed(seed)


def test_damage_floor_is_one():
    assert compute_damage(10, 50) == 1
    assert compute_damage(49, 49) == 1
    assert compute_damage(60, 20) == 40
    assert compute_damage(60, 20, 0.5) == 20
    # множитель, обнуляющий урон, всё равно даёт 1
    assert compute_damage(60, 20, 0.0) == 1


def test_attack_applies_damage_and_passes_turn(make_mon):
    state = _battle(
        [make_mon("a1"), make_mon("a2"), make_mon("a3")],
        [make_mon("b1"), make_mon("b2"), make_mon("b3")],
    )

    state, events = apply_action(state, "A", AttackAction())
    assert [e["type"] for e in events] == ["AttackDeclared", "DamageApplied", "TurnPassed"]

    applied = events[1]["payload"]
    assert applied["target"] == "b1"
    assert applied["damage"] == 10  # 20 - 10
    assert applied["hp_before"] == 50
    assert applied["hp_after"] == 40
    assert applied["multiplier"] == 1.0
    assert applied["kind"] in ("normal", "special")

    assert state.sides[1].active.hp == 40
    assert state.turn_owner == "B"
    assert state.turn == 1
    assert [e["seq"] for e in events] == [1, 2, 3]


def test_weak_attacker_still_deals_one(make_mon):
    state = _battle(
        [make_mon("a1", attack=5), make_mon("a2"), make_mon("a3")],
        [make_mon("b1", defense=80), make_mon("b2"), make_mon("b3")],
    )

    _, events = apply_action(state, "A", AttackAction())
    assert events[1]["payload"]["damage"] == 1
    assert state.sides[1].active.hp == 49


def test_overkill_clamps_to_zero_and_rotates(make_mon):
    state = _battle(
        [make_mon("a1", attack=100), make_mon("a2"), make_mon("a3")],
        [make_mon("b1", current_hp=5), make_mon("b2"), make_mon("b3")],
    )

    state, events = apply_action(state, "A", AttackAction())
    assert [e["type"] for e in events] == [
        "AttackDeclared",
        "DamageApplied",
        "CreatureFainted",
        "TurnPassed",
    ]
    assert events[1]["payload"]["hp_after"] == 0
    assert events[2]["payload"] == {"owner": "B", "creature": "b1", "remaining": 2}

    foe = state.sides[1]
    assert foe.active.name == "b2"
    assert foe.creatures[-1].name == "b1"
    assert foe.creatures[-1].hp == 0
    assert state.turn_owner == "B"


def test_last_faint_concludes_without_turn_pass(make_mon):
    state = _battle(
        [make_mon("a1", attack=100), make_mon("a2"), make_mon("a3")],
        [
            make_mon("b1", current_hp=3),
            make_mon("b2", current_hp=0),
            make_mon("b3", current_hp=0),
        ],
    )

    state, events = apply_action(state, "A", AttackAction())
    types = [e["type"] for e in events]
    assert types[:4] == [
        "AttackDeclared",
        "DamageApplied",
        "CreatureFainted",
        "BattleConcluded",
    ]
    assert "TurnPassed" not in types
    assert "ExperienceDistributed" in types

    concluded = events[3]["payload"]
    assert concluded["winner"] == "A"
    assert concluded["loser"] == "B"
    assert concluded["reason"] == "knockout"

    assert state.concluded
    assert state.winner == "A"
    assert state.turn_owner is None


def test_custom_damage_middleware_scales_damage(make_mon):
    class Double:
        def damage_multiplier(self, state, attacker, defender, ctx):
            return 2.0

    state = _battle(
        [make_mon("a1"), make_mon("a2"), make_mon("a3")],
        [make_mon("b1"), make_mon("b2"), make_mon("b3")],
    )

    _, events = apply_action(state, "A", AttackAction(), middlewares=[Double()])
    applied = events[1]["payload"]
    assert applied["multiplier"] == 2.0
    assert applied["damage"] == 20
