import threading
from concurrent.futures import ThreadPoolExecutor


def _run_together(fn, args_list):
    barrier = threading.Barrier(len(args_list))

    def call(args):
        barrier.wait()
        return fn(*args)

    with ThreadPoolExecutor(max_workers=len(args_list)) as pool:
        return list(pool.map(call, args_list))


def test_duplicate_surrender_is_processed_once(dispatcher, registry, store, make_mon):
    d = dispatcher.handle_datagram
    d("register:A")
    d("register:B")
    store.put("A", [make_mon(f"a{i}", exp=30) for i in (1, 2, 3)])
    store.put("B", [make_mon(f"b{i}") for i in (1, 2, 3)])
    assert d("startBattle:A|B") == "started:b1:A"

    replies = _run_together(d, [("turn:A|surrender",)] * 8)

    assert replies.count("won:B") == 1
    assert replies.count("NoActiveBattle:A") == 7
    assert [c.accumulated_exp for c in registry.roster("B")] == [30, 30, 30]
    assert registry.battle_count() == 0


def test_concurrent_registration_has_single_winner(dispatcher, registry):
    replies = _run_together(dispatcher.handle_datagram, [("register:A",)] * 6)

    assert replies.count("registered") == 1
    assert replies.count("AlreadyRegistered:A") == 5
    assert registry.players() == ["A"]


def test_concurrent_captures_keep_every_creature(dispatcher, registry, catalog):
    dispatcher.handle_datagram("register:A")
    names = sorted(catalog.names())

    replies = _run_together(dispatcher.handle_datagram, [(f"capture:A|{n}",) for n in names])

    assert sorted(replies) == sorted(f"captured:{n}" for n in names)
    assert sorted(c.name for c in registry.roster("A")) == names


def test_player_joins_only_one_battle(dispatcher, registry):
    d = dispatcher.handle_datagram
    for p in ("A", "B", "C"):
        d(f"register:{p}")
        for name in ("charmander", "charmeleon", "charizard"):
            d(f"capture:{p}|{name}")

    replies = _run_together(d, [("startBattle:B|A",), ("startBattle:C|A",)])

    started = [r for r in replies if r.startswith("started:")]
    assert len(started) == 1
    assert registry.battle_count() == 1
    assert len([r for r in replies if r.startswith("AlreadyInBattle")]) == 1
