def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_commands_endpoint(client):
    r = client.post("/commands", json={"command": "register", "args": ["A"]})
    assert r.status_code == 200, r.text
    assert r.json() == {"ok": True, "code": "registered", "kind": None, "wire": "registered"}

    r = client.post("/commands", json={"command": "register", "args": ["A"]})
    assert r.json() == {
        "ok": False,
        "code": "AlreadyRegistered",
        "kind": "Conflict",
        "wire": "AlreadyRegistered:A",
    }

    r = client.post("/commands:raw", json={"datagram": "capture:A|squirtle"})
    assert r.json()["wire"] == "captured:squirtle"

    r = client.post("/commands:raw", json={"datagram": "teleport:A"})
    body = r.json()
    assert body["ok"] is False
    assert body["kind"] == "NotFound"


def test_players_and_roster(client):
    for name in ("B", "A"):
        client.post("/commands", json={"command": "register", "args": [name]})
    client.post("/commands", json={"command": "capture", "args": ["A", "caterpie"]})

    r = client.get("/players")
    assert r.json() == {"players": ["A", "B"]}

    r = client.get("/players/A/roster")
    assert r.status_code == 200
    body = r.json()
    assert body["player"] == "A"
    (rec,) = body["creatures"]
    assert rec["name"] == "caterpie"
    assert rec["type"] == ["bug"]
    assert rec["hp"] == 45

    assert client.get("/players/Z/roster").status_code == 404


def test_battle_snapshot(client):
    for p in ("A", "B"):
        client.post("/commands", json={"command": "register", "args": [p]})
        for name in ("squirtle", "wartortle", "blastoise"):
            client.post("/commands", json={"command": "capture", "args": [p, name]})

    r = client.post("/commands", json={"command": "startBattle", "args": ["A", "B"]})
    wire = r.json()["wire"]
    assert wire.startswith("started:")
    battle_id = wire.split(":")[1]

    r = client.get(f"/battles/{battle_id}")
    assert r.status_code == 200
    state = r.json()["state"]
    assert state["turn_owner"] == "A"
    assert [s["player"] for s in state["sides"]] == ["A", "B"]
    assert [c["name"] for c in state["sides"][1]["creatures"]] == [
        "squirtle",
        "wartortle",
        "blastoise",
    ]

    client.post("/commands", json={"command": "turn", "args": ["A", "surrender"]})
    assert client.get(f"/battles/{battle_id}").status_code == 404
