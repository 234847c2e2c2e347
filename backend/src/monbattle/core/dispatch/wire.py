from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from monbattle.core.engine.commands import Command
from monbattle.core.engine.errors import MalformedCommand, UnknownCommand

# имена команд исходного клиента оставлены как алиасы
COMMAND_ALIASES: Dict[str, str] = {
    "register": "register",
    "registerplayer": "register",
    "startbattle": "startBattle",
    "start": "startBattle",
    "turn": "turn",
    "processbattleturn": "turn",
    "capture": "capture",
    "capturepokemon": "capture",
    "donate": "donate",
    "destroy": "donate",
    "destroypokemon": "donate",
    "roster": "roster",
    "listroster": "roster",
}

# клиент шлёт и "cmd:a|b", и "cmd:a:b"
_ARG_SPLIT_RE = re.compile(r"[|:]")

_COMMAND = TypeAdapter(Command)


def split_datagram(text: str) -> Tuple[str, List[str]]:
    name, sep, rest = text.strip().partition(":")
    if not sep:
        return name.strip(), []
    return name.strip(), [a.strip() for a in _ARG_SPLIT_RE.split(rest)]


def _expect(name: str, args: Sequence[str], *counts: int) -> None:
    if len(args) not in counts:
        expected = " or ".join(str(c) for c in counts)
        raise MalformedCommand(
            f"{name} expects {expected} arguments, got {len(args)}",
            name,
            len(args),
        )


def _turn_action(args: Sequence[str]) -> Dict[str, Any]:
    kind = args[1].lower()
    if kind == "switch":
        _expect("turn switch", args, 3)
        return {"kind": "switch", "creature": args[2]}
    if kind in ("attack", "surrender"):
        _expect(f"turn {kind}", args, 2)
        return {"kind": kind}
    raise MalformedCommand("Unknown battle action", kind)


def command_payload(name: str, args: Sequence[str]) -> Dict[str, Any]:
    canonical = COMMAND_ALIASES.get(name.lower())
    if canonical is None:
        raise UnknownCommand("Unknown command", name)

    if canonical == "register":
        _expect(canonical, args, 1)
        return {"type": "Register", "player": args[0]}

    if canonical == "startBattle":
        _expect(canonical, args, 2)
        return {"type": "StartBattle", "player": args[0], "opponent": args[1]}

    if canonical == "turn":
        _expect(canonical, args, 2, 3)
        return {"type": "TakeTurn", "player": args[0], "action": _turn_action(args)}

    if canonical == "capture":
        _expect(canonical, args, 2)
        return {"type": "Capture", "player": args[0], "creature": args[1]}

    if canonical == "donate":
        _expect(canonical, args, 3)
        return {
            "type": "Donate",
            "player": args[0],
            "donor": args[1],
            "recipient": args[2],
        }

    _expect(canonical, args, 1)
    return {"type": "ListRoster", "player": args[0]}


def parse_command(name: str, args: Sequence[str]) -> Command:
    """Разбор без побочных эффектов: либо Command, либо MonBattleError."""
    payload = command_payload(name, args)
    try:
        return _COMMAND.validate_python(payload)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise MalformedCommand(f"Invalid argument {where}: {first.get('msg')}", where) from e
