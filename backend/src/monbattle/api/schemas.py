from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CommandRequest(BaseModel):
    command: str
    args: List[str] = Field(default_factory=list)


class RawCommandRequest(BaseModel):
    datagram: str


class CommandResponse(BaseModel):
    ok: bool
    code: str
    # у успешных ответов kind нет
    kind: Optional[str] = None
    wire: str


class PlayersResponse(BaseModel):
    players: List[str]


class RosterResponse(BaseModel):
    player: str
    creatures: List[Dict[str, Any]]


class BattleResponse(BaseModel):
    battle_id: str
    state: Dict[str, Any]
