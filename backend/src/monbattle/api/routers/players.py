from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from monbattle.api.deps import get_services
from monbattle.api.schemas import PlayersResponse, RosterResponse
from monbattle.bootstrap import Services
from monbattle.core.persistence.state_codec import roster_to_list

router = APIRouter(prefix="/players", tags=["players"])


@router.get("", response_model=PlayersResponse)
def list_players(services: Services = Depends(get_services)):
    return PlayersResponse(players=services.registry.players())


@router.get("/{name}/roster", response_model=RosterResponse)
def get_roster(name: str, services: Services = Depends(get_services)):
    if not services.registry.is_registered(name):
        raise HTTPException(status_code=404, detail="Player not found")
    creatures = services.registry.roster(name)
    return RosterResponse(player=name, creatures=roster_to_list(creatures))
