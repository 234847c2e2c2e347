from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from monbattle.api.deps import get_services
from monbattle.api.schemas import BattleResponse
from monbattle.bootstrap import Services

router = APIRouter(prefix="/battles", tags=["battles"])


@router.get("/{battle_id}", response_model=BattleResponse)
def get_battle(battle_id: str, services: Services = Depends(get_services)):
    # завершённые бои из реестра удаляются, для них тоже 404
    state = services.registry.get_battle(battle_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Battle not found")
    return BattleResponse(battle_id=battle_id, state=state)
