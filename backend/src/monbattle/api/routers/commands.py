from __future__ import annotations

from fastapi import APIRouter, Depends

from monbattle.api.deps import get_services
from monbattle.api.schemas import CommandRequest, CommandResponse, RawCommandRequest
from monbattle.bootstrap import Services
from monbattle.core.dispatch import split_datagram
from monbattle.core.engine.results import Err, Result, to_wire

router = APIRouter(prefix="/commands", tags=["commands"])


def _response(result: Result) -> CommandResponse:
    if isinstance(result, Err):
        return CommandResponse(
            ok=False,
            code=result.code.value,
            kind=result.kind.value,
            wire=to_wire(result),
        )
    return CommandResponse(ok=True, code=result.code, wire=to_wire(result))


@router.post("", response_model=CommandResponse)
def run_command(payload: CommandRequest, services: Services = Depends(get_services)):
    """Та же команда, что и по UDP, но с аргументами списком."""
    return _response(services.dispatcher.dispatch(payload.command, payload.args))


@router.post(":raw", response_model=CommandResponse)
def run_raw_command(payload: RawCommandRequest, services: Services = Depends(get_services)):
    name, args = split_datagram(payload.datagram)
    return _response(services.dispatcher.dispatch(name, args))
