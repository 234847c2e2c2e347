from __future__ import annotations

from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from monbattle.core.engine.errors import ErrorCode, ErrorKind, MonBattleError, kind_of

WIRE_SEP = ":"


class Ok(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tag: Literal["ok"] = "ok"
    code: str  # "registered" | "started" | "damage" | ...
    fields: List[str] = Field(default_factory=list)


class Err(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tag: Literal["error"] = "error"
    code: ErrorCode
    kind: ErrorKind
    message: str = ""
    fields: List[str] = Field(default_factory=list)


Result = Annotated[Union[Ok, Err], Field(discriminator="tag")]


def ok(code: str, *fields: Any) -> Ok:
    return Ok(code=code, fields=[str(f) for f in fields])


def err(code: ErrorCode, message: str = "", *fields: Any) -> Err:
    return Err(code=code, kind=kind_of(code), message=message, fields=[str(f) for f in fields])


def err_from_exception(exc: MonBattleError) -> Err:
    return Err(
        code=exc.code,
        kind=exc.kind,
        message=exc.message,
        fields=list(exc.details),
    )


def to_wire(result: Result) -> str:
    """
    Сериализация в строку протокола:
      Ok  -> "<code>:<field>:..."     (например "damage:12:33")
      Err -> "<ErrorCode>:<detail>:..." (например "InsufficientRoster:A")
    """
    head = result.code.value if isinstance(result, Err) else result.code
    return WIRE_SEP.join([head, *result.fields])
