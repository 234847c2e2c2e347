# backend/src/monbattle/core/engine/commands.py

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# имя игрока попадает в имя файла ростера
PlayerName = Annotated[str, Field(pattern=r"^[A-Za-z0-9_-]{1,32}$")]
CreatureName = Annotated[str, Field(min_length=1, max_length=64)]


# --- действия в бою ---


class ActionBase(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: str


class AttackAction(ActionBase):
    kind: Literal["attack"] = "attack"


class SwitchAction(ActionBase):
    kind: Literal["switch"] = "switch"
    creature: CreatureName


class SurrenderAction(ActionBase):
    kind: Literal["surrender"] = "surrender"


Action = Annotated[
    Union[AttackAction, SwitchAction, SurrenderAction],
    Field(discriminator="kind"),
]


# --- команды протокола ---


class CommandBase(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: str


class Register(CommandBase):
    type: Literal["Register"] = "Register"
    player: PlayerName


class StartBattle(CommandBase):
    type: Literal["StartBattle"] = "StartBattle"
    player: PlayerName
    opponent: PlayerName


class TakeTurn(CommandBase):
    type: Literal["TakeTurn"] = "TakeTurn"
    player: PlayerName
    action: Action


class Capture(CommandBase):
    type: Literal["Capture"] = "Capture"
    player: PlayerName
    creature: CreatureName


class Donate(CommandBase):
    type: Literal["Donate"] = "Donate"
    player: PlayerName
    donor: CreatureName
    recipient: CreatureName


class ListRoster(CommandBase):
    type: Literal["ListRoster"] = "ListRoster"
    player: PlayerName


Command = Annotated[
    Union[
        Register,
        StartBattle,
        TakeTurn,
        Capture,
        Donate,
        ListRoster,
    ],
    Field(discriminator="type"),
]
