from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Tuple


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    PRECONDITION = "Precondition"
    MALFORMED = "Malformed"
    INTERNAL = "Internal"


class ErrorCode(str, Enum):
    # NotFound
    UNKNOWN_PLAYER = "UnknownPlayer"
    NO_ACTIVE_BATTLE = "NoActiveBattle"
    CREATURE_NOT_FOUND = "CreatureNotFound"
    CREATURE_CATALOG_MISS = "CreatureCatalogMiss"
    UNKNOWN_COMMAND = "UnknownCommand"

    # Conflict
    ALREADY_REGISTERED = "AlreadyRegistered"
    ALREADY_IN_BATTLE = "AlreadyInBattle"
    NOT_YOUR_TURN = "NotYourTurn"
    ALREADY_CAPTURED = "AlreadyCaptured"

    # Precondition
    INSUFFICIENT_ROSTER = "InsufficientRoster"
    TYPE_MISMATCH = "TypeMismatch"
    SAME_CREATURE = "SameCreature"
    CREATURE_FAINTED = "CreatureFainted"
    INVALID_OPPONENT = "InvalidOpponent"

    # Malformed
    MALFORMED = "Malformed"

    INTERNAL_ERROR = "InternalError"


ERROR_KINDS: Dict[ErrorCode, ErrorKind] = {
    ErrorCode.UNKNOWN_PLAYER: ErrorKind.NOT_FOUND,
    ErrorCode.NO_ACTIVE_BATTLE: ErrorKind.NOT_FOUND,
    ErrorCode.CREATURE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.CREATURE_CATALOG_MISS: ErrorKind.NOT_FOUND,
    ErrorCode.UNKNOWN_COMMAND: ErrorKind.NOT_FOUND,
    ErrorCode.ALREADY_REGISTERED: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_IN_BATTLE: ErrorKind.CONFLICT,
    ErrorCode.NOT_YOUR_TURN: ErrorKind.CONFLICT,
    ErrorCode.ALREADY_CAPTURED: ErrorKind.CONFLICT,
    ErrorCode.INSUFFICIENT_ROSTER: ErrorKind.PRECONDITION,
    ErrorCode.TYPE_MISMATCH: ErrorKind.PRECONDITION,
    ErrorCode.SAME_CREATURE: ErrorKind.PRECONDITION,
    ErrorCode.CREATURE_FAINTED: ErrorKind.PRECONDITION,
    ErrorCode.INVALID_OPPONENT: ErrorKind.PRECONDITION,
    ErrorCode.MALFORMED: ErrorKind.MALFORMED,
    ErrorCode.INTERNAL_ERROR: ErrorKind.INTERNAL,
}


def kind_of(code: ErrorCode) -> ErrorKind:
    return ERROR_KINDS[code]


class MonBattleError(Exception):
    """Базовая доменная ошибка: код из ErrorCode + аргументы для wire-ответа."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *details: Any, **meta: Any):
        super().__init__(message)
        self.message = message
        self.details: Tuple[str, ...] = tuple(str(d) for d in details)
        self.meta: Dict[str, Any] = meta

    @property
    def kind(self) -> ErrorKind:
        return kind_of(self.code)


class UnknownPlayer(MonBattleError):
    code = ErrorCode.UNKNOWN_PLAYER


class NoActiveBattle(MonBattleError):
    code = ErrorCode.NO_ACTIVE_BATTLE


class CreatureNotFound(MonBattleError):
    code = ErrorCode.CREATURE_NOT_FOUND


class CreatureCatalogMiss(MonBattleError):
    code = ErrorCode.CREATURE_CATALOG_MISS


class UnknownCommand(MonBattleError):
    code = ErrorCode.UNKNOWN_COMMAND


class AlreadyRegistered(MonBattleError):
    code = ErrorCode.ALREADY_REGISTERED


class AlreadyInBattle(MonBattleError):
    code = ErrorCode.ALREADY_IN_BATTLE


class NotYourTurn(MonBattleError):
    code = ErrorCode.NOT_YOUR_TURN


class AlreadyCaptured(MonBattleError):
    code = ErrorCode.ALREADY_CAPTURED


class InsufficientRoster(MonBattleError):
    code = ErrorCode.INSUFFICIENT_ROSTER


class TypeMismatch(MonBattleError):
    code = ErrorCode.TYPE_MISMATCH


class SameCreature(MonBattleError):
    code = ErrorCode.SAME_CREATURE


class CreatureFainted(MonBattleError):
    code = ErrorCode.CREATURE_FAINTED


class InvalidOpponent(MonBattleError):
    code = ErrorCode.INVALID_OPPONENT


class MalformedCommand(MonBattleError):
    code = ErrorCode.MALFORMED


_BY_CODE: Dict[ErrorCode, type] = {
    cls.code: cls
    for cls in (
        UnknownPlayer,
        NoActiveBattle,
        CreatureNotFound,
        CreatureCatalogMiss,
        UnknownCommand,
        AlreadyRegistered,
        AlreadyInBattle,
        NotYourTurn,
        AlreadyCaptured,
        InsufficientRoster,
        TypeMismatch,
        SameCreature,
        CreatureFainted,
        InvalidOpponent,
        MalformedCommand,
    )
}


def error_for_code(code: ErrorCode, message: str, *details: Any, **meta: Any) -> MonBattleError:
    """Собрать исключение по коду (резолвер отдаёт отказ событием, реестр превращает его в исключение)."""
    cls = _BY_CODE.get(code, MonBattleError)
    return cls(message, *details, **meta)
