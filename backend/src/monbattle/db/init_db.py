from __future__ import annotations

from sqlalchemy import Engine

from . import models  # noqa: F401  (регистрирует таблицы в metadata)
from .base import Base


def init_db(bind: Engine) -> None:
    Base.metadata.create_all(bind=bind)
