from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "MONBATTLE_"

DEFAULT_DATABASE_URL = "sqlite:///./monbattle.sqlite3"
DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "pokedex.json"

RosterBackend = Literal["sql", "json", "memory"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    database_url: str = DEFAULT_DATABASE_URL

    # порт как у исходного UDP-сервера
    udp_host: str = "0.0.0.0"
    udp_port: int = Field(default=8080, ge=0, le=65535)

    catalog_path: Path = DEFAULT_CATALOG_PATH

    roster_backend: RosterBackend = "sql"
    roster_dir: Path = Path("./rosters")

    log_level: LogLevel = "INFO"

    # фиксированный seed -> воспроизводимые бои (тесты, отладка)
    rng_seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Собрать настройки из MONBATTLE_* переменных окружения; невалидные значения -> ValidationError."""
        env = os.environ if environ is None else environ
        data: dict[str, str] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                data[name] = raw
        if "log_level" in data:
            data["log_level"] = data["log_level"].upper()
        return cls.model_validate(data)
