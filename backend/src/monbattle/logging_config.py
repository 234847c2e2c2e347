from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Настроить корневой логгер один раз на процесс (сервер, http-приложение)."""
    logging.basicConfig(level=level.upper(), format=fmt or LOG_FORMAT)
    logging.getLogger("monbattle").setLevel(level.upper())
