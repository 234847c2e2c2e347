from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

log = logging.getLogger(__name__)


class StatEntry(BaseModel):
    name: str
    value: int = Field(ge=0)


class CatalogEntry(BaseModel):
    """Запись справочника (формат, который собирает краулер из pokeapi)."""

    model_config = ConfigDict(extra="ignore")

    name: str
    type: List[str] = Field(default_factory=list)
    base_exp: int = 0
    stats: List[StatEntry] = Field(default_factory=list)

    def stat_map(self) -> Dict[str, int]:
        return {s.name: s.value for s in self.stats}


_ENTRIES = TypeAdapter(List[CatalogEntry])


class CreatureCatalog:
    """Общий read-only справочник существ; ядро только читает его."""

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._by_name: Dict[str, CatalogEntry] = {}
        for e in entries:
            self._by_name[e.name.lower()] = e

    @classmethod
    def from_file(cls, path: str | Path) -> "CreatureCatalog":
        p = Path(path)
        raw = json.loads(p.read_text(encoding="utf-8"))
        catalog = cls(_ENTRIES.validate_python(raw))
        log.info("catalog loaded path=%s entries=%d", p, len(catalog))
        return catalog

    def lookup(self, name: str) -> Optional[CatalogEntry]:
        return self._by_name.get(name.lower())

    def names(self) -> List[str]:
        return [e.name for e in self._by_name.values()]

    def __len__(self) -> int:
        return len(self._by_name)
