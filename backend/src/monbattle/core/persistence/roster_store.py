from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Protocol, Sequence

from sqlalchemy.orm import Session, sessionmaker

from monbattle.core.engine.state import Creature
from monbattle.core.persistence.state_codec import roster_from_list, roster_to_list
from monbattle.db.models import RosterRecord

log = logging.getLogger(__name__)


class RosterGateway(Protocol):
    """
    Key-value контракт хранилища ростеров: get/put по имени игрока.
    Гарантий порядка между конкурентными put одного ключа нет (last-write-wins).
    """

    def get(self, player: str) -> List[Creature]: ...

    def put(self, player: str, creatures: Sequence[Creature]) -> None: ...


class InMemoryRosterStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, List[dict]] = {}

    def get(self, player: str) -> List[Creature]:
        with self._lock:
            raw = copy.deepcopy(self._data.get(player, []))
        return roster_from_list(raw)

    def put(self, player: str, creatures: Sequence[Creature]) -> None:
        raw = roster_to_list(creatures)
        with self._lock:
            self._data[player] = raw


class JsonFileRosterStore:
    """Один файл на игрока: <dir>/<player>_pokemon.json (как у исходного сервера)."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, player: str) -> Path:
        return self.directory / f"{player}_pokemon.json"

    def get(self, player: str) -> List[Creature]:
        p = self.path_for(player)
        if not p.exists():
            return []
        return roster_from_list(json.loads(p.read_text(encoding="utf-8")))

    def put(self, player: str, creatures: Sequence[Creature]) -> None:
        p = self.path_for(player)
        data = json.dumps(roster_to_list(creatures), indent=2, ensure_ascii=False)

        # пишем во временный файл и атомарно подменяем
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{player}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
            os.replace(tmp, p)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        log.debug("roster saved player=%s path=%s size=%d", player, p, len(creatures))


class SqlRosterStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, player: str) -> List[Creature]:
        db: Session = self._session_factory()
        try:
            row = db.get(RosterRecord, player)
            if row is None:
                return []
            return roster_from_list(row.data_json)
        finally:
            db.close()

    def put(self, player: str, creatures: Sequence[Creature]) -> None:
        db: Session = self._session_factory()
        try:
            row = db.get(RosterRecord, player)
            if row is None:
                row = RosterRecord(player_name=player, data_json=roster_to_list(creatures))
                db.add(row)
            else:
                # новый list-объект, чтобы JSON-колонка увидела изменение
                row.data_json = roster_to_list(creatures)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
