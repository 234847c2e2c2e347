from __future__ import annotations

import logging
from dataclasses import dataclass
from random import Random
from typing import Optional

from monbattle.config import Settings
from monbattle.core.catalog import CreatureCatalog
from monbattle.core.dispatch import CommandDispatcher
from monbattle.core.persistence.roster_store import (
    InMemoryRosterStore,
    JsonFileRosterStore,
    RosterGateway,
    SqlRosterStore,
)
from monbattle.core.session.registry import SessionRegistry
from monbattle.core.session.rosters import RosterBook
from monbattle.db.init_db import init_db
from monbattle.db.session import make_engine, make_session_factory

log = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    catalog: CreatureCatalog
    rosters: RosterBook
    registry: SessionRegistry
    dispatcher: CommandDispatcher


def build_gateway(settings: Settings) -> RosterGateway:
    if settings.roster_backend == "memory":
        return InMemoryRosterStore()
    if settings.roster_backend == "json":
        return JsonFileRosterStore(settings.roster_dir)

    engine = make_engine(settings.database_url)
    init_db(engine)
    return SqlRosterStore(make_session_factory(engine))


def build_services(
    settings: Optional[Settings] = None,
    *,
    catalog: Optional[CreatureCatalog] = None,
    gateway: Optional[RosterGateway] = None,
) -> Services:
    """Собрать граф сервисов процесса: справочник, ростеры, реестр, диспетчер."""
    settings = settings or Settings.from_env()
    catalog = catalog or CreatureCatalog.from_file(settings.catalog_path)
    gateway = gateway or build_gateway(settings)

    # один seed на процесс: из него же выводятся seed'ы боёв
    rng = Random(settings.rng_seed)
    rosters = RosterBook(gateway, catalog, rng=Random(rng.randrange(2**32)))
    registry = SessionRegistry(rosters, rng=rng)

    log.info(
        "services ready backend=%s catalog=%d seed=%s",
        settings.roster_backend,
        len(catalog),
        settings.rng_seed,
    )
    return Services(
        settings=settings,
        catalog=catalog,
        rosters=rosters,
        registry=registry,
        dispatcher=CommandDispatcher(registry),
    )
