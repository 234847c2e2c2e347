from __future__ import annotations

import itertools
from random import Random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from monbattle.api.deps import get_services
from monbattle.api.main import app
from monbattle.bootstrap import build_services
from monbattle.config import DEFAULT_CATALOG_PATH, Settings
from monbattle.core.catalog import CreatureCatalog
from monbattle.core.dispatch import CommandDispatcher
from monbattle.core.engine.state import Creature
from monbattle.core.persistence.roster_store import InMemoryRosterStore
from monbattle.core.session.registry import SessionRegistry
from monbattle.core.session.rosters import RosterBook
from monbattle.db.base import Base
import monbattle.db.models  # noqa: F401


@pytest.fixture(scope="session")
def catalog():
    return CreatureCatalog.from_file(DEFAULT_CATALOG_PATH)


@pytest.fixture()
def store():
    return InMemoryRosterStore()


@pytest.fixture()
def rosters(store, catalog):
    return RosterBook(store, catalog, rng=Random(7))


@pytest.fixture()
def registry(rosters):
    ids = (f"b{n}" for n in itertools.count(1))
    return SessionRegistry(rosters, rng=Random(11), id_factory=lambda: next(ids))


@pytest.fixture()
def dispatcher(registry):
    return CommandDispatcher(registry)


@pytest.fixture()
def make_mon():
    """
    Фабрика существ для боёв: attack == special-attack и defense == special-defense,
    поэтому урон не зависит от того, какой вид атаки выпал.
    """

    def _make(
        name,
        types=("normal",),
        hp=50,
        attack=20,
        defense=10,
        speed=30,
        level=1,
        exp=0,
        current_hp=None,
    ):
        return Creature(
            name=name,
            types=list(types),
            stats={
                "hp": hp,
                "attack": attack,
                "defense": defense,
                "special-attack": attack,
                "special-defense": defense,
                "speed": speed,
            },
            hp=hp if current_hp is None else current_hp,
            level=level,
            accumulated_exp=exp,
        )

    return _make


@pytest.fixture()
def sql_engine():
    # SQLite in-memory (один коннект на весь тест)
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def TestingSessionLocal(sql_engine):
    return sessionmaker(bind=sql_engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def services(catalog):
    return build_services(
        Settings(roster_backend="memory", rng_seed=5),
        catalog=catalog,
    )


@pytest.fixture()
def client(services):
    # lifespan не собирает свои сервисы, если они уже лежат в app.state
    app.state.services = services
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.services = None
