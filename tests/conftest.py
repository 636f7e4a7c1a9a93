import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import init_db
from main import app, get_session_factory
from seed import seed


@pytest.fixture
def sql_engine():
    """Private in-memory SQLite database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return sessionmaker(bind=sql_engine)


@pytest.fixture
def seeded(session_factory):
    seed(session_factory)
    return session_factory


@pytest.fixture
def client(seeded):
    app.dependency_overrides[get_session_factory] = lambda: seeded
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def file_session_factory(tmp_path):
    """Seeded SQLite file database; every session gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'library.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    factory = sessionmaker(bind=engine)
    seed(factory)
    yield factory
    engine.dispose()
