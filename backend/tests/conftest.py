import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from keyrelay.core.limiter import limiter
from keyrelay.core.store import MemoryRecordStore, SqlRecordStore
from keyrelay.infra.database import get_db, init_db
from keyrelay.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def sql_store(session_factory):
    db = session_factory()
    yield SqlRecordStore(db)
    db.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    if request.param == "memory":
        return MemoryRecordStore()
    return request.getfixturevalue("sql_store")


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(username, public_key_pem="PEM"):
        resp = client.post("/api/register", json={"username": username, "publicKeyPem": public_key_pem})
        assert resp.status_code == 200
        return resp.json()["token"]
    return _register

