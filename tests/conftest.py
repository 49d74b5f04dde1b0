from __future__ import annotations

import os

# Settings are read once at import time; point them at SQLite before the app loads.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_REQUESTS"] = "0"
os.environ["UNMATCHED_ROUTE_POLICY"] = "authenticated"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import get_db
from app.main import app
from app.models import Base, Permission
from app.scripts.seed_permissions import seed_catalog


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine) -> Session:
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog(db: Session) -> dict:
    """Seeded permission catalog as {name: Permission row}."""
    seed_catalog(db)
    return {p.name: p for p in db.query(Permission).all()}


@pytest.fixture()
def client(engine) -> TestClient:
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = testing_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
