import base64
import os
from typing import Generator

# Settings are read at import time; point them at SQLite before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite:///./moviebooking-test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from moviebooking.core.database import Base, get_db, init_db
from moviebooking.main import app


@pytest.fixture
def session_factory(tmp_path):
    """SQLite session factory backed by a fresh file per test"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory) -> Generator:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """Test client whose requests use the per-test database"""
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def make_basic_auth(username: str, password: str) -> dict:
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}


@pytest.fixture
def basic_auth():
    return make_basic_auth


@pytest.fixture
def signed_up_user(client):
    """Sign up the default test account; returns the login credentials"""
    response = client.post("/api/users", json={
        "email_address": "a@b.com",
        "password": "p",
        "first_name": "A",
        "last_name": "B",
    })
    assert response.status_code == 201
    return {"username": "ab", "password": "p"}
