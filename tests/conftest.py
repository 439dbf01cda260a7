"""
Pytest fixtures for the FindOne API.

Every test gets its own in-memory SQLite database. Domain tests use the ``db``
session directly, API tests go through ``client`` with ``get_db`` overridden.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MAIL_FROM"] = ""
os.environ["MAIL_PASSWORD"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db, init_db
from app.models.activity_db.activity_crud import create_activity
from app.models.user_db.user_db_crud import create_user
from app.schemas.activity.activity_base import ActivityCreate
from app.schemas.users.user_base import UserCreate
from main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def user_payload(email, name="Test", last_name="User", password="secret123"):
    return {
        "email": email,
        "password": password,
        "name": name,
        "last_name": last_name,
        "location": "Palermo, CABA",
        "interests": ["Tenis", "Cine"],
    }


def activity_payload(**overrides):
    payload = {
        "title": "Busco compañero para partido de tenis",
        "category": "sports",
        "subcategory": "Tenis",
        "skill_level": 3,
        "location": "Club Palermo, CABA",
        "coordinates": {"lat": -34.5794, "lng": -58.4218},
        "time_label": "Hoy 19:00 hs",
        "spots": 1,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_user(db):
    def _make_user(email, name="Test", last_name="User", verified=True):
        user = create_user(db, UserCreate(**user_payload(email, name, last_name)))
        if verified:
            user.is_verified = True
            db.commit()
        return user

    return _make_user


@pytest.fixture
def make_activity(db):
    def _make_activity(organizer, **overrides):
        data = ActivityCreate(**activity_payload(**overrides))
        return create_activity(db, data, organizer.email, organizer.full_name, organizer.avatar)

    return _make_activity


@pytest.fixture
def signup(client):
    """Registers a user through the API, verifies it and returns auth headers."""
    def _signup(email, name="Test", verify=True):
        response = client.post("/auth/register", json=user_payload(email, name))
        assert response.status_code == 201, response.text
        body = response.json()
        headers = {"Authorization": f"Bearer {body['token']}"}
        if verify:
            verified = client.post("/auth/verify", json={"code": body["demo_code"]}, headers=headers)
            assert verified.status_code == 200, verified.text
        return headers

    return _signup
