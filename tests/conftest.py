"""
Pytest configuration and fixtures for the athletics admin tests
"""

import pytest
from fastapi.testclient import TestClient

from athletics import db, services, models
from athletics.main import app as fastapi_app

PASSWORD = "password123"


@pytest.fixture(scope="function")
def session():
    """Fresh in-memory database with reference data"""
    db.reset_db()
    db.init_db("sqlite://")
    s = db.new_session()
    services.ensure_reference_data(s)
    yield s
    s.close()
    db.reset_db()


@pytest.fixture(scope="function")
def make_client(session, tmp_path, monkeypatch):
    """Factory for clients with their own cookie jar (one per signed-in user)"""
    monkeypatch.setattr(services.settings, "ATHLETICS_UPLOAD_DIR", str(tmp_path / "uploads"))
    clients = []

    def _make(**kwargs):
        c = TestClient(fastapi_app, **kwargs)
        c.__enter__()
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.__exit__(None, None, None)


@pytest.fixture(scope="function")
def client(make_client):
    return make_client()


def register(client, email, name="Test User", password=PASSWORD):
    r = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def login(client, email, password=PASSWORD):
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]


def add_membership(session, user_id, club_id, role="MEMBER", is_active=True):
    m = models.UserClub(user_id=user_id, club_id=club_id, role=role, is_active=is_active)
    session.add(m)
    session.commit()
    return m


def make_club(session, name="Harriers AC", is_active=True):
    c = models.Club(name=name, is_active=is_active)
    session.add(c)
    session.commit()
    return c


def gender_id(session, name="Female"):
    return session.query(models.Gender).filter_by(name=name).one().id


def medal_id(session, position=1):
    return session.query(models.Medal).filter_by(position=position).one().id


@pytest.fixture(scope="function")
def club(session):
    return make_club(session)


@pytest.fixture(scope="function")
def signed_in(make_client, session, club):
    """Factory: a client signed in as a new user holding ``role`` in the default club"""
    counter = {"n": 0}

    def _signed_in(role="ADMIN", email=None):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        c = make_client()
        user = register(c, email)
        add_membership(session, user["id"], club.id, role)
        login(c, email)
        return c

    return _signed_in


@pytest.fixture(scope="function")
def admin(signed_in):
    return signed_in("ADMIN")


@pytest.fixture(scope="function")
def member(signed_in):
    return signed_in("MEMBER")
