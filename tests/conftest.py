from datetime import datetime

import pytest

from campus_planner.app import create_app
from campus_planner.config import TestConfig
from campus_planner.models import db, User
from campus_planner.store import CycleStore


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    student = User(email="student@example.com", username="student", password_hash="x")
    db.session.add(student)
    db.session.commit()
    return student


@pytest.fixture
def store(app):
    return CycleStore(db.session)


@pytest.fixture
def logged_in(client):
    client.post("/signup", json={"email": "ada@example.com", "password": "secret123",
                                 "username": "ada"})
    client.post("/login", json={"email": "ada@example.com", "password": "secret123"})
    return client


@pytest.fixture
def week_start():
    return datetime(2025, 1, 1, 9, 30)
