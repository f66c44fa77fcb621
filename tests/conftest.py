"""
Shared fixtures: an app on a throwaway SQLite file, users with tokens, slot rows.
"""

import uuid

import fakeredis
import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from app.config import TestingConfig
from db.extensions import db
from models.availability import Slot
from models.user import User, ROLE_OWNER, ROLE_USER
from services.auth_service import issue_token
from services.validators import parse_date, parse_time


@pytest.fixture
def app(tmp_path):
    class FileDbConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'slotbook-test.sqlite'}"

    flask_app = create_app(FileDbConfig, redis_client=fakeredis.FakeRedis(decode_responses=True))
    with flask_app.app_context():
        db.create_all()

    yield flask_app

    with flask_app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(name="Jane Customer", email=None, role=ROLE_USER, password="password123"):
        with app.app_context():
            user = User(
                name=name,
                email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
                password_hash=generate_password_hash(password),
                role=role,
            )
            db.session.add(user)
            db.session.commit()
            token = issue_token(user, 3600)
            return {
                'id': user.id,
                'name': user.name,
                'email': user.email,
                'headers': {'Authorization': f'Bearer {token}'},
            }
    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user(name="Shop Owner", role=ROLE_OWNER)


@pytest.fixture
def customer(make_user):
    return make_user(name="Casey Customer")


@pytest.fixture
def make_slot(app):
    def _make_slot(day="2026-03-02", start="16:00", end="17:00", is_open=True):
        with app.app_context():
            slot = Slot(
                date=parse_date(day),
                start_time=parse_time(start),
                end_time=parse_time(end),
                is_open=is_open,
            )
            db.session.add(slot)
            db.session.commit()
            return slot.id
    return _make_slot


def booking_payload(slot_id, **overrides):
    payload = {
        'availability_id': slot_id,
        'service': 'Full Cut',
        'customer_name': 'Guest Person',
        'customer_email': 'guest@example.com',
    }
    payload.update(overrides)
    return payload
