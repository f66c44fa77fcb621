"""
Failures part-way through a write must leave the store as it was.
"""

import pytest
from sqlalchemy import func, select

from conftest import booking_payload
from db.extensions import db
from models.availability import Slot
from models.booking import Booking
from models.user import User
from services.auth_service import AuthService
from services.booking_service import BookingService
from services.booking_store import BookingStore
from services.slot_generator import SlotGenerator
from services.slot_store import SlotStore


def _count(model):
    return db.session.scalar(select(func.count()).select_from(model))


class TestBookingRollback:

    def test_failed_insert_reopens_claimed_slot(self, app, make_slot, monkeypatch):
        slot_id = make_slot()

        def broken_insert(self, *args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(BookingStore, 'insert', broken_insert)

        with app.app_context():
            with pytest.raises(RuntimeError, match="disk full"):
                BookingService(db.session).create_booking(booking_payload(slot_id))

        with app.app_context():
            assert db.session.get(Slot, slot_id).is_open is True
            assert _count(Booking) == 0
            assert db.session.execute(
                select(User).where(User.email == 'guest@example.com')
            ).scalar_one_or_none() is None

    def test_slot_is_bookable_after_failed_attempt(self, app, client, make_slot, monkeypatch):
        slot_id = make_slot()
        original_insert = BookingStore.insert
        attempts = []

        def fails_once(self, *args, **kwargs):
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("connection reset")
            return original_insert(self, *args, **kwargs)

        monkeypatch.setattr(BookingStore, 'insert', fails_once)

        failed = client.post('/api/bookings', json=booking_payload(slot_id))
        retried = client.post('/api/bookings', json=booking_payload(slot_id))

        assert failed.status_code == 500
        assert retried.status_code == 201


class TestGenerateRollback:

    def test_failure_mid_batch_leaves_no_rows(self, app, monkeypatch):
        original_insert = SlotStore.insert_if_absent
        calls = []

        def fails_on_fifth(self, slot):
            calls.append(slot)
            if len(calls) == 5:
                raise RuntimeError("constraint check failed")
            return original_insert(self, slot)

        monkeypatch.setattr(SlotStore, 'insert_if_absent', fails_on_fifth)
        request = {
            'from': '2026-03-02', 'to': '2026-03-06', 'weekdays': [1, 2, 3, 4, 5],
            'start_time': '16:00', 'end_time': '22:00', 'interval_minutes': 60,
        }

        with app.app_context():
            with pytest.raises(RuntimeError):
                SlotGenerator(db.session).generate(request)

        with app.app_context():
            assert len(calls) == 5
            assert _count(Slot) == 0


class TestGuestAccountRace:

    def test_email_created_concurrently_is_reused(self, app, client, make_slot, make_user, monkeypatch):
        existing = make_user(name='Early Bird', email='early@example.com')
        slot_id = make_slot()
        original_find = AuthService.find_by_email
        lookups = []

        # the first lookup runs before the other request's user row is visible
        def stale_first_lookup(self, email):
            lookups.append(email)
            if len(lookups) == 1:
                return None
            return original_find(self, email)

        monkeypatch.setattr(AuthService, 'find_by_email', stale_first_lookup)

        response = client.post(
            '/api/bookings', json=booking_payload(slot_id, customer_email='early@example.com')
        )

        assert response.status_code == 201
        with app.app_context():
            booking = db.session.get(Booking, response.get_json()['id'])
            assert booking.user_id == existing['id']
            assert db.session.get(Slot, slot_id).is_open is False
            assert db.session.scalar(
                select(func.count()).select_from(User).where(User.email == 'early@example.com')
            ) == 1
