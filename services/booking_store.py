# services/booking_store.py

from sqlalchemy import select, update

from models.booking import Booking, STATUS_BOOKED
from models.user import User


class BookingStore:

    def __init__(self, session):
        self.session = session

    def get(self, booking_id):
        return self.session.get(Booking, booking_id)

    def insert(self, user_id, slot, service, address=None):
        """New BOOKED row referencing the slot, with the slot's date/time copied in."""
        booking = Booking(
            user_id=user_id,
            availability_id=slot.id,
            service=service,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            address=address,
            status=STATUS_BOOKED,
        )
        self.session.add(booking)
        self.session.flush()
        return booking

    def list_for_user(self, user_id):
        query = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.date.desc(), Booking.start_time.desc())
        )
        return self.session.execute(query).scalars().all()

    def list_all(self):
        query = (
            select(Booking, User.name)
            .join(User, Booking.user_id == User.id)
            .order_by(Booking.date.desc(), Booking.start_time.desc())
        )
        return self.session.execute(query).all()

    def set_status(self, booking_id, from_status, to_status):
        stmt = (
            update(Booking.__table__)
            .where(Booking.id == booking_id, Booking.status == from_status)
            .values(status=to_status)
        )
        return self.session.execute(stmt).rowcount == 1
