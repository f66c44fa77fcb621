# services/slot_store.py

import logging

from sqlalchemy import Boolean, Date, Time, and_, delete, exists, insert, literal, select, update

from models.availability import Slot
from models.booking import Booking, STATUS_BOOKED

logger = logging.getLogger(__name__)

availability = Slot.__table__
SLOT_COLUMNS = ['date', 'start_time', 'end_time', 'is_open']


class SlotStore:
    """
    Access to the availability table through an explicitly passed session.

    Every write that depends on the current table contents is a single
    conditional statement, so the check and the write cannot be interleaved
    by another request.
    """

    def __init__(self, session):
        self.session = session

    # ---- reads -------------------------------------------------------------

    def get(self, slot_id):
        return self.session.get(Slot, slot_id)

    def _overlap_query(self, slot_date, start_time, end_time, exclude_id=None):
        query = select(Slot.id).where(
            Slot.date == slot_date,
            Slot.start_time < end_time,
            Slot.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.where(Slot.id != exclude_id)
        return query.correlate(None)

    def has_overlap(self, slot_date, start_time, end_time, exclude_id=None):
        """True iff another slot on the date intersects [start_time, end_time)."""
        query = self._overlap_query(slot_date, start_time, end_time, exclude_id).limit(1)
        return self.session.execute(query).first() is not None

    def _booked_flag(self):
        return exists().where(
            Booking.availability_id == Slot.id,
            Booking.status == STATUS_BOOKED,
        ).label('is_booked')

    def is_booked(self, slot_id):
        query = select(Booking.id).where(
            Booking.availability_id == slot_id,
            Booking.status == STATUS_BOOKED,
        ).limit(1)
        return self.session.execute(query).first() is not None

    def list_open(self, slot_date=None):
        query = select(Slot).where(Slot.is_open.is_(True))
        if slot_date is not None:
            query = query.where(Slot.date == slot_date)
        query = query.order_by(Slot.date, Slot.start_time)
        return self.session.execute(query).scalars().all()

    def list_with_booked(self, date_from=None, date_to=None):
        """Rows of (Slot, is_booked) ordered by date and start time."""
        query = select(Slot, self._booked_flag())
        if date_from is not None and date_to is not None:
            query = query.where(Slot.date.between(date_from, date_to))
        query = query.order_by(Slot.date, Slot.start_time)
        return [(row[0], bool(row[1])) for row in self.session.execute(query).all()]

    # ---- writes ------------------------------------------------------------

    def _values(self, slot):
        return select(
            literal(slot['date'], Date()),
            literal(slot['start_time'], Time()),
            literal(slot['end_time'], Time()),
            literal(bool(slot['is_open']), Boolean()),
        )

    def insert_if_free(self, slot):
        """
        Insert the slot only when nothing on its date overlaps it.
        Returns the new id, or None when an overlapping row exists.
        """
        overlap = self._overlap_query(slot['date'], slot['start_time'], slot['end_time']).exists()
        stmt = insert(availability).from_select(SLOT_COLUMNS, self._values(slot).where(~overlap))
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return self.session.execute(
            select(Slot.id).where(
                Slot.date == slot['date'],
                Slot.start_time == slot['start_time'],
                Slot.end_time == slot['end_time'],
            )
        ).scalar_one()

    def update_if_free(self, slot_id, slot):
        """Rewrite a slot unless the new interval overlaps another row. Returns rows affected."""
        overlap = self._overlap_query(
            slot['date'], slot['start_time'], slot['end_time'], exclude_id=slot_id
        ).exists()
        stmt = (
            update(availability)
            .where(Slot.id == slot_id, ~overlap)
            .values(
                date=slot['date'],
                start_time=slot['start_time'],
                end_time=slot['end_time'],
                is_open=bool(slot['is_open']),
            )
        )
        return self.session.execute(stmt).rowcount

    def insert_if_absent(self, slot):
        """Idempotent insert keyed on (date, start_time, end_time). Returns 1 if a row was added."""
        same_key = select(Slot.id).where(
            Slot.date == slot['date'],
            Slot.start_time == slot['start_time'],
            Slot.end_time == slot['end_time'],
        ).correlate(None).exists()
        stmt = insert(availability).from_select(SLOT_COLUMNS, self._values(slot).where(~same_key))
        return self.session.execute(stmt).rowcount

    def insert_many_if_absent(self, slots):
        inserted = 0
        for slot in slots:
            inserted += self.insert_if_absent(slot)
        return inserted

    def set_open(self, slot_id, is_open):
        stmt = (
            update(availability)
            .where(Slot.id == slot_id)
            .values(is_open=bool(is_open))
        )
        return self.session.execute(stmt).rowcount

    def claim(self, slot_id):
        """
        Close the slot only if it is currently open.

        Returns True for exactly one caller per open slot; every concurrent or
        later caller sees zero affected rows.
        """
        stmt = (
            update(availability)
            .where(and_(Slot.id == slot_id, Slot.is_open.is_(True)))
            .values(is_open=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def delete_unless_booked(self, slot_id):
        """Delete the slot when no BOOKED booking references it. Returns rows affected."""
        booked = select(Booking.id).where(
            Booking.availability_id == slot_id,
            Booking.status == STATUS_BOOKED,
        ).correlate(None).exists()
        stmt = (
            delete(availability)
            .where(Slot.id == slot_id, ~booked)
        )
        return self.session.execute(stmt).rowcount
