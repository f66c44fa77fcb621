# services/availability_service.py

import logging

from .errors import ConflictError, NotFoundError, ValidationError
from .slot_store import SlotStore
from .validators import is_valid_date, is_valid_time, parse_date, parse_time

logger = logging.getLogger(__name__)


def normalize_slot(raw):
    """Validate a slot payload and convert it to date/time values."""
    raw = raw if isinstance(raw, dict) else {}
    slot = {
        'date': raw.get('date'),
        'start_time': raw.get('start_time'),
        'end_time': raw.get('end_time'),
        'is_open': bool(raw.get('is_open')),
    }
    if not is_valid_date(slot['date']):
        raise ValidationError("Invalid date format (YYYY-MM-DD required).", payload={'slot': slot})
    if not is_valid_time(slot['start_time']) or not is_valid_time(slot['end_time']):
        raise ValidationError("Invalid time format (HH:MM required).", payload={'slot': slot})
    if slot['start_time'] >= slot['end_time']:
        raise ValidationError("Start time must be before end time.", payload={'slot': slot})

    slot['date'] = parse_date(slot['date'])
    slot['start_time'] = parse_time(slot['start_time'])
    slot['end_time'] = parse_time(slot['end_time'])
    return slot


def _slot_response(slot_id, slot):
    return {
        'id': slot_id,
        'date': slot['date'].isoformat(),
        'start_time': slot['start_time'].strftime('%H:%M'),
        'end_time': slot['end_time'].strftime('%H:%M'),
        'is_open': slot['is_open'],
    }


class AvailabilityService:
    OVERLAP_MESSAGE = "Slot overlaps an existing availability block."

    def __init__(self, session):
        self.session = session
        self.store = SlotStore(session)

    def list_open(self, date_text=None):
        slot_date = None
        if date_text:
            if not is_valid_date(date_text):
                raise ValidationError("Invalid date format (YYYY-MM-DD required).")
            slot_date = parse_date(date_text)
        return [slot.to_dict() for slot in self.store.list_open(slot_date)]

    def list_all(self):
        return [slot.to_dict(is_booked=booked) for slot, booked in self.store.list_with_booked()]

    def list_range(self, date_from, date_to):
        if not is_valid_date(date_from) or not is_valid_date(date_to):
            raise ValidationError("from and to are required in YYYY-MM-DD format")
        rows = self.store.list_with_booked(parse_date(date_from), parse_date(date_to))
        return [slot.to_dict(is_booked=booked) for slot, booked in rows]

    def create(self, payload):
        slot = normalize_slot(payload)
        try:
            slot_id = self.store.insert_if_free(slot)
            if slot_id is None:
                raise ConflictError(self.OVERLAP_MESSAGE)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"➕ Slot {slot_id} created for {slot['date']} {slot['start_time']}-{slot['end_time']}")
        return _slot_response(slot_id, slot)

    def update(self, slot_id, payload):
        slot = normalize_slot(payload)
        try:
            updated = self.store.update_if_free(slot_id, slot)
            if updated == 0:
                if self.store.get(slot_id) is None:
                    raise NotFoundError("Slot not found")
                raise ConflictError(self.OVERLAP_MESSAGE)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return _slot_response(slot_id, slot)

    def delete(self, slot_id):
        try:
            deleted = self.store.delete_unless_booked(slot_id)
            if deleted == 0:
                if self.store.get(slot_id) is None:
                    raise NotFoundError("Slot not found")
                raise ConflictError("Cannot delete a slot that is already booked.")
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"🗑️ Slot {slot_id} deleted")
        return {'deleted': deleted}

    def toggle(self, slot_id, is_open):
        try:
            updated = self.store.set_open(slot_id, is_open)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return {'updated': updated}
