# services/slot_generator.py

import logging
from datetime import date, datetime, time, timedelta

import pytz

from .availability_service import normalize_slot
from .errors import ValidationError
from .slot_store import SlotStore
from .validators import as_int, is_valid_date, is_valid_time, parse_date, parse_time

logger = logging.getLogger(__name__)

MIN_INTERVAL_MINUTES = 15
DEFAULT_INTERVAL_MINUTES = 60
# Upper bound on one generate request, two years of calendar days
MAX_GENERATE_DAYS = 731

# Bootstrap schedule: Monday..Friday evenings, one-hour blocks
SEED_WEEKDAYS = {1, 2, 3, 4, 5}
EVENING_SLOTS = [
    ("16:00", "17:00"),
    ("17:00", "18:00"),
    ("18:00", "19:00"),
    ("19:00", "20:00"),
    ("20:00", "21:00"),
    ("21:00", "22:00"),
]


def sunday_weekday(day):
    """0=Sunday .. 6=Saturday (Python's weekday() starts at Monday)."""
    return (day.weekday() + 1) % 7


def iter_dates(date_from, date_to):
    cur = date_from
    while cur <= date_to:
        yield cur
        if cur == date_to:
            # stepping past date.max would overflow
            return
        cur += timedelta(days=1)


def _minute_of_day(value):
    return value.hour * 60 + value.minute


def _time_of_minute(minute):
    return time(minute // 60, minute % 60)


def generate_blocks(anchor_day, start_time, end_time, interval_minutes):
    """
    Consecutive interval-wide (start, end) pairs inside [start_time, end_time].
    A trailing block that would run past end_time is dropped, not clipped.
    """
    start = _minute_of_day(start_time)
    end = _minute_of_day(end_time)

    blocks = []
    cur = start
    while cur + interval_minutes <= end:
        blocks.append((_time_of_minute(cur), _time_of_minute(cur + interval_minutes)))
        cur += interval_minutes
    return blocks


def expand_recurring(date_from, date_to, weekdays, start_time, end_time, interval_minutes, is_open=True):
    """Deterministic candidate slots for every selected weekday in [date_from, date_to]."""
    slots = []
    for day in iter_dates(date_from, date_to):
        if sunday_weekday(day) not in weekdays:
            continue
        for block_start, block_end in generate_blocks(day, start_time, end_time, interval_minutes):
            slots.append({
                'date': day,
                'start_time': block_start,
                'end_time': block_end,
                'is_open': bool(is_open),
            })
    return slots


def parse_generate_request(payload):
    """
    Validate a recurring generation request.

    Payload:
    {
      "from": "2026-03-02", "to": "2026-03-06",
      "weekdays": [1, 2, 3, 4, 5],      // 0=Sun .. 6=Sat
      "start_time": "16:00", "end_time": "22:00",
      "interval_minutes": 60,           // optional, >= 15
      "is_open": true                   // optional
    }
    """
    date_from = payload.get('from')
    date_to = payload.get('to')
    if not is_valid_date(date_from) or not is_valid_date(date_to):
        raise ValidationError("from and to are required in YYYY-MM-DD format")
    date_from, date_to = parse_date(date_from), parse_date(date_to)
    if date_from > date_to:
        raise ValidationError("from must not be after to")
    if (date_to - date_from).days + 1 > MAX_GENERATE_DAYS:
        raise ValidationError(f"Date range must not exceed {MAX_GENERATE_DAYS} days")

    weekdays = payload.get('weekdays')
    if not isinstance(weekdays, list) or not weekdays:
        raise ValidationError("weekdays array is required (0=Sun..6=Sat)")
    weekday_set = set()
    for value in weekdays:
        number = as_int(value)
        if number is None or number < 0 or number > 6:
            raise ValidationError("weekdays array is required (0=Sun..6=Sat)")
        weekday_set.add(number)

    start_time = payload.get('start_time')
    end_time = payload.get('end_time')
    if not is_valid_time(start_time) or not is_valid_time(end_time) or start_time >= end_time:
        raise ValidationError("Valid start_time/end_time required")

    interval = as_int(payload.get('interval_minutes', DEFAULT_INTERVAL_MINUTES))
    if interval is None or interval < MIN_INTERVAL_MINUTES:
        raise ValidationError(f"interval_minutes must be an integer >= {MIN_INTERVAL_MINUTES}")

    start_time, end_time = parse_time(start_time), parse_time(end_time)
    if interval > _minute_of_day(end_time) - _minute_of_day(start_time):
        raise ValidationError("interval_minutes must fit between start_time and end_time")

    return {
        'date_from': date_from,
        'date_to': date_to,
        'weekdays': weekday_set,
        'start_time': start_time,
        'end_time': end_time,
        'interval_minutes': interval,
        'is_open': bool(payload.get('is_open', True)),
    }


class SlotGenerator:
    """Merges candidate slots into the store with an idempotent, all-or-nothing insert."""

    def __init__(self, session):
        self.session = session
        self.store = SlotStore(session)

    def _insert_batch(self, slots):
        try:
            inserted = self.store.insert_many_if_absent(slots)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return inserted

    def generate(self, payload):
        request = parse_generate_request(payload)
        slots = expand_recurring(**request)
        if not slots:
            raise ValidationError("No slots generated for the given configuration.")

        inserted = self._insert_batch(slots)
        logger.info(
            f"📅 Generated {len(slots)} slots for {request['date_from']}..{request['date_to']}, "
            f"inserted {inserted}"
        )
        return {'inserted': inserted, 'generated': len(slots)}

    def bulk(self, raw_slots):
        if not isinstance(raw_slots, list):
            raise ValidationError("Slots array required")
        slots = [normalize_slot(raw) for raw in raw_slots]
        inserted = self._insert_batch(slots)
        logger.info(f"📅 Bulk availability: requested {len(slots)}, inserted {inserted}")
        return {'message': 'Availability updated', 'inserted': inserted, 'requested': len(slots)}

    def seed_weekday_evenings(self, today=None, days_ahead=180):
        """Ensure Mon-Fri evening slots exist from today through today + days_ahead."""
        today = today or date.today()
        slots = []
        for day in iter_dates(today, today + timedelta(days=days_ahead)):
            if sunday_weekday(day) not in SEED_WEEKDAYS:
                continue
            for start, end in EVENING_SLOTS:
                slots.append({
                    'date': day,
                    'start_time': parse_time(start),
                    'end_time': parse_time(end),
                    'is_open': True,
                })
        inserted = self._insert_batch(slots)
        logger.info(f"[Seed] Weekday evening availability ensured. Inserted: {inserted}")
        return inserted


def business_today(tz_name):
    """Calendar date in the business timezone, so seeded dates match the customer's calendar."""
    return datetime.now(pytz.timezone(tz_name)).date()
