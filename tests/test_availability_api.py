"""
Tests for the /api/availability endpoints.
"""

from conftest import booking_payload


def _slot_body(day='2026-03-02', start='16:00', end='17:00', is_open=True):
    return {'date': day, 'start_time': start, 'end_time': end, 'is_open': is_open}


class TestAccessControl:

    def test_owner_routes_require_token(self, client):
        response = client.get('/api/availability/all')

        assert response.status_code == 401
        assert response.get_json() == {'message': 'Missing token'}

    def test_owner_routes_reject_customers(self, client, customer):
        response = client.post('/api/availability', json=_slot_body(), headers=customer['headers'])

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Owner access required'

    def test_garbage_token_is_rejected(self, client):
        response = client.get('/api/availability/all', headers={'Authorization': 'Bearer nope'})

        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid token'


class TestOpenSlots:

    def test_lists_only_open_slots(self, client, make_slot):
        make_slot(day='2026-03-02', start='16:00', end='17:00')
        make_slot(day='2026-03-02', start='17:00', end='18:00', is_open=False)
        make_slot(day='2026-03-03', start='16:00', end='17:00')

        response = client.get('/api/availability/open')

        assert response.status_code == 200
        assert [(s['date'], s['start_time']) for s in response.get_json()] == [
            ('2026-03-02', '16:00'),
            ('2026-03-03', '16:00'),
        ]

    def test_filters_by_date(self, client, make_slot):
        make_slot(day='2026-03-02')
        make_slot(day='2026-03-03')

        response = client.get('/api/availability/open?date=2026-03-03')

        assert [s['date'] for s in response.get_json()] == ['2026-03-03']


class TestManualCrud:

    def test_create_slot(self, client, owner):
        response = client.post('/api/availability', json=_slot_body(), headers=owner['headers'])

        assert response.status_code == 201
        body = response.get_json()
        assert body['date'] == '2026-03-02'
        assert body['start_time'] == '16:00'
        assert body['is_open'] is True
        assert isinstance(body['id'], int)

    def test_create_rejects_overlap(self, client, owner, make_slot):
        make_slot(start='16:00', end='17:00')

        response = client.post(
            '/api/availability', json=_slot_body(start='16:30', end='17:30'), headers=owner['headers']
        )

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Slot overlaps an existing availability block.'

    def test_create_validates_formats(self, client, owner):
        bad_date = client.post('/api/availability', json=_slot_body(day='03/02/2026'), headers=owner['headers'])
        bad_time = client.post('/api/availability', json=_slot_body(start='4pm'), headers=owner['headers'])
        reversed_times = client.post(
            '/api/availability', json=_slot_body(start='17:00', end='16:00'), headers=owner['headers']
        )

        assert bad_date.get_json()['message'] == 'Invalid date format (YYYY-MM-DD required).'
        assert bad_time.get_json()['message'] == 'Invalid time format (HH:MM required).'
        assert reversed_times.get_json()['message'] == 'Start time must be before end time.'

    def test_update_slot(self, client, owner, make_slot):
        slot_id = make_slot(start='16:00', end='17:00')

        response = client.put(
            f'/api/availability/{slot_id}', json=_slot_body(start='16:00', end='16:45'), headers=owner['headers']
        )

        assert response.status_code == 200
        assert response.get_json()['end_time'] == '16:45'

    def test_update_rejects_overlap_with_other_slot(self, client, owner, make_slot):
        first = make_slot(start='16:00', end='17:00')
        make_slot(start='17:00', end='18:00')

        response = client.put(
            f'/api/availability/{first}', json=_slot_body(start='16:30', end='17:30'), headers=owner['headers']
        )

        assert response.status_code == 400

    def test_update_missing_slot(self, client, owner):
        response = client.put('/api/availability/404', json=_slot_body(), headers=owner['headers'])

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Slot not found'

    def test_toggle_slot(self, client, owner, make_slot):
        slot_id = make_slot()

        response = client.patch(f'/api/availability/{slot_id}', json={'is_open': False}, headers=owner['headers'])
        open_slots = client.get('/api/availability/open').get_json()

        assert response.get_json() == {'updated': 1}
        assert open_slots == []


class TestDelete:

    def test_delete_unbooked_slot(self, client, owner, make_slot):
        slot_id = make_slot()

        response = client.delete(f'/api/availability/{slot_id}', headers=owner['headers'])

        assert response.status_code == 200
        assert response.get_json() == {'deleted': 1}

    def test_delete_booked_slot_fails(self, client, owner, make_slot):
        slot_id = make_slot()
        assert client.post('/api/bookings', json=booking_payload(slot_id)).status_code == 201

        response = client.delete(f'/api/availability/{slot_id}', headers=owner['headers'])

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cannot delete a slot that is already booked.'

    def test_delete_missing_slot(self, client, owner):
        response = client.delete('/api/availability/999', headers=owner['headers'])

        assert response.status_code == 404


class TestOwnerListings:

    def test_all_and_range_include_booked_flag(self, client, owner, make_slot):
        booked = make_slot(day='2026-03-02', start='16:00', end='17:00')
        make_slot(day='2026-03-02', start='17:00', end='18:00')
        make_slot(day='2026-03-09', start='16:00', end='17:00')
        client.post('/api/bookings', json=booking_payload(booked))

        all_rows = client.get('/api/availability/all', headers=owner['headers']).get_json()
        range_rows = client.get(
            '/api/availability/range?from=2026-03-01&to=2026-03-05', headers=owner['headers']
        ).get_json()

        assert [r['is_booked'] for r in all_rows] == [True, False, False]
        assert len(range_rows) == 2
        assert range_rows[0]['id'] == booked
        assert range_rows[0]['is_open'] is False

    def test_range_requires_dates(self, client, owner):
        response = client.get('/api/availability/range?from=2026-03-01', headers=owner['headers'])

        assert response.status_code == 400


class TestGenerateAndBulk:

    def test_generate_is_idempotent(self, client, owner):
        body = {
            'from': '2026-03-02', 'to': '2026-03-06', 'weekdays': [1, 2, 3, 4, 5],
            'start_time': '16:00', 'end_time': '22:00', 'interval_minutes': 60, 'is_open': True,
        }

        first = client.post('/api/availability/generate', json=body, headers=owner['headers'])
        second = client.post('/api/availability/generate', json=body, headers=owner['headers'])

        assert first.get_json() == {'inserted': 30, 'generated': 30}
        assert second.get_json() == {'inserted': 0, 'generated': 30}

    def test_generate_rejects_short_interval(self, client, owner):
        body = {
            'from': '2026-03-02', 'to': '2026-03-06', 'weekdays': [1],
            'start_time': '16:00', 'end_time': '22:00', 'interval_minutes': 5,
        }

        response = client.post('/api/availability/generate', json=body, headers=owner['headers'])

        assert response.status_code == 400

    def test_generate_at_end_of_calendar(self, client, owner):
        body = {
            'from': '9999-12-30', 'to': '9999-12-31', 'weekdays': [0, 1, 2, 3, 4, 5, 6],
            'start_time': '16:00', 'end_time': '22:00', 'interval_minutes': 60,
        }

        response = client.post('/api/availability/generate', json=body, headers=owner['headers'])

        assert response.status_code == 200
        assert response.get_json() == {'inserted': 12, 'generated': 12}

    def test_generate_rejects_oversized_interval(self, client, owner):
        body = {
            'from': '2026-03-02', 'to': '2026-03-06', 'weekdays': [1],
            'start_time': '16:00', 'end_time': '22:00', 'interval_minutes': 10 ** 10,
        }

        response = client.post('/api/availability/generate', json=body, headers=owner['headers'])

        assert response.status_code == 400

    def test_non_object_body_is_rejected(self, client, owner):
        response = client.post('/api/availability/generate', json=[1], headers=owner['headers'])

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Request body must be a JSON object.'

    def test_bulk_insert_skips_existing(self, client, owner, make_slot):
        make_slot(day='2026-03-02', start='16:00', end='17:00')
        slots = [
            _slot_body(start='16:00', end='17:00'),
            _slot_body(start='17:00', end='18:00'),
        ]

        response = client.post('/api/availability/bulk', json={'slots': slots}, headers=owner['headers'])

        assert response.get_json() == {'message': 'Availability updated', 'inserted': 1, 'requested': 2}

    def test_bulk_is_all_or_nothing_on_validation(self, client, owner):
        slots = [_slot_body(start='16:00', end='17:00'), _slot_body(start='18:00', end='17:00')]

        response = client.post('/api/availability/bulk', json={'slots': slots}, headers=owner['headers'])
        open_slots = client.get('/api/availability/open').get_json()

        assert response.status_code == 400
        assert response.get_json()['slot']['start_time'] == '18:00'
        assert open_slots == []

    def test_bulk_requires_array(self, client, owner):
        response = client.post('/api/availability/bulk', json={'slots': 'nope'}, headers=owner['headers'])

        assert response.get_json()['message'] == 'Slots array required'
