"""
Tests for the Redis fixed-window rate limiter.
"""

import fakeredis
import redis

from services.rate_limiter import check_limit


class BrokenRedis:
    def pipeline(self):
        raise redis.exceptions.ConnectionError("redis is down")


class TestCheckLimit:

    def test_counts_within_window(self):
        client = fakeredis.FakeRedis(decode_responses=True)

        results = [check_limit(client, 'rl:test:1.2.3.4', 3, 60) for _ in range(4)]

        assert [allowed for allowed, _ in results] == [True, True, True, False]
        assert 0 < results[-1][1] <= 60
        assert 0 < client.ttl('rl:test:1.2.3.4') <= 60

    def test_fails_open_when_redis_is_down(self):
        assert check_limit(BrokenRedis(), 'rl:test:1.2.3.4', 1, 60) == (True, None)


class TestEnforcement:

    def test_booking_limit_returns_429(self, app, client):
        app.config['RATE_LIMIT_ENABLED'] = True

        statuses = [client.post('/api/bookings', json={}).status_code for _ in range(15)]
        blocked = client.post('/api/bookings', json={})

        assert 429 not in statuses
        assert blocked.status_code == 429
        assert blocked.get_json()['message'] == "Too many booking attempts. Please try again later."
        assert blocked.get_json()['retry_after'] > 0

    def test_limits_are_per_client_ip(self, app, client):
        app.config['RATE_LIMIT_ENABLED'] = True
        for _ in range(10):
            client.post('/api/auth/login', json={}, headers={'X-Forwarded-For': '10.0.0.1'})

        blocked = client.post('/api/auth/login', json={}, headers={'X-Forwarded-For': '10.0.0.1'})
        other = client.post('/api/auth/login', json={}, headers={'X-Forwarded-For': '10.0.0.2'})

        assert blocked.status_code == 429
        assert other.status_code == 400

    def test_disabled_limiter_never_blocks(self, client):
        statuses = {client.post('/api/bookings', json={}).status_code for _ in range(20)}

        assert statuses == {400}
