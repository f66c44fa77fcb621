"""
Tests for the application shell: health, error envelopes, secret handling.
"""

import fakeredis
import pytest

from app import create_app
from app.config import TestingConfig


class TestHealth:

    def test_health_reports_ok(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        body = response.get_json()
        assert body['status'] == 'ok'
        assert body['redis'] == 'ok'
        assert body['uptime'] >= 0


class TestErrorEnvelope:

    def test_unknown_route(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.get_json() == {'message': 'Route not found'}

    def test_wrong_method(self, client):
        response = client.delete('/api/reviews')

        assert response.status_code == 405
        assert 'message' in response.get_json()


class TestSecretKey:

    def test_production_requires_secret(self):
        class ProductionConfig(TestingConfig):
            SECRET_KEY = None
            ENV_NAME = 'production'

        with pytest.raises(RuntimeError, match="SECRET_KEY"):
            create_app(ProductionConfig)

    def test_development_gets_ephemeral_secret(self):
        class DevConfig(TestingConfig):
            SECRET_KEY = None
            ENV_NAME = 'development'

        app = create_app(DevConfig, redis_client=fakeredis.FakeRedis())

        assert len(app.config['SECRET_KEY']) == 96
