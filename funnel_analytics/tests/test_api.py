"""
API Contract Test Module

Exercises GET /agencies/{agency_id}/lqs-analytics through FastAPI's TestClient
with the Record Store and Settings dependencies overridden.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from funnel_analytics.core.dependencies import get_record_store, get_settings_dependency
from funnel_analytics.main import app
from funnel_analytics.models.enums import RecordCollection
from funnel_analytics.tests.conftest import AGENCY_ID, build_store


URL = f"/agencies/{AGENCY_ID}/lqs-analytics"


@pytest.fixture
def store(fb_ads):
    return build_store(commission_rate=20.0, **fb_ads)


@pytest.fixture
def client(store, test_settings):
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestLqsAnalytics:
    """Tests for the analytics endpoint contract."""

    def test_pipeline_by_default(self, client):
        response = client.get(URL)

        assert response.status_code == 200
        body = response.json()
        assert body["agencyId"] == AGENCY_ID
        assert body["summary"]["mode"] == "pipeline"
        assert body["startDate"] is None
        fb = body["byLeadSource"][0]
        assert fb["leadSourceName"] == "FB Ads"
        assert fb["roi"] == pytest.approx(3.6)
        assert fb["costPerSale"] == 16667
        assert body["byBucket"][0]["bucketName"] == "Paid Social"
        assert body["producers"]["byQuotedBy"][0]["teamMemberName"] == "Ann"
        assert body["crossTab"]["dimension"] == "lead_source"
        assert body["truncatedCollections"] == []
        assert isinstance(body["performanceTrend"], list)

    def test_explicit_range_is_activity(self, client):
        response = client.get(URL, params={"start": "2026-03-01", "end": "2026-03-31"})

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["mode"] == "activity"
        assert summary["leadsReceived"] == 10
        assert summary["quoteRate"] is None
        assert summary["closeRate"] is None

    def test_preset_all_is_pipeline(self, client):
        response = client.get(URL, params={"preset": "all"})

        assert response.status_code == 200
        assert response.json()["summary"]["mode"] == "pipeline"

    def test_cross_tab_by_bucket(self, client):
        response = client.get(URL, params={"crossTabBy": "bucket"})

        assert response.status_code == 200
        cross_tab = response.json()["crossTab"]
        assert cross_tab["dimension"] == "bucket"
        assert [c["name"] for c in cross_tab["columns"]] == ["Paid Social"]


class TestRequestValidation:
    """Tests for rejected date parameters."""

    def test_inverted_range(self, client):
        response = client.get(URL, params={"start": "2026-03-31", "end": "2026-03-01"})

        assert response.status_code == 400

    def test_half_open_range(self, client):
        response = client.get(URL, params={"start": "2026-03-01"})

        assert response.status_code == 400

    def test_range_with_preset(self, client):
        response = client.get(URL, params={"start": "2026-03-01", "end": "2026-03-31", "preset": "ytd"})

        assert response.status_code == 400

    def test_unknown_preset(self, client):
        response = client.get(URL, params={"preset": "last7"})

        assert response.status_code == 422


class TestUnavailable:
    """Failures present as 'analytics unavailable', never as a partial report."""

    def test_store_failure_is_503(self, client, store):
        store.failures[RecordCollection.QUOTES] = ConnectionError("connection reset")

        response = client.get(URL)

        assert response.status_code == 503
        assert response.json() == {"detail": "Analytics unavailable, retry"}

    def test_ceiling_failure_is_503(self, client, test_settings):
        strict = test_settings.model_copy(update={'max_fetch_rows': 2, 'fail_on_fetch_ceiling': True})
        app.dependency_overrides[get_settings_dependency] = lambda: strict

        response = client.get(URL)

        assert response.status_code == 503

    def test_pool_unavailable_is_503(self, client):
        del app.dependency_overrides[get_record_store]

        with patch(
            'funnel_analytics.core.dependencies.get_db_pool',
            new=AsyncMock(side_effect=OSError("connection refused")),
        ):
            response = client.get(URL)

        assert response.status_code == 503
        assert response.json()["detail"] == "Analytics unavailable, retry"
