"""Integration tests for health endpoints."""

from datetime import datetime, timezone

from zone_meter.models import Snapshot, ZoneStatus


class TestHealthEndpoints:
    """Test suite for health check endpoints."""

    def test_health_check(self, test_client):
        """Test basic health check endpoint."""
        response = test_client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "zone-meter"

    def test_health_live(self, test_client):
        """Test liveness probe endpoint."""
        response = test_client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_health_not_ready_before_first_cycle(self, test_client):
        """Test readiness fails until snapshots have been received."""
        response = test_client.get("/api/v1/health/ready")
        assert response.status_code == 503

    def test_health_ready_after_cycle(self, test_client):
        """Test readiness reports the zone count once snapshots exist."""
        store = test_client.app.state.snapshot_store
        store(
            Snapshot(
                zonename="abc",
                zonepath="/zones/abc",
                uuid="abc",
                status=ZoneStatus.RUNNING,
                timestamp=datetime.now(timezone.utc),
            )
        )

        response = test_client.get("/api/v1/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["zones"] == 1
