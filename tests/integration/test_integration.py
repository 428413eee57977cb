"""
Integration test suite for a running Shipnix-Express deployment.

Point SHIPNIX_BASE_URL at the tracking service (and set SHIPNIX_ADMIN_EMAIL /
SHIPNIX_ADMIN_PASSWORD to the account created by the seed script) to run:

    SHIPNIX_BASE_URL=http://localhost:8000 pytest tests/integration
"""

import os
import time
import uuid
import pytest
import httpx

BASE_URL = os.getenv("SHIPNIX_BASE_URL")
ADMIN_EMAIL = os.getenv("SHIPNIX_ADMIN_EMAIL", "admin@shipnix-express.com")
ADMIN_PASSWORD = os.getenv("SHIPNIX_ADMIN_PASSWORD")
HEALTH_CHECK_RETRIES = 30
HEALTH_CHECK_DELAY = 2

pytestmark = pytest.mark.skipif(
    not BASE_URL or not ADMIN_PASSWORD,
    reason="SHIPNIX_BASE_URL and SHIPNIX_ADMIN_PASSWORD are required for integration tests",
)

class TestShipnixIntegration:
    """End-to-end checks against a live tracking service"""

    @classmethod
    def setup_class(cls):
        cls.client = httpx.Client(base_url=BASE_URL, timeout=30.0)
        cls.wait_for_service()
        cls.headers = cls.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    @classmethod
    def teardown_class(cls):
        cls.client.close()

    @classmethod
    def wait_for_service(cls):
        print("Waiting for tracking service to be ready...")
        for attempt in range(HEALTH_CHECK_RETRIES):
            try:
                if cls.client.get("/health").status_code == 200:
                    return
            except httpx.HTTPError as e:
                print(f"Attempt {attempt + 1}/{HEALTH_CHECK_RETRIES}: {e}")
            time.sleep(HEALTH_CHECK_DELAY)
        raise RuntimeError("Tracking service failed to start within timeout period")

    @classmethod
    def login(cls, email, password):
        response = cls.client.post("/auth/token", json={"username": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def test_health_endpoints(self):
        for endpoint in ["/health", "/health/live", "/health/ready"]:
            response = self.client.get(endpoint)
            assert response.status_code in [200, 503]
            assert "status" in response.json()

    def test_metrics_endpoint(self):
        response = self.client.get("/metrics")
        assert response.status_code == 200
        assert "uptime_seconds" in response.json()

    def test_package_lifecycle(self):
        payload = {
            "sender_name": "Integration Sender",
            "sender_address": "1 Test Way",
            "recipient_name": "Integration Recipient",
            "recipient_address": "2 Test Way",
            "weight": 1.0,
            "shipping_cost": 12.0,
            "payment_method": "card",
        }
        response = self.client.post("/api/packages", json=payload, headers=self.headers)
        assert response.status_code == 201
        package = response.json()

        for status in ["picked_up", "in_transit", "delivered"]:
            response = self.client.patch(
                f"/api/packages/{package['id']}/status",
                json={"status": status, "location": "Integration Hub"},
                headers=self.headers,
            )
            assert response.status_code == 200

        public = self.client.get(f"/api/public/track/{package['tracking_id']}").json()
        assert public["current_status"] == "delivered"
        assert [e["status"] for e in public["events"]] == ["created", "picked_up", "in_transit", "delivered"]
        assert public["actual_delivery"] is not None

    def test_customer_registration_and_permissions(self):
        email = f"it-{uuid.uuid4().hex[:8]}@example.com"
        response = self.client.post("/auth/register", json={"email": email, "password": "integration-pass"})
        assert response.status_code == 201

        headers = self.login(email, "integration-pass")
        assert self.client.get("/api/auth/user", headers=headers).json()["email"] == email
        assert self.client.get("/api/admin/analytics", headers=headers).status_code == 403

    def test_error_handling(self):
        assert self.client.get("/api/packages").status_code == 401
        assert self.client.get("/api/public/track/ST-DOESNOTEXIST").status_code == 404
        assert self.client.get("/api/public/track/BAD-123").status_code == 400

    def test_request_tracking(self):
        response = self.client.get("/health", headers={"X-Request-ID": "integration-req"})
        assert response.headers.get("X-Request-ID") == "integration-req"
