def test_analytics_counts(client, admin_headers, created_package, package_payload):
    second = client.post(
        "/api/packages", json=dict(package_payload, payment_status="pending", shipping_cost=10), headers=admin_headers
    ).json()
    client.patch(f"/api/packages/{second['id']}/status", json={"status": "delivered"}, headers=admin_headers)

    stats = client.get("/api/admin/analytics", headers=admin_headers).json()
    assert stats["total_packages"] == 2
    assert stats["packages_by_status"]["created"] == 1
    assert stats["packages_by_status"]["delivered"] == 1
    assert stats["packages_by_status"]["returned"] == 0
    assert stats["delivered_packages"] == 1
    assert stats["revenue"] == 89.99
    assert stats["total_users"] == 1

def test_admin_endpoints_reject_customers(client, customer_headers):
    assert client.get("/api/admin/analytics", headers=customer_headers).status_code == 403
    assert client.get("/api/admin/users", headers=customer_headers).status_code == 403

def test_admin_lists_users(client, admin_headers, customer_user):
    emails = {u["email"] for u in client.get("/api/admin/users", headers=admin_headers).json()}
    assert emails == {"admin@shipnix.example.com", customer_user.email}

def test_health_endpoints(client):
    health = client.get("/health").json()
    assert health["status"] == "pass"
    assert health["service"] == "shipnix-tracking"
    assert client.get("/health/live").json() == {"status": "alive"}

    ready = client.get("/health/ready").json()
    assert ready["checks"]["database:connectivity"]["status"] == "pass"

def test_metrics_and_info(client):
    metrics = client.get("/metrics").json()
    assert metrics["service"] == "shipnix-tracking"
    assert metrics["system"]["memory_rss_bytes"] > 0

    info = client.get("/info").json()
    assert info["endpoints"]["websocket"] == "/ws"

def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert resp.headers["X-Request-ID"] == "req-42"
    assert client.get("/health").headers["X-Request-ID"]

def test_security_headers(client):
    resp = client.get("/")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"

def test_openapi_declares_bearer_auth(client):
    schema = client.get("/api/openapi.json").json()
    assert schema["components"]["securitySchemes"]["BearerAuth"]["scheme"] == "bearer"
