def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["api"] == "/api/v1"


def test_liveness(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_api_root_lists_modules(client):
    endpoints = client.get("/api/v1/").json()["available_endpoints"]
    assert endpoints["shipments"] == "/api/v1/shipments"
    assert endpoints["analytics"] == "/api/v1/analytics"


def test_readiness_checks_database(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"]["status"] == "connected"
    assert body["database"]["latency_ms"] >= 0
    assert set(body["services"]) == {"stripe", "paystack", "cloudinary"}


def test_module_health_endpoints(client, admin_headers):
    for module in ("shipments", "tracking", "pricing", "payments", "support", "users", "drivers"):
        response = client.get(f"/api/v1/{module}/health")
        assert response.status_code == 200, module
        assert response.json()["status"] == "healthy"

    assert client.get("/api/v1/analytics/health").status_code == 401
    assert client.get("/api/v1/analytics/health", headers=admin_headers).status_code == 200
