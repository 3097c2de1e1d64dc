# tests/http_api/test_registry_api.py

from fastapi.routing import APIRoute

from catalyst_core.main import app


def _get_api_routes() -> list[APIRoute]:
    return [r for r in app.routes if isinstance(r, APIRoute)]


def test_routers_are_tagged_by_resource() -> None:
    """Every resource route carries the tag named after its first path segment."""
    for route in _get_api_routes():
        segment = route.path.strip("/").split("/")[0]
        if segment == "health":
            continue
        assert segment in route.tags, f"Route {route.path} is missing the {segment!r} tag."


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_entity_get_or_create_is_idempotent(client) -> None:
    payload = {"entity_type": "country", "name": "France", "iso2": "FR", "iso3": "FRA"}

    first = client.post("/entities", json=payload)
    second = client.post("/entities", json={"entity_type": "country", "name": "France"})

    assert first.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert [e["name"] for e in client.get("/entities").json()] == ["France"]
    assert client.get("/entities", params={"iso": "FRA"}).json()[0]["iso2"] == "FR"


def test_entity_constraint_violation_envelope(client) -> None:
    response = client.post("/entities", json={"entity_type": "planet", "name": "Mars"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "constraint_violation"
    assert error["details"]["field"] == "entity_type"


def test_missing_entity_is_404(client) -> None:
    response = client.get("/entities/123")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_metric_with_framework_name(client) -> None:
    metric = client.post(
        "/metrics",
        json={"framework": "Demo", "code": "X.1", "name": "Test Metric", "direction": 1},
    )
    assert metric.status_code == 200

    frameworks = client.get("/frameworks").json()
    assert [f["name"] for f in frameworks] == ["Demo"]
    assert metric.json()["framework_id"] == frameworks[0]["id"]

    listed = client.get("/metrics", params={"framework": "Demo"}).json()
    assert [m["code"] for m in listed] == ["X.1"]


def test_delete_framework_with_metrics_is_409(client) -> None:
    metric = client.post("/metrics", json={"framework": "Demo", "name": "Happiness"}).json()

    response = client.delete(f"/frameworks/{metric['framework_id']}")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "referential_integrity"

    assert client.delete(f"/metrics/{metric['id']}").status_code == 204
    assert client.delete(f"/frameworks/{metric['framework_id']}").status_code == 204


def test_tag_entity_and_metric(client) -> None:
    entity = client.post("/entities", json={"entity_type": "organization", "name": "Acme"}).json()
    metric = client.post("/metrics", json={"framework": "ESG", "code": "E1", "name": "Emissions"}).json()
    tag = client.post("/tags", json={"kind": "esg", "name": "climate"}).json()

    tagged = client.post(f"/entities/{entity['id']}/tags/{tag['id']}")
    again = client.post(f"/entities/{entity['id']}/tags/{tag['id']}")
    assert tagged.status_code == 200
    assert again.json() == tagged.json() == [tag]

    assert client.post(f"/metrics/{metric['id']}/tags/{tag['id']}").json() == [tag]
    assert client.delete(f"/metrics/{metric['id']}/tags/{tag['id']}").status_code == 204
    assert client.get(f"/metrics/{metric['id']}/tags").json() == []

    assert client.get("/tags", params={"kind": "esg"}).json() == [tag]


def test_sources(client) -> None:
    created = client.post("/sources", json={"name": "Eurostat", "url": "https://ec.europa.eu/eurostat"})
    assert created.status_code == 200
    assert client.get(f"/sources/{created.json()['id']}").json()["url"] == "https://ec.europa.eu/eurostat"
    assert client.delete(f"/sources/{created.json()['id']}").status_code == 204
    assert client.get("/sources").json() == []


def test_request_validation_still_uses_fastapi_errors(client) -> None:
    response = client.post("/entities", json={"name": "No type"})
    assert response.status_code == 422
    assert "detail" in response.json()
