# tests/http_api/test_measurements_api.py

import pytest


@pytest.fixture
def ids(client):
    """Ids of France, a Demo metric and the year 2023, created over HTTP."""
    entity = client.post("/entities", json={"entity_type": "country", "name": "France", "iso3": "FRA"})
    metric = client.post("/metrics", json={"framework": "Demo", "code": "X.1", "name": "Test Metric"})
    period = client.post("/periods", json={"kind": "year", "year_value": 2023})
    return {
        "entity_id": entity.json()["id"],
        "metric_id": metric.json()["id"],
        "period_id": period.json()["id"],
    }


def test_record_measurement_then_duplicate_is_409(client, ids) -> None:
    created = client.post("/measurements", json={**ids, "value": 0.5, "confidence": 0.8})
    assert created.status_code == 201
    fact = created.json()
    assert fact["value"] == 0.5

    duplicate = client.post("/measurements", json={**ids, "value": 0.9, "confidence": 0.8})
    assert duplicate.status_code == 409
    error = duplicate.json()["error"]
    assert error["code"] == "duplicate_fact"
    assert error["details"] == ids

    assert client.get(f"/measurements/{fact['id']}").json()["value"] == 0.5


def test_confidence_out_of_range_is_422(client, ids) -> None:
    response = client.post("/measurements", json={**ids, "value": 0.5, "confidence": 1.5})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "range_error"
    assert client.get("/measurements").json() == []


def test_missing_reference_is_409(client, ids) -> None:
    response = client.post("/measurements", json={**ids, "metric_id": 999, "value": 1.0})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "referential_integrity"


def test_invalid_period_is_422(client) -> None:
    response = client.post("/periods", json={"kind": "date", "year_value": 2024})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "invalid_period"


def test_period_round_trip(client) -> None:
    created = client.post("/periods", json={"kind": "date", "date_value": "2024-12-31"}).json()
    assert created["display_value"] == "2024-12-31"
    assert created["value"] == {"kind": "date", "value": "2024-12-31"}

    again = client.post("/periods", json={"kind": "date", "date_value": "2024-12-31"}).json()
    assert again["id"] == created["id"]
    assert client.get(f"/periods/{created['id']}").json() == created


def test_query_with_ordering(client, ids) -> None:
    other_year = client.post("/periods", json={"kind": "year", "year_value": 2024}).json()
    client.post("/measurements", json={**ids, "value": 1.0})
    client.post("/measurements", json={**ids, "period_id": other_year["id"], "value": 2.0})

    response = client.get("/measurements", params={"metric_id": ids["metric_id"], "order_by": "-value"})
    assert [m["value"] for m in response.json()] == [2.0, 1.0]

    bad = client.get("/measurements", params={"order_by": "note"})
    assert bad.status_code == 422


def test_latest_and_flat(client, ids) -> None:
    years = {
        year: client.post("/periods", json={"kind": "year", "year_value": year}).json()["id"]
        for year in (2022, 2024, 2020)
    }
    for year, period_id in years.items():
        client.post("/measurements", json={**ids, "period_id": period_id, "value": float(year)})

    latest = client.get("/measurements/latest").json()
    assert len(latest) == 1
    assert latest[0]["year"] == 2024
    assert latest[0]["value"] == 2024.0

    flat = client.get("/measurements/flat", params={"framework": "Demo"}).json()
    assert [row["period_value"] for row in flat] == ["2022", "2024", "2020"]
    assert flat[0]["entity_name"] == "France"
    assert flat[0]["metric_code"] == "X.1"


def test_delete_rules(client, ids) -> None:
    fact = client.post("/measurements", json={**ids, "value": 1.0}).json()

    assert client.delete(f"/metrics/{ids['metric_id']}").status_code == 409
    assert client.delete(f"/periods/{ids['period_id']}").status_code == 409

    assert client.delete(f"/entities/{ids['entity_id']}").status_code == 204
    assert client.get(f"/measurements/{fact['id']}").status_code == 404

    assert client.delete(f"/periods/{ids['period_id']}").status_code == 204
    assert client.delete(f"/measurements/{fact['id']}").status_code == 404
