from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from atlas.engine import (
    CATEGORY_DESCRIPTIONS,
    DEFAULT_CATEGORY_DESCRIPTION,
    build_app,
    build_categories,
)
from modules.uuid7_date_parser.core import generate as generate_module
from modules.uuid7_date_parser.tool.app import app

SAMPLE = "01890c1c-35f1-7000-9c9f-4237c55a8d19"
SAMPLE_MS = 0x01890C1C35F1


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def hub():
    return TestClient(build_app())


def test_index_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "UUIDv7 Date Parser" in response.text
    assert "Quick References" in response.text


def test_parse_valid(client):
    response = client.post("/parse", data={"uuid": SAMPLE})
    assert response.status_code == 200
    data = response.json()
    assert data["timestamp_ms"] == SAMPLE_MS
    assert data["iso"] == "2023-06-30T11:42:02.737Z"
    assert data["is_uuid7"] is True


def test_parse_invalid_format(client):
    response = client.post("/parse", data={"uuid": "zz"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid UUID format", "code": "invalid_format"}


def test_parse_too_short(client):
    response = client.post("/parse", data={"uuid": "01890c1c"})
    assert response.status_code == 400
    assert response.json()["error"] == "UUID needs to be at least 12 characters"


def test_parse_unknown_timezone(client):
    response = client.post("/parse", data={"uuid": SAMPLE, "tz": "Not/AZone"})
    assert response.status_code == 400
    assert response.json() == {"error": "Unknown time zone."}


def test_references(client):
    response = client.get("/references")
    assert response.status_code == 200
    data = response.json()
    assert data["refresh_seconds"] == 60
    labels = [entry["label"] for entry in data["references"]]
    assert len(labels) == 17
    assert labels[6] == "Now"
    assert [entry["label"] for entry in data["references"] if entry["highlight"]] == ["Now"]


def test_references_unknown_timezone(client):
    assert client.get("/references", params={"tz": "Not/AZone"}).status_code == 400


def test_transitions_by_width(client):
    data = client.get("/transitions", params={"digits": 3}).json()
    assert data["start"] == "0160"
    assert data["end"] == "01c0"
    assert data["transitions"][0]["old_prefix"] is None
    assert data["transitions"][0]["full_prefix"] == "016000000000"
    assert len(data["transitions"]) == 7


def test_transitions_both_widths(client):
    data = client.get("/transitions").json()
    assert sorted(data["transitions"]) == ["3", "4"]
    assert len(data["transitions"]["4"]) == 97


def test_transitions_follow_configuration(client, monkeypatch):
    monkeypatch.setenv("ATLAS_SCAN_START", "0180")
    monkeypatch.setenv("ATLAS_SCAN_END", "018f")
    data = client.get("/transitions", params={"digits": 4}).json()
    assert len(data["transitions"]) == 16


def test_transitions_rejects_other_widths(client):
    response = client.get("/transitions", params={"digits": 5})
    assert response.status_code == 400


def test_calendar(client):
    data = client.get("/calendar").json()
    assert data["start_year"] == 2020
    assert len(data["years"]) == 11
    assert all(len(year["months"]) == 12 for year in data["years"])
    length = data["prefix_length"]
    assert 1 <= length <= 12
    prefixes = [month["prefix"][:length] for year in data["years"] for month in year["months"]]
    assert len(set(prefixes)) == 132


def test_generate(client):
    response = client.post("/generate", data={"count": "3", "timestamp": str(SAMPLE_MS)})
    assert response.status_code == 200
    values = response.json()["values"]
    assert len(values) == 3
    assert all(value.startswith("01890c1c-35f1-7") for value in values)


def test_generate_braced(client):
    response = client.post(
        "/generate", data={"timestamp": str(SAMPLE_MS), "style": "braced"}
    )
    assert response.json()["values"][0].startswith("{01890C1C-35F1-7")


def test_generate_bad_count(client):
    response = client.post("/generate", data={"count": "0"})
    assert response.status_code == 400
    assert response.json() == {"error": "Count must be greater than zero."}


def test_generate_without_randomness(client, monkeypatch):
    def broken(size):
        raise NotImplementedError("no entropy")

    monkeypatch.setattr(generate_module.os, "urandom", broken)
    response = client.post("/generate", data={"count": "1"})
    assert response.status_code == 503
    assert response.json()["code"] == "randomness_unavailable"


def test_no_static_mounts():
    assert "/brand" not in {getattr(route, "path", "") for route in app.routes}
    hub_paths = {getattr(route, "path", "") for route in build_app().routes}
    assert "/brand" not in hub_paths
    assert "/uuid7-date-parser" in hub_paths


def test_category_descriptions():
    categories = build_categories(
        {
            "a": {"name": "a", "category": "Identifiers"},
            "b": {"name": "b", "category": "Widgets"},
            "c": {"name": "c"},
        }
    )
    descriptions = {category["name"]: category["description"] for category in categories}
    assert descriptions["Identifiers"] == CATEGORY_DESCRIPTIONS["Identifiers"]
    assert descriptions["Widgets"] == DEFAULT_CATEGORY_DESCRIPTION
    assert descriptions["Other"] == CATEGORY_DESCRIPTIONS["Other"]
    assert sorted(CATEGORY_DESCRIPTIONS) == ["Identifiers", "Other"]


def test_hub_index_lists_module(hub):
    response = hub.get("/")
    assert response.status_code == 200
    assert "UUIDv7 Date Parser" in response.text
    assert "/uuid7-date-parser/" in response.text


def test_hub_category(hub):
    assert hub.get("/category/identifiers").status_code == 200
    assert hub.get("/category/missing").status_code == 404


def test_hub_mounts_module(hub):
    response = hub.post("/uuid7-date-parser/parse", data={"uuid": SAMPLE})
    assert response.status_code == 200
    assert response.json()["timestamp_ms"] == SAMPLE_MS


def test_hub_normalizes_validation_errors(hub):
    response = hub.get("/uuid7-date-parser/transitions", params={"digits": "abc"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid input."}
