"""
Tests for the timeline HTTP API.

Each test gets its own app over a throwaway data root.
"""

import pytest
from fastapi.testclient import TestClient

from daybook.api import create_app

TOKEN = "test-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


def _block(start, end, block_type_id=0, title=""):
    return {
        "start_time": f"2025-03-14T{start}+02:00",
        "end_time": f"2025-03-14T{end}+02:00",
        "block_type_id": block_type_id,
        "title": title,
    }


def _append(client, body):
    return client.post("/timeblock/append", json=body, headers=AUTH)


def _set_current(client, name):
    body = {"block_type_id": 0, "current_block_name": name}
    return client.post("/currentblock/change", json=body, headers=AUTH)


@pytest.fixture
def client(data_root):
    return TestClient(create_app(data_root=data_root, api_token=TOKEN))


class TestAuth:
    def test_missing_token_rejected(self, client):
        response = client.get("/blocktype/get")
        assert response.status_code == 401

    def test_wrong_token_rejected(self, client):
        response = client.get("/blocktype/get", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_x_api_token_header_accepted(self, client):
        response = client.get("/blocktype/get", headers={"X-API-Token": TOKEN})
        assert response.status_code == 200

    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_no_token_configured_allows_all(self, data_root, monkeypatch):
        monkeypatch.setattr("daybook.config.API_TOKEN", None)
        client = TestClient(create_app(data_root=data_root))
        assert client.get("/blocktype/get").status_code == 200


class TestBlocks:
    def test_append_and_read(self, client):
        response = _append(client, _block("08:00:00", "09:00:00", 0, "Work"))
        assert response.status_code == 200
        assert response.json()["success"] is True

        day = client.get("/timeblock/get", params={"date": "2025-03-14"}, headers=AUTH).json()
        assert [b["title"] for b in day] == ["Work"]
        assert day[0]["end_time"] == "2025-03-14T09:00:00+02:00"

    def test_overlap_is_conflict(self, client):
        _append(client, _block("08:00:00", "09:00:00"))
        response = _append(client, _block("08:30:00", "09:15:00"))
        assert response.status_code == 409
        assert response.json()["error"] == "overlap_conflict"

    def test_inverted_block_is_unprocessable(self, client):
        response = _append(client, _block("10:00:00", "09:00:00"))
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_block"

    def test_naive_timestamp_rejected(self, client):
        body = {"start_time": "2025-03-14T08:00:00", "end_time": "2025-03-14T09:00:00"}
        response = _append(client, body)
        assert response.status_code == 422

    def test_day_end_second_is_unprocessable(self, client):
        body = {
            "start_time": "2025-03-14T23:59:59+02:00",
            "end_time": "2025-03-15T00:00:00+02:00",
            "block_type_id": 1,
            "title": "Late",
        }
        response = _append(client, body)
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_block"

    def test_day_crossing_returns_both_pieces(self, client):
        body = {
            "start_time": "2025-03-14T22:00:00+02:00",
            "end_time": "2025-03-15T02:00:00+02:00",
            "block_type_id": 0,
            "title": "Sleep",
        }
        pieces = _append(client, body).json()["blocks"]
        assert [p["end_time"] for p in pieces] == [
            "2025-03-14T23:59:59+02:00",
            "2025-03-15T02:00:00+02:00",
        ]

    def test_split(self, client):
        _append(client, _block("08:00:00", "12:00:00", 0, "Work"))
        response = client.post(
            "/timeblock/split",
            json={
                "start_time": "2025-03-14T08:00:00+02:00",
                "end_time": "2025-03-14T12:00:00+02:00",
                "split_time": "2025-03-14T10:00:00+02:00",
                "before": {"block_type_id": 0, "title": "Deep work"},
                "after": {"block_type_id": 0, "title": "Email"},
            },
            headers=AUTH,
        )
        assert response.status_code == 200
        assert [b["title"] for b in response.json()["blocks"]] == ["Deep work", "Email"]

    def test_split_unknown_block_is_not_found(self, client):
        response = client.post(
            "/timeblock/split",
            json={
                "start_time": "2025-03-14T08:00:00+02:00",
                "end_time": "2025-03-14T12:00:00+02:00",
                "split_time": "2025-03-14T10:00:00+02:00",
                "before": {},
                "after": {},
            },
            headers=AUTH,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_adjust(self, client):
        _append(client, _block("08:00:00", "09:00:00"))
        _append(client, _block("09:00:00", "10:00:00"))
        response = client.post(
            "/timeblock/adjust",
            json={
                "start_time": "2025-03-14T09:00:00+02:00",
                "end_time": "2025-03-14T10:00:00+02:00",
                "new_start_time": "2025-03-14T08:30:00+02:00",
                "new_end_time": "2025-03-14T10:00:00+02:00",
                "block_type_id": 0,
                "title": "Moved",
            },
            headers=AUTH,
        )
        assert response.status_code == 200

        day = client.get("/timeblock/get", params={"date": "2025-03-14"}, headers=AUTH).json()
        assert day[0]["end_time"] == "2025-03-14T08:30:00+02:00"
        assert day[1]["title"] == "Moved"

    def test_next_switches_current(self, client):
        body = {"block_type_id": 0, "current_block_name": "Reading"}
        response = client.post("/timeblock/next", json=body, headers=AUTH)
        assert response.status_code == 200
        current = client.get("/currentblock/get", headers=AUTH).json()
        assert current["current_block_name"] == "Reading"


class TestCategoriesAndState:
    def test_new_blocktype(self, client):
        body = {"name": "Work", "color": {"r": 0, "g": 120, "b": 255}}
        created = client.post("/blocktype/new", json=body, headers=AUTH)
        assert created.status_code == 200
        assert created.json()["id"] == 1

        duplicate = client.post("/blocktype/new", json=body, headers=AUTH)
        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "duplicate_category"

    def test_state(self, client):
        _append(client, _block("08:00:00", "09:00:00"))
        _set_current(client, "Lunch")

        state = client.get("/state", params={"date": "2025-03-14"}, headers=AUTH).json()

        assert state["date"] == "2025-03-14"
        assert state["blocktypes"][0]["name"] == "Uncategorized"
        assert len(state["daydata"]) == 1
        assert state["currentblock"]["current_block_name"] == "Lunch"

    def test_analysis(self, client):
        _append(client, _block("08:00:00", "10:00:00"))
        response = client.get(
            "/analysis", params={"start": "2025-03-14", "end": "2025-03-14"}, headers=AUTH
        )
        assert response.status_code == 200
        assert response.json()["percentages"] == {"0": 1.0}

    def test_analysis_inverted_range(self, client):
        response = client.get(
            "/analysis", params={"start": "2025-03-15", "end": "2025-03-14"}, headers=AUTH
        )
        assert response.status_code == 422


class TestSync:
    def test_sync_fills_gap_with_server_current(self, client):
        _append(client, _block("09:00:00", "10:00:00", 0, "Work"))
        _set_current(client, "Server")

        response = client.post(
            "/sync",
            json={
                "timeblocks": {"2025-03-14": [_block("11:00:00", "12:00:00", 0, "Offline")]},
                "blocktypes": [{"id": 4, "name": "Music", "color": {"r": 1, "g": 2, "b": 3}}],
                "currentblock": {"block_type_id": 0, "current_block_name": "Client"},
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        result = response.json()
        assert result["appended"] == 1
        assert result["blocktypes_added"] == 1
        assert result["dates"][0]["filler"]["title"] == "Server"

        day = client.get("/timeblock/get", params={"date": "2025-03-14"}, headers=AUTH).json()
        assert [b["title"] for b in day] == ["Work", "Server", "Offline"]
        current = client.get("/currentblock/get", headers=AUTH).json()
        assert current["current_block_name"] == "Client"


def test_request_id_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-fixed"})
    assert response.headers["x-request-id"] == "req-fixed"
