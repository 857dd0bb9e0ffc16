"""Tests for the /tasks endpoints and owner scoping."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from exceptions import StorageError


@pytest.fixture
def alice(auth_headers) -> dict[str, str]:
    return auth_headers("alice")


@pytest.fixture
def bob(auth_headers) -> dict[str, str]:
    return auth_headers("bob")


def _create(client: TestClient, headers: dict, title: str = "Buy milk", description: str = "") -> dict:
    response = client.post("/tasks", json={"title": title, "description": description}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# CRUD
# =============================================================================


class TestTaskCrud:
    """Tests for create/list/get/update/delete of the caller's own tasks."""

    def test_create(self, client: TestClient, app, alice: dict) -> None:
        task = _create(client, alice, "Buy milk", "Semi-skimmed")

        user_id = app.state.token_authority.verify(alice["Authorization"].split()[1])
        assert task["id"]
        assert task == {
            "id": task["id"],
            "ownerId": user_id,
            "title": "Buy milk",
            "description": "Semi-skimmed",
            "isComplete": False,
        }

    def test_description_optional(self, client: TestClient, alice: dict) -> None:
        response = client.post("/tasks", json={"title": "Buy milk"}, headers=alice)

        assert response.status_code == 201
        assert response.json()["description"] == ""

    def test_create_then_list_round_trip(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice, "Buy milk", "Semi-skimmed")

        response = client.get("/tasks", headers=alice)

        assert response.status_code == 200
        assert response.json() == [task]

    def test_list_in_creation_order(self, client: TestClient, alice: dict) -> None:
        for title in ["first", "second", "third"]:
            _create(client, alice, title)

        titles = [t["title"] for t in client.get("/tasks", headers=alice).json()]
        assert titles == ["first", "second", "third"]

    def test_get(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice)

        response = client.get(f"/tasks/{task['id']}", headers=alice)

        assert response.status_code == 200
        assert response.json() == task

    def test_update_all_fields(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice)

        response = client.put(
            f"/tasks/{task['id']}",
            json={"title": "Buy oat milk", "description": "1 litre", "isComplete": True},
            headers=alice,
        )

        assert response.status_code == 200
        assert response.json() == {**task, "title": "Buy oat milk", "description": "1 litre", "isComplete": True}

    def test_partial_update_keeps_other_fields(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice, "Buy milk", "Semi-skimmed")

        response = client.put(f"/tasks/{task['id']}", json={"isComplete": True}, headers=alice)

        assert response.json() == {**task, "isComplete": True}

    def test_toggle_twice_restores_original(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice)
        url = f"/tasks/{task['id']}"

        client.put(url, json={"isComplete": True}, headers=alice)
        response = client.put(url, json={"isComplete": False}, headers=alice)

        assert response.json() == task

    def test_delete(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice)

        response = client.delete(f"/tasks/{task['id']}", headers=alice)

        assert response.status_code == 204
        assert client.get("/tasks", headers=alice).json() == []
        assert client.delete(f"/tasks/{task['id']}", headers=alice).status_code == 404

    def test_missing_task(self, client: TestClient, alice: dict) -> None:
        assert client.get("/tasks/missing", headers=alice).status_code == 404
        assert client.put("/tasks/missing", json={"isComplete": True}, headers=alice).status_code == 404
        assert client.delete("/tasks/missing", headers=alice).status_code == 404

        body = client.get("/tasks/missing", headers=alice).json()
        assert body["error_type"] == "TaskNotFoundError"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"title": ""}, {"title": "x" * 201}, {"title": "ok", "description": 5}],
    )
    def test_invalid_create_payload(self, client: TestClient, alice: dict, payload: dict) -> None:
        assert client.post("/tasks", json=payload, headers=alice).status_code == 422

    def test_invalid_update_payload(self, client: TestClient, alice: dict) -> None:
        task = _create(client, alice)
        response = client.put(f"/tasks/{task['id']}", json={"isComplete": "maybe"}, headers=alice)
        assert response.status_code == 422


# =============================================================================
# Ownership
# =============================================================================


class TestOwnership:
    """Tests that users only ever see and change their own tasks."""

    def test_lists_are_isolated(self, client: TestClient, alice: dict, bob: dict) -> None:
        alice_task = _create(client, alice, "Alice's task")
        bob_task = _create(client, bob, "Bob's task")

        assert client.get("/tasks", headers=alice).json() == [alice_task]
        assert client.get("/tasks", headers=bob).json() == [bob_task]

    def test_cannot_touch_other_users_task(self, client: TestClient, alice: dict, bob: dict) -> None:
        bob_task = _create(client, bob, "Bob's task")
        url = f"/tasks/{bob_task['id']}"

        assert client.get(url, headers=alice).status_code == 404
        assert client.put(url, json={"isComplete": True}, headers=alice).status_code == 404
        assert client.delete(url, headers=alice).status_code == 404

        # Bob's task is unchanged
        assert client.get("/tasks", headers=bob).json() == [bob_task]

    def test_not_owned_indistinguishable_from_missing(
        self, client: TestClient, alice: dict, bob: dict
    ) -> None:
        bob_task = _create(client, bob)

        not_owned = client.get(f"/tasks/{bob_task['id']}", headers=alice)
        missing = client.get("/tasks/does-not-exist", headers=alice)

        assert not_owned.status_code == missing.status_code == 404
        assert not_owned.json()["error_type"] == missing.json()["error_type"]
        assert not_owned.json()["details"] == {"task_id": bob_task["id"]}

    def test_client_supplied_owner_ignored_on_create(
        self, client: TestClient, app, alice: dict, bob: dict
    ) -> None:
        bob_id = app.state.token_authority.verify(bob["Authorization"].split()[1])

        response = client.post(
            "/tasks",
            json={"title": "Sneaky", "ownerId": bob_id, "owner_id": bob_id},
            headers=alice,
        )

        assert response.status_code == 201
        assert response.json()["ownerId"] != bob_id
        assert client.get("/tasks", headers=bob).json() == []

    def test_client_supplied_owner_ignored_on_update(
        self, client: TestClient, app, alice: dict, bob: dict
    ) -> None:
        bob_id = app.state.token_authority.verify(bob["Authorization"].split()[1])
        task = _create(client, alice)

        response = client.put(f"/tasks/{task['id']}", json={"ownerId": bob_id}, headers=alice)

        assert response.status_code == 200
        assert response.json()["ownerId"] == task["ownerId"]
        assert client.get("/tasks", headers=bob).json() == []


# =============================================================================
# Error Responses
# =============================================================================


class TestErrorResponses:
    """Tests for storage and unexpected failures."""

    def test_storage_failure_is_503_without_details(self, client: TestClient, app, alice: dict) -> None:
        failing = MagicMock()
        failing.list_by_owner = AsyncMock(side_effect=StorageError("task listing"))
        app.state.task_store = failing

        response = client.get("/tasks", headers=alice)

        assert response.status_code == 503
        assert response.json() == {
            "error_type": "StorageError",
            "message": "Storage failure during task listing",
            "details": {},
        }

    def test_unexpected_error_is_generic_500(self, client: TestClient, app, alice: dict) -> None:
        failing = MagicMock()
        failing.list_by_owner = AsyncMock(side_effect=RuntimeError("secret internals"))
        app.state.task_store = failing

        response = client.get("/tasks", headers=alice)

        assert response.status_code == 500
        assert response.json()["error_type"] == "InternalServerError"
        assert "secret internals" not in response.text
