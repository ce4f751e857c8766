"""
Storage Adapter contract, exercised against both the embedded and the external
store through the parametrized ``repo`` fixture.
"""
from __future__ import annotations

import pytest

from katafree.core.errors import NotFound


def _user(repo, email: str) -> dict:
    return repo.create_user(email, "hash", email.split("@")[0])


def test_create_user_returns_string_id_and_defaults(repo):
    user = _user(repo, "alice@example.com")
    assert isinstance(user["id"], str) and user["id"]
    assert user["plan"] == "free"
    assert user["passwordHash"] == "hash"
    found = repo.find_user_by_email("alice@example.com")
    assert found["id"] == user["id"]
    assert repo.find_user_by_email("ALICE@example.com") is None


def test_list_tasks_only_returns_owned_tasks(repo):
    alice = _user(repo, "alice@example.com")
    bob = _user(repo, "bob@example.com")
    a1 = repo.create_task(alice["id"], "Backup", "manual", False)
    a2 = repo.create_task(alice["id"], "Report", "daily", True)
    repo.create_task(bob["id"], "Other", "manual", False)

    listed = repo.list_tasks(alice["id"])
    assert [t["id"] for t in listed] == [a1["id"], a2["id"]]
    assert all(t["ownerId"] == alice["id"] for t in listed)
    assert len(repo.list_tasks(bob["id"])) == 1
    assert repo.list_tasks("nobody") == []


def test_created_task_round_trips(repo):
    alice = _user(repo, "alice@example.com")
    task = repo.create_task(alice["id"], "Backup", "manual", False)
    listed = repo.list_tasks(alice["id"])[0]
    patched = repo.patch_task(alice["id"], task["id"], {})
    for record in (listed, patched):
        for key in ("id", "ownerId", "title", "schedule"):
            assert record[key] == task[key]
    assert set(task) == {"id", "ownerId", "title", "schedule", "enabled", "createdAt"}


def test_patch_merges_fields_and_is_idempotent(repo):
    alice = _user(repo, "alice@example.com")
    task = repo.create_task(alice["id"], "Backup", "manual", False)

    first = repo.patch_task(alice["id"], task["id"], {"enabled": True})
    second = repo.patch_task(alice["id"], task["id"], {"enabled": True})
    assert first == second
    listed = repo.list_tasks(alice["id"])[0]
    assert listed["enabled"] is True
    assert listed["title"] == "Backup"
    assert listed["schedule"] == "manual"


def test_patch_ignores_immutable_fields(repo):
    alice = _user(repo, "alice@example.com")
    bob = _user(repo, "bob@example.com")
    task = repo.create_task(alice["id"], "Backup", "manual", False)

    patched = repo.patch_task(alice["id"], task["id"], {"id": "x", "ownerId": bob["id"], "title": "Renamed"})
    assert patched["id"] == task["id"]
    assert patched["ownerId"] == alice["id"]
    assert patched["title"] == "Renamed"
    assert repo.list_tasks(bob["id"]) == []


def test_patch_foreign_or_missing_task_is_not_found_and_changes_nothing(repo):
    alice = _user(repo, "alice@example.com")
    bob = _user(repo, "bob@example.com")
    task = repo.create_task(alice["id"], "Backup", "manual", False)

    with pytest.raises(NotFound):
        repo.patch_task(bob["id"], task["id"], {"enabled": True})
    with pytest.raises(NotFound):
        repo.patch_task(alice["id"], "does-not-exist", {"enabled": True})
    assert repo.list_tasks(alice["id"])[0]["enabled"] is False


def test_delete_task(repo):
    alice = _user(repo, "alice@example.com")
    bob = _user(repo, "bob@example.com")
    task = repo.create_task(alice["id"], "Backup", "manual", False)

    with pytest.raises(NotFound):
        repo.delete_task(bob["id"], task["id"])
    assert repo.delete_task(alice["id"], task["id"]) is True
    assert repo.list_tasks(alice["id"]) == []
    with pytest.raises(NotFound):
        repo.delete_task(alice["id"], task["id"])


def test_ids_are_not_reused_after_delete(repo):
    alice = _user(repo, "alice@example.com")
    first = repo.create_task(alice["id"], "One", "manual", False)
    repo.delete_task(alice["id"], first["id"])
    second = repo.create_task(alice["id"], "Two", "manual", False)
    assert second["id"] != first["id"]


def test_webhooks_are_scoped_to_owner(repo):
    alice = _user(repo, "alice@example.com")
    bob = _user(repo, "bob@example.com")
    hook = repo.create_webhook(alice["id"], "https://example.com/hook", "task.fired")

    assert isinstance(hook["id"], str)
    assert repo.list_webhooks(alice["id"]) == [hook]
    assert repo.list_webhooks(bob["id"]) == []
    assert repo.find_webhook(alice["id"], hook["id"]) == hook
    assert repo.find_webhook(bob["id"], hook["id"]) is None
    assert repo.find_webhook(alice["id"], "missing") is None


def test_enabled_is_stored_as_boolean(repo):
    alice = _user(repo, "alice@example.com")
    task = repo.create_task(alice["id"], "Backup", "manual", 1)
    assert task["enabled"] is True
    patched = repo.patch_task(alice["id"], task["id"], {"enabled": 0})
    assert patched["enabled"] is False
    again = repo.patch_task(alice["id"], task["id"], {"enabled": 1})
    assert again["enabled"] is True
    assert repo.list_tasks(alice["id"])[0]["enabled"] is True
