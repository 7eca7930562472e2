"""Tasks API: CRUD under a project, search, completion, progress.

Pattern: build up test data through the API (register → project → tasks).
"""

import uuid

import pytest_asyncio


@pytest_asyncio.fixture()
async def owner(register_user):
    headers, _ = await register_user()
    return headers


@pytest_asyncio.fixture()
async def project(client, owner):
    r = await client.post(
        "/api/v1/projects", json={"title": "Launch plan"}, headers=owner
    )
    return r.json()


def _tasks_url(project, suffix=""):
    return f"/api/v1/projects/{project['id']}/tasks{suffix}"


async def _create(client, headers, project, **fields):
    body = {"title": "Write release notes", **fields}
    r = await client.post(_tasks_url(project), json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════


async def test_create_task_round_trip(client, owner, project):
    task = await _create(
        client, owner, project, description="For v2.0", dueDate="2026-11-30"
    )
    assert task["isCompleted"] is False
    assert task["projectId"] == project["id"]

    r = await client.get(_tasks_url(project, f"/{task['id']}"), headers=owner)
    assert r.status_code == 200
    fetched = r.json()
    assert fetched["title"] == "Write release notes"
    assert fetched["description"] == "For v2.0"
    assert fetched["dueDate"] == "2026-11-30"


async def test_create_task_validation(client, owner, project):
    r = await client.post(
        _tasks_url(project), json={"title": "x" * 201}, headers=owner
    )
    assert r.status_code == 400
    r = await client.post(
        _tasks_url(project),
        json={"title": "Valid title", "description": "d" * 1001},
        headers=owner,
    )
    assert r.status_code == 400


async def test_list_tasks(client, owner, project):
    for title in ["First task", "Second task", "Third task"]:
        await _create(client, owner, project, title=title)

    r = await client.get(_tasks_url(project, "?size=2"), headers=owner)
    assert r.status_code == 200
    body = r.json()
    assert [t["title"] for t in body["items"]] == ["First task", "Second task"]
    assert body["total"] == 3


async def test_update_task(client, owner, project):
    task = await _create(client, owner, project, dueDate="2026-11-30")
    r = await client.put(
        _tasks_url(project, f"/{task['id']}"),
        json={"title": "Rewritten", "description": "Now with details"},
        headers=owner,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Rewritten"
    assert body["description"] == "Now with details"
    assert body["dueDate"] is None


async def test_delete_task(client, owner, project):
    task = await _create(client, owner, project)
    url = _tasks_url(project, f"/{task['id']}")
    r = await client.delete(url, headers=owner)
    assert r.status_code == 204
    r = await client.get(url, headers=owner)
    assert r.status_code == 404
    assert r.json()["message"] == "Task not found"


async def test_missing_project_is_not_found(client, owner):
    r = await client.get(f"/api/v1/projects/{uuid.uuid4()}/tasks", headers=owner)
    assert r.status_code == 404
    assert r.json()["message"] == "Project not found"


# ═══════════════════════════════════════════════════════════
# Search, completion, progress
# ═══════════════════════════════════════════════════════════


async def test_search_tasks(client, owner, project):
    await _create(client, owner, project, title="Fix LOGIN redirect")
    await _create(client, owner, project, title="Polish", description="login page copy")
    await _create(client, owner, project, title="Unrelated work")

    r = await client.get(_tasks_url(project, "/search?term=login"), headers=owner)
    assert r.status_code == 200
    titles = sorted(t["title"] for t in r.json()["items"])
    assert titles == ["Fix LOGIN redirect", "Polish"]


async def test_complete_is_idempotent(client, owner, project):
    task = await _create(client, owner, project)
    url = _tasks_url(project, f"/{task['id']}/complete")

    first = await client.put(url, headers=owner)
    second = await client.put(url, headers=owner)
    assert first.status_code == second.status_code == 200
    assert first.json()["isCompleted"] is True
    assert second.json()["isCompleted"] is True


async def test_progress(client, owner, project):
    r = await client.get(_tasks_url(project, "/progress"), headers=owner)
    assert r.status_code == 200
    assert r.json() == {
        "totalTasks": 0,
        "completedTasks": 0,
        "progressPercentage": 0.0,
    }

    done = await _create(client, owner, project, title="Done task")
    await _create(client, owner, project, title="Open task")
    await client.put(_tasks_url(project, f"/{done['id']}/complete"), headers=owner)

    r = await client.get(_tasks_url(project, "/progress"), headers=owner)
    assert r.json() == {
        "totalTasks": 2,
        "completedTasks": 1,
        "progressPercentage": 50.0,
    }


# ═══════════════════════════════════════════════════════════
# Tenant isolation
# ═══════════════════════════════════════════════════════════


async def test_other_user_cannot_touch_tasks(client, owner, project, register_user):
    intruder, _ = await register_user()
    task = await _create(client, owner, project)
    task_url = _tasks_url(project, f"/{task['id']}")

    checks = [
        await client.get(_tasks_url(project), headers=intruder),
        await client.post(_tasks_url(project), json={"title": "Planted"}, headers=intruder),
        await client.get(_tasks_url(project, "/search?term=release"), headers=intruder),
        await client.get(_tasks_url(project, "/progress"), headers=intruder),
        await client.get(task_url, headers=intruder),
        await client.put(task_url, json={"title": "Defaced"}, headers=intruder),
        await client.put(f"{task_url}/complete", headers=intruder),
        await client.delete(task_url, headers=intruder),
    ]
    assert [r.status_code for r in checks] == [404] * len(checks)

    r = await client.get(task_url, headers=owner)
    assert r.json()["title"] == "Write release notes"
    assert r.json()["isCompleted"] is False


async def test_task_not_reachable_through_own_other_project(client, owner, project):
    task = await _create(client, owner, project)
    r = await client.post("/api/v1/projects", json={"title": "Other"}, headers=owner)
    other = r.json()

    r = await client.get(_tasks_url(other, f"/{task['id']}"), headers=owner)
    assert r.status_code == 404
