API = "/api/v1"


def test_create_and_list_tasks(client, auth_headers):
    goal = client.post(f"{API}/goals", json={"title": "Learn Rust"}, headers=auth_headers).json()["data"]
    created = client.post(
        f"{API}/tasks",
        json={"title": "  Read chapter 1 ", "category": "study", "priority": "high", "goalId": goal["id"]},
        headers=auth_headers,
    )
    assert created.status_code == 201
    task = created.json()["data"]
    assert task["title"] == "Read chapter 1"
    assert task["status"] == "planned"
    assert task["goalId"] == goal["id"]
    assert task["timeSpent"] == 0

    listed = client.get(f"{API}/tasks", headers=auth_headers).json()["data"]
    assert [item["id"] for item in listed] == [task["id"]]


def test_deleted_task_cannot_be_timed(client, auth_headers):
    task = client.post(f"{API}/tasks", json={"title": "Temp"}, headers=auth_headers).json()["data"]
    deleted = client.delete(f"{API}/tasks/{task['id']}", headers=auth_headers)
    assert deleted.json()["message"] == "Task deleted successfully"

    response = client.post(f"{API}/timer/start", json={"taskId": task["id"]}, headers=auth_headers)
    assert response.status_code == 404


def test_goal_progress_after_timer_completion(client, auth_headers, clock):
    goal = client.post(f"{API}/goals", json={"title": "Two steps"}, headers=auth_headers).json()["data"]
    first, second = (
        client.post(f"{API}/tasks", json={"title": title, "goalId": goal["id"]}, headers=auth_headers).json()["data"]
        for title in ("one", "two")
    )
    timer_id = client.post(f"{API}/timer/start", json={"taskId": first["id"]}, headers=auth_headers).json()["data"]["id"]
    clock.advance(15)
    client.post(f"{API}/timer/stop/{timer_id}", json={"completeTask": True}, headers=auth_headers)

    refreshed = client.get(f"{API}/goals/{goal['id']}", headers=auth_headers).json()["data"]
    assert refreshed["progress"] == 50
    assert refreshed["isCompleted"] is False
    assert second["status"] == "planned"


def test_unknown_goal_link_is_rejected(client, auth_headers):
    response = client.post(
        f"{API}/tasks",
        json={"title": "Orphan", "goalId": "00000000-0000-0000-0000-000000000000"},
        headers=auth_headers,
    )
    assert response.status_code == 404
