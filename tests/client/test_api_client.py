import httpx
import pytest

from kindergarten.client import ApiConflictError, ApiNotFoundError, ApiServerError, KindergartenClient


def _client(handler, **kwargs):
    sleeps: list[float] = []
    client = KindergartenClient(
        "http://kg.test", transport=httpx.MockTransport(handler), sleep=sleeps.append, **kwargs
    )
    return client, sleeps


def test_login_stores_token_and_sends_it():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"token": "abc", "user": {"id": 1, "role": "admin"}})
        return httpx.Response(200, json={"id": 1})

    client, _ = _client(handler)
    user = client.login("admin@example.com", "admin123")
    client.me()

    assert user["role"] == "admin"
    assert seen == [None, "Bearer abc"]


def test_get_retries_server_errors_with_linear_backoff():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        if calls["n"] < 3:
            return httpx.Response(503, json={"message": "busy", "details": None})
        return httpx.Response(200, json=[{"child_id": 10}])

    client, sleeps = _client(handler, token="t", retries=3, backoff=0.5)

    assert client.children() == [{"child_id": 10}]
    assert calls["n"] == 3
    assert sleeps == [0.5, 1.0]


def test_get_gives_up_after_retries():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client, sleeps = _client(handler, retries=2, backoff=1.0)

    with pytest.raises(ApiServerError):
        client.get("/api/groups")
    assert sleeps == [1.0, 2.0]


def test_writes_are_not_retried():
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        return httpx.Response(500, json={"message": "boom", "details": None})

    client, sleeps = _client(handler)

    with pytest.raises(ApiServerError) as exc:
        client.post("/api/groups", {"group_name": "Moon"})
    assert calls["n"] == 1
    assert sleeps == []
    assert exc.value.status_code == 500


def test_error_body_maps_to_exception_type():
    def handler(request):
        if request.url.path.endswith("/404"):
            return httpx.Response(404, json={"message": "Child not found", "details": None})
        return httpx.Response(
            409, json={"message": "Cannot delete", "details": [{"field": "group_id", "message": "2 children"}]}
        )

    client, _ = _client(handler)

    with pytest.raises(ApiNotFoundError) as not_found:
        client.child(404)
    assert not_found.value.message == "Child not found"

    with pytest.raises(ApiConflictError) as conflict:
        client.delete("/api/groups/1")
    assert conflict.value.details[0]["field"] == "group_id"


def test_query_params_drop_none():
    captured = {}

    def handler(request):
        captured.update(dict(request.url.params))
        return httpx.Response(200, json={"days": {}, "unresolved": []})

    client, _ = _client(handler)
    client.menu_grid(1, week=2)

    assert captured == {"week": "2"}


def test_malformed_json_error_body_still_maps_to_api_error():
    def handler(request):
        return httpx.Response(
            409, content=b"{not json", headers={"content-type": "application/json"}
        )

    client, _ = _client(handler)
    with pytest.raises(ApiConflictError) as exc:
        client.post("/api/groups", json={"group_name": "Sun"})

    assert exc.value.message == "{not json"
