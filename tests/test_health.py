# tests/test_health.py
async def test_health(client) -> None:
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


async def test_root(client) -> None:
    res = await client.get("/")
    assert res.json()["api"] == "/api"


async def test_unknown_route_uses_error_envelope(client) -> None:
    res = await client.get("/api/nothing-here")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}


async def test_ready_checks_database(client) -> None:
    res = await client.get("/ready")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "database": "connected"}
