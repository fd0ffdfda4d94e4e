"""Academic year administration endpoints."""

from httpx import AsyncClient


async def test_create_defaults_name_and_dates(client: AsyncClient) -> None:
    r = await client.post("/api/v1/academic-years", json={"code": "2024-25"})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["name"] == "Academic Year 2024-25"
    assert body["start_date"] == "2024-04-01"
    assert body["end_date"] == "2025-03-31"
    assert body["is_current"] is False


async def test_create_rejects_bad_code_and_duplicates(client: AsyncClient) -> None:
    r = await client.post("/api/v1/academic-years", json={"code": "2024-26"})
    assert r.status_code == 400

    assert (await client.post("/api/v1/academic-years", json={"code": "2024-25"})).status_code == 201
    r = await client.post("/api/v1/academic-years", json={"code": "2024-25"})
    assert r.status_code == 409


async def test_only_one_current_year(client: AsyncClient) -> None:
    r = await client.get("/api/v1/academic-years/current")
    assert r.status_code == 200
    assert r.json() is None

    await client.post("/api/v1/academic-years", json={"code": "2023-24", "is_current": True})
    await client.post("/api/v1/academic-years", json={"code": "2024-25", "is_current": True})
    r = await client.get("/api/v1/academic-years/current")
    assert r.json()["code"] == "2024-25"

    r = await client.post("/api/v1/academic-years/2023-24/set-current")
    assert r.status_code == 200
    years = (await client.get("/api/v1/academic-years")).json()
    assert [(y["code"], y["is_current"]) for y in years] == [("2023-24", True), ("2024-25", False)]

    r = await client.post("/api/v1/academic-years/1999-00/set-current")
    assert r.status_code == 404
