from httpx import AsyncClient
from fastapi import status


async def test_health_reports_database(client: AsyncClient):
    response = await client.get("/api/v1/health")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"


async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == status.HTTP_200_OK
    assert "version" in response.json()
