import io
from typing import Dict

import httpx
from PIL import Image


async def register_and_login(client: httpx.AsyncClient, username: str, password: str = "s3cret-pass") -> Dict[str, str]:
    response = await client.post(
        "/auth/register",
        json={
            "name": username.title(),
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        },
    )
    assert response.status_code == 201, response.text

    response = await client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def create_collection(client: httpx.AsyncClient, headers, name: str = "Minis", **fields) -> dict:
    response = await client.post("/collections", data={"name": name, **fields}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["collection"]


async def create_item(client: httpx.AsyncClient, headers, collection_id: int, name: str = "Figure A", **fields) -> dict:
    response = await client.post(
        "/items",
        data={"collection_id": collection_id, "name": name, **fields},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["item"]


async def create_event(client: httpx.AsyncClient, headers, collection_id: int, date: str, name: str = "Toy fair", **fields) -> dict:
    response = await client.post(
        "/events",
        data={"collection_id": collection_id, "name": name, "location": "Porto", "date": date, **fields},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["event"]


def image_bytes(format: str = "PNG", size=(4, 4), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=format)
    return buffer.getvalue()
