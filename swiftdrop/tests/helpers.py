"""
Shared request helpers for the API tests.
"""


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register_user(client, username: str, role: str = "sender") -> dict:
    """Register through the API and return {"token", "user_id", "refresh_token"}."""
    response = await client.post("/v1/auth/register", json={
        "email": f"{username}@test.com",
        "username": username,
        "password": "password123",
        "role": role,
    })
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "token": data["accessToken"],
        "refresh_token": data["refreshToken"],
        "user_id": data["userId"],
    }


async def create_parcel(client, token: str, receiver_id, origin: str = "Lagos", destination: str = "Abuja", **extra) -> dict:
    """Create a parcel through the API and return its data payload."""
    response = await client.post(
        "/v1/parcels",
        json={"receiverId": receiver_id, "origin": origin, "destination": destination, **extra},
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]
