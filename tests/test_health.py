import pytest
from httpx import ASGITransport, AsyncClient

from streamhub.main import app, coordinator


@pytest.fixture(autouse=True)
def clean_rooms():
    for summary in coordinator.rooms.list_summaries():
        coordinator.rooms.remove(summary.id)
    yield
    for summary in coordinator.rooms.list_summaries():
        coordinator.rooms.remove(summary.id)


@pytest.mark.asyncio
async def test_health_endpoint() -> None:
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/api/health")
        head = await client.head("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert head.status_code == 200


@pytest.mark.asyncio
async def test_stream_listing_matches_socket_snapshot() -> None:
    coordinator.rooms.create("s1", "sid-a", broadcaster_user_id="A", title="Late show")
    coordinator.rooms.add_viewer("s1", "sid-b")
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        listing = await client.get("/api/streams")
        detail = await client.get("/api/streams/s1")
        missing = await client.get("/api/streams/nope")

    assert listing.status_code == 200
    assert listing.json() == coordinator.active_streams()
    assert detail.json()["title"] == "Late show"
    assert detail.json()["viewers"] == 1
    assert "createdAt" in detail.json()
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Stream not found"}
