"""HTTP tests against the FastAPI app backed by the in-memory repositories."""

from decimal import Decimal

import httpx
import pytest
import pytest_asyncio

from dispatch_engine.adapters.memory.repositories import InMemoryStore
from dispatch_engine.domain.entities.order import CustomerLocation, Order
from dispatch_engine.domain.entities.service import Service
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import (
    OrderStatus,
    ServiceCategory,
    WorkerAvailability,
)
from dispatch_engine.domain.value_objects.geo_point import GeoPoint
from dispatch_engine.infrastructure.api.dependencies import get_repositories
from dispatch_engine.infrastructure.storage import memory_repositories
from dispatch_engine.main import app

LOCATION = {"lat": -6.2088, "lng": 106.8456, "address": "Jl. Medan Merdeka"}


@pytest.fixture
def repos():
    return memory_repositories(InMemoryStore())


@pytest_asyncio.fixture
async def client(repos):
    async def _override():
        yield repos

    app.dependency_overrides[get_repositories] = _override
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def _seed(repos, availability=WorkerAvailability.AVAILABLE):
    service = await repos.services.save(
        Service(id=None, category=ServiceCategory.CAR_WASH, name="Cuci Mobil",
                base_price=Decimal("50000"), duration_minutes=60)
    )
    worker = await repos.workers.save(
        Worker(id=None, employee_id="W001", specializations={"cuci_mobil"},
               availability=availability, location=GeoPoint(-6.2088, 106.8456),
               average_rating=4.9)
    )
    order = await repos.orders.save(
        Order(id=None, tracking_id="ORD-001", service_id=service.id,
              status=OrderStatus.CONFIRMED,
              customer_location=CustomerLocation(**LOCATION))
    )
    return service, worker, order


@pytest.mark.asyncio
async def test_health_in_memory(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["database"] == "in-memory"
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_assign_endpoint(client, repos):
    service, worker, order = await _seed(repos)

    resp = await client.post("/api/assignments", json={
        "order_id": order.id, "service_id": service.id,
        "customer_location": LOCATION, "urgency": "high",
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "assigned"
    assert body["worker"]["id"] == worker.id
    assert body["worker"]["availability"] == "busy"

    detail = (await client.get(f"/api/orders/{order.id}")).json()
    assert detail["status"] == "assigned"
    assert detail["worker_id"] == worker.id
    assert detail["timeline"][0]["status"] == "assigned"


@pytest.mark.asyncio
async def test_assign_endpoint_no_candidate(client, repos):
    service, _, order = await _seed(repos, availability=WorkerAvailability.OFFLINE)

    resp = await client.post("/api/assignments", json={
        "order_id": order.id, "service_id": service.id, "customer_location": LOCATION,
    })

    assert resp.status_code == 200
    assert resp.json() == {"status": "unassigned", "order_id": order.id, "worker": None}


@pytest.mark.asyncio
async def test_assign_endpoint_error_mapping(client, repos):
    service, _, order = await _seed(repos)

    bad_location = await client.post("/api/assignments", json={
        "order_id": order.id, "service_id": service.id,
        "customer_location": {"lat": 120.0, "lng": 106.8},
    })
    assert bad_location.status_code == 400

    missing_service = await client.post("/api/assignments", json={
        "order_id": order.id, "service_id": 9999, "customer_location": LOCATION,
    })
    assert missing_service.status_code == 404

    bad_urgency = await client.post("/api/assignments", json={
        "order_id": order.id, "service_id": service.id,
        "customer_location": LOCATION, "urgency": "critical",
    })
    assert bad_urgency.status_code == 422


@pytest.mark.asyncio
async def test_assign_endpoint_order_not_assignable(client, repos):
    service, worker, order = await _seed(repos)
    await client.post(f"/api/orders/{order.id}/assign", json={"worker_id": worker.id})
    await client.patch(f"/api/workers/{worker.id}/availability", json={"availability": "available"})

    resp = await client.post("/api/assignments", json={
        "order_id": order.id, "service_id": service.id, "customer_location": LOCATION,
    })

    assert resp.status_code == 409
    assert resp.json()["detail"]["retryable"] is False


@pytest.mark.asyncio
async def test_sweep_endpoint(client, repos):
    _, worker, order = await _seed(repos)

    resp = await client.post("/api/assignments/sweep")

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_processed"] == 1
    assert body["assigned"] == 1
    assert body["failed"] == 0
    assert body["results"][0]["worker_id"] == worker.id

    again = (await client.post("/api/assignments/sweep")).json()
    assert again["total_processed"] == 0


@pytest.mark.asyncio
async def test_manual_assign_endpoint(client, repos):
    _, worker, order = await _seed(repos)

    resp = await client.post(f"/api/orders/{order.id}/assign", json={"worker_id": worker.id})
    assert resp.status_code == 200
    assert resp.json()["worker"]["employee_id"] == "W001"

    conflict = await client.post(f"/api/orders/{order.id}/assign", json={"worker_id": worker.id})
    assert conflict.status_code == 409

    missing = await client.post("/api/orders/9999/assign", json={"worker_id": worker.id})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_get_order_not_found(client):
    resp = await client.get("/api/orders/12345")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_available_workers_listing(client, repos):
    await _seed(repos)
    await repos.workers.save(Worker(id=None, employee_id="W002"))

    resp = await client.get("/api/workers/available", params={"category": "cuci_mobil"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["workers"][0]["specializations"] == ["cuci_mobil"]

    bad = await client.get("/api/workers/available", params={"category": "plumbing"})
    assert bad.status_code == 422


@pytest.mark.asyncio
async def test_worker_updates(client, repos):
    _, worker, _ = await _seed(repos)

    moved = await client.patch(f"/api/workers/{worker.id}/location", json={"lat": -6.3, "lng": 106.9})
    assert moved.status_code == 200
    assert moved.json()["lat"] == -6.3
    assert moved.json()["last_location_update"] is not None

    off = await client.patch(f"/api/workers/{worker.id}/availability", json={"availability": "offline"})
    assert off.json()["availability"] == "offline"

    out_of_range = await client.patch(f"/api/workers/{worker.id}/location", json={"lat": 91, "lng": 0})
    assert out_of_range.status_code == 422

    missing = await client.patch("/api/workers/9999/availability", json={"availability": "busy"})
    assert missing.status_code == 404
