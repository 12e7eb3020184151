"""Integration tests for the admin dashboard endpoints."""

from decimal import Decimal

import pytest
import pytest_asyncio
from services.store_service.models import OrderStatus, ReturnStatus
from tests.factories import (
    AddressFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    ReturnRequestFactory,
    UserFactory,
)
from tests.fakes import auth_headers_for

ADMIN = auth_headers_for("admin-1", "admin")


@pytest_asyncio.fixture
async def seeded(db_session):
    """Two customers: one with two paid orders, one with a pending order."""
    alice = UserFactory.create(first_name="Alice")
    bob = UserFactory.create(first_name="Bob")
    boots = ProductFactory.create(name="Boots", price=Decimal("60.00"))
    socks = ProductFactory.create(name="Socks", price=Decimal("5.00"))
    db_session.add_all([alice, bob, boots, socks])
    await db_session.commit()
    address = AddressFactory.create(alice.id, city="Sevilla")
    db_session.add(address)
    await db_session.commit()

    paid_a = OrderFactory.create(
        alice.id,
        address_id=address.id,
        status=OrderStatus.COMPLETED,
        total=Decimal("60.00"),
        total_paid=Decimal("60.00"),
    )
    paid_b = OrderFactory.create(
        alice.id,
        status=OrderStatus.SHIPPED,
        total=Decimal("15.00"),
        total_paid=Decimal("15.00"),
    )
    pending = OrderFactory.create(bob.id, total=Decimal("5.00"))
    db_session.add_all([paid_a, paid_b, pending])
    await db_session.commit()
    db_session.add_all(
        [
            OrderItemFactory.create(paid_a.id, boots, quantity=1),
            OrderItemFactory.create(paid_b.id, socks, quantity=3),
            OrderItemFactory.create(pending.id, socks, quantity=1),
            ReturnRequestFactory.create(paid_a.id, alice.id, total_amount=Decimal("60.00")),
            ReturnRequestFactory.create(
                paid_b.id,
                alice.id,
                total_amount=Decimal("15.00"),
                status=ReturnStatus.REJECTED,
            ),
        ]
    )
    await db_session.commit()
    return {"alice": alice, "paid_a": paid_a}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_overview(store_client, seeded):
    data = (await store_client.get("/admin/dashboard/overview", headers=ADMIN)).json()

    assert Decimal(data["total_sales"]) == Decimal("75.00")
    assert data["total_orders"] == 3
    assert data["paid_orders"] == 2
    assert Decimal(data["avg_order_value"]) == Decimal("37.50")
    assert data["paying_customers"] == 1
    assert data["total_users"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_by_status(store_client, seeded):
    data = (await store_client.get("/admin/dashboard/orders-by-status", headers=ADMIN)).json()

    counts = {row["status"]: row["count"] for row in data}
    assert counts == {"completed": 1, "shipped": 1, "pending": 1}
    assert {row["status_label"] for row in data} == {"Completed", "Shipped", "Pending"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_recent_orders_joins_customer_and_city(store_client, seeded):
    data = (
        await store_client.get("/admin/dashboard/recent-orders?limit=10", headers=ADMIN)
    ).json()

    assert len(data) == 3
    row = next(r for r in data if r["id"] == str(seeded["paid_a"].id))
    assert row["first_name"] == "Alice"
    assert row["email"] == seeded["alice"].email
    assert row["city"] == "Sevilla"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_top_products_ranked_by_quantity(store_client, seeded):
    data = (await store_client.get("/admin/dashboard/top-products", headers=ADMIN)).json()

    assert [p["product_name"] for p in data] == ["Socks", "Boots"]
    assert data[0]["total_quantity"] == 4
    assert Decimal(data[0]["total_revenue"]) == Decimal("20.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_returns_summary(store_client, seeded):
    data = (await store_client.get("/admin/dashboard/returns-summary", headers=ADMIN)).json()

    summary = {row["status"]: (row["count"], Decimal(row["total_amount"])) for row in data}
    assert summary == {
        "pending": (1, Decimal("60.00")),
        "rejected": (1, Decimal("15.00")),
    }
