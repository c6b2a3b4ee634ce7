from datetime import timedelta

from gudang.models import Transaction, TransactionType
from gudang.time_utils import local_now


async def _post(client, headers, variation, type_, quantity):
    resp = await client.post(
        "/api/transactions",
        json={"variationId": variation.id, "type": type_, "quantity": quantity},
        headers=headers,
    )
    assert resp.status_code == 201


async def test_stats_on_empty_database(client):
    resp = await client.get("/api/dashboard/stats")
    assert resp.status_code == 200
    assert resp.json() == {"totalProducts": 0, "lowStockCount": 0, "todayStockIn": 0, "todayStockOut": 0}


async def test_stats_count_today_only(db, client, staff_headers, staff_user, make_product, make_variation):
    product = await make_product(sku="P1")
    await make_product(sku="P2")
    variation = await make_variation(product, sku="V1", stock=0, min_stock=10)
    await make_variation(product, sku="V2", stock=100, min_stock=10)

    await _post(client, staff_headers, variation, "in", 30)
    await _post(client, staff_headers, variation, "out", 4)
    await _post(client, staff_headers, variation, "return", 2)
    db.add(
        Transaction(
            variation_id=variation.id,
            type=TransactionType.stock_in,
            quantity=500,
            user_id=staff_user.id,
            created_at=local_now() - timedelta(days=2),
        )
    )
    await db.commit()

    resp = await client.get("/api/dashboard/stats")
    assert resp.json() == {"totalProducts": 2, "lowStockCount": 0, "todayStockIn": 30, "todayStockOut": 4}


async def test_low_stock_count(client, make_product, make_variation):
    product = await make_product()
    await make_variation(product, sku="A", stock=10, min_stock=10)
    await make_variation(product, sku="B", stock=11, min_stock=10)
    await make_variation(product, sku="C", stock=0, min_stock=0)

    resp = await client.get("/api/dashboard/stats")
    assert resp.json()["lowStockCount"] == 2


async def test_top_products_ranked_by_units_sold(
    client, staff_headers, make_category, make_product, make_variation
):
    kaos = await make_category("Kaos")
    best = await make_product(sku="A", name="Best", category=kaos)
    second = await make_product(sku="B", name="Second")
    idle = await make_product(sku="C", name="Idle")
    best_m = await make_variation(best, sku="A-M", stock=100)
    best_l = await make_variation(best, sku="A-L", stock=100)
    second_v = await make_variation(second, sku="B-1", stock=100)
    await make_variation(idle, sku="C-1", stock=100)

    await _post(client, staff_headers, best_m, "out", 20)
    await _post(client, staff_headers, best_l, "out", 10)
    await _post(client, staff_headers, second_v, "out", 5)
    await _post(client, staff_headers, second_v, "in", 90)

    resp = await client.get("/api/dashboard/top-products")
    assert resp.status_code == 200
    assert resp.json() == [
        {"productId": best.id, "productName": "Best", "category": "Kaos", "totalSold": 30},
        {"productId": second.id, "productName": "Second", "category": "Uncategorized", "totalSold": 5},
        {"productId": idle.id, "productName": "Idle", "category": "Uncategorized", "totalSold": 0},
    ]

    resp = await client.get("/api/dashboard/top-products", params={"limit": 2})
    assert len(resp.json()) == 2

    resp = await client.get("/api/dashboard/top-products", params={"limit": 500})
    assert resp.status_code == 200
    assert len(resp.json()) == 3


async def test_stock_movement_is_zero_filled(db, client, staff_user, make_product, make_variation):
    variation = await make_variation(await make_product())
    now = local_now()
    for days_ago, type_, quantity in [
        (0, TransactionType.stock_in, 5),
        (0, TransactionType.stock_out, 2),
        (2, TransactionType.stock_in, 7),
        (2, TransactionType.cancel, -1),
        (9, TransactionType.stock_in, 100),
    ]:
        db.add(
            Transaction(
                variation_id=variation.id,
                type=type_,
                quantity=quantity,
                user_id=staff_user.id,
                created_at=now - timedelta(days=days_ago),
            )
        )
    await db.commit()

    resp = await client.get("/api/dashboard/stock-movement", params={"days": 3})
    assert resp.status_code == 200
    today = now.date()
    assert resp.json() == [
        {"day": (today - timedelta(days=2)).isoformat(), "stockIn": 7, "stockOut": 0},
        {"day": (today - timedelta(days=1)).isoformat(), "stockIn": 0, "stockOut": 0},
        {"day": today.isoformat(), "stockIn": 5, "stockOut": 2},
    ]
