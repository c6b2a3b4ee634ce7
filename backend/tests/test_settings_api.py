from sqlalchemy import select

from gudang.models import SystemSetting

PAYLOAD = {"openaiApiKey": "sk-live-123", "openaiModel": "gpt-4o-mini", "stockAlertThreshold": 7}


async def test_settings_require_admin(client, staff_headers):
    assert (await client.get("/api/settings/system")).status_code == 401
    resp = await client.get("/api/settings/system", headers=staff_headers)
    assert resp.status_code == 403
    resp = await client.post("/api/settings/system", json=PAYLOAD, headers=staff_headers)
    assert resp.status_code == 403


async def test_defaults_come_from_environment(client, admin_headers):
    resp = await client.get("/api/settings/system", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"openaiApiKey": "", "openaiModel": "gpt-4o", "stockAlertThreshold": 10}


async def test_save_requires_every_field(client, admin_headers):
    resp = await client.post(
        "/api/settings/system",
        json={"openaiModel": "gpt-4o", "stockAlertThreshold": 5},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "All fields are required"


async def test_save_masks_key_and_upserts(client, db, admin_headers):
    resp = await client.post("/api/settings/system", json=PAYLOAD, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "System settings updated successfully"
    assert body["settings"] == {
        "openaiApiKey": "***hidden***",
        "openaiModel": "gpt-4o-mini",
        "stockAlertThreshold": 7,
    }

    resp = await client.post(
        "/api/settings/system", json={**PAYLOAD, "stockAlertThreshold": 3}, headers=admin_headers
    )
    assert resp.status_code == 200

    rows = (await db.execute(select(SystemSetting).order_by(SystemSetting.key))).scalars().all()
    assert {row.key: row.value for row in rows} == {
        "openaiApiKey": "sk-live-123",
        "openaiModel": "gpt-4o-mini",
        "stockAlertThreshold": "3",
    }

    resp = await client.get("/api/settings/system", headers=admin_headers)
    assert resp.json()["openaiApiKey"] == "***hidden***"
    assert resp.json()["stockAlertThreshold"] == 3


async def test_threshold_is_default_min_stock(client, admin_headers, make_product):
    product = await make_product()
    await client.post("/api/settings/system", json=PAYLOAD, headers=admin_headers)

    resp = await client.post(
        "/api/variations", json={"productId": product.id, "sku": "P1-S", "stock": 5}, headers=admin_headers
    )
    assert resp.status_code == 201
    assert resp.json()["minStock"] == 7
    assert resp.json()["isLowStock"] is True

    resp = await client.post(
        "/api/variations",
        json={"productId": product.id, "sku": "P1-M", "stock": 5, "minStock": 2},
        headers=admin_headers,
    )
    assert resp.json()["minStock"] == 2
    assert resp.json()["isLowStock"] is False


async def test_threshold_must_be_positive(client, admin_headers):
    for threshold in (0, -3):
        resp = await client.post(
            "/api/settings/system", json={**PAYLOAD, "stockAlertThreshold": threshold}, headers=admin_headers
        )
        assert resp.status_code == 400

    resp = await client.get("/api/settings/system", headers=admin_headers)
    assert resp.json()["stockAlertThreshold"] == 10
