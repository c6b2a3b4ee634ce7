import io
from datetime import datetime

from openpyxl import load_workbook

from gudang.models import Transaction, TransactionType


async def _seed_ledger(db, user, variation):
    rows = [
        (datetime(2024, 5, 1, 8, 0), TransactionType.stock_in, 40, "PO-1"),
        (datetime(2024, 5, 2, 9, 30), TransactionType.stock_out, 6, None),
        (datetime(2024, 5, 3, 17, 45), TransactionType.cancel, -2, "customer cancel"),
        (datetime(2024, 5, 4, 10, 0), TransactionType.stock_out, 1, None),
    ]
    for created_at, type_, quantity, notes in rows:
        db.add(
            Transaction(
                variation_id=variation.id,
                type=type_,
                quantity=quantity,
                notes=notes,
                user_id=user.id,
                created_at=created_at,
            )
        )
    await db.commit()


async def test_excel_requires_both_dates(client):
    resp = await client.get("/api/reports/excel", params={"startDate": "2024-05-01"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Start date and end date are required"


async def test_excel_rows_match_ledger_window(db, client, staff_user, make_product, make_variation):
    product = await make_product(name="Kaos Polos")
    variation = await make_variation(product, color="Hitam", size="M")
    await _seed_ledger(db, staff_user, variation)

    resp = await client.get("/api/reports/excel", params={"startDate": "2024-05-01", "endDate": "2024-05-03"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "stock-report-2024-05-01-2024-05-03.xlsx" in resp.headers["content-disposition"]

    ws = load_workbook(io.BytesIO(resp.content)).active
    assert ws.title == "Stock Transactions"
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0] == ("Date", "Type", "Product", "Variation", "Quantity", "User", "Notes")
    assert ws["A1"].font.bold
    assert len(rows) == 4
    assert [r[1] for r in rows[1:]] == ["Cancel", "Stock Out", "Stock In"]
    assert [r[4] for r in rows[1:]] == [-2, 6, 40]
    cancel = rows[1]
    assert cancel[0] == datetime(2024, 5, 3, 17, 45)
    assert cancel[2:] == ("Kaos Polos", "Hitam M", -2, staff_user.name, "customer cancel")


async def test_excel_type_filter(db, client, staff_user, make_product, make_variation):
    variation = await make_variation(await make_product())
    await _seed_ledger(db, staff_user, variation)

    resp = await client.get(
        "/api/reports/excel", params={"startDate": "2024-05-01", "endDate": "2024-05-31", "type": "out"}
    )
    rows = list(load_workbook(io.BytesIO(resp.content)).active.iter_rows(values_only=True))[1:]
    assert [r[4] for r in rows] == [1, 6]
    assert {r[3] for r in rows} == {"Default"}

    resp = await client.get(
        "/api/reports/excel", params={"startDate": "2024-05-01", "endDate": "2024-05-31", "type": "all"}
    )
    assert load_workbook(io.BytesIO(resp.content)).active.max_row == 5

    resp = await client.get(
        "/api/reports/excel", params={"startDate": "2024-05-01", "endDate": "2024-05-31", "type": "bogus"}
    )
    assert resp.status_code == 400


async def test_excel_empty_window_has_header_only(client):
    resp = await client.get("/api/reports/excel", params={"startDate": "2020-01-01", "endDate": "2020-01-02"})
    assert resp.status_code == 200
    ws = load_workbook(io.BytesIO(resp.content)).active
    assert ws.max_row == 1


async def test_excel_filename_uses_parsed_dates(client):
    resp = await client.get(
        "/api/reports/excel", params={"startDate": " 2024-05-01\n", "endDate": "2024-05-03T23:00:00 "}
    )
    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == 'attachment; filename="stock-report-2024-05-01-2024-05-03.xlsx"'


async def test_excel_blank_dates_rejected(client):
    resp = await client.get("/api/reports/excel", params={"startDate": "   ", "endDate": "2024-05-03"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Start date and end date are required"
