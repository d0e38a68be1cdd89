from datetime import timedelta

import pytest

from utils.timeutils import utcnow


@pytest.fixture()
def sales(client, cashier_headers, manager_headers, make_product, category, customer):
    """Three sales today: two completed, one voided."""
    noodles = make_product(name="Mie Instan", price=3500, cost=3000, stock=50, category=category)
    pen = make_product(name="Pulpen", price=2500, cost=1500, stock=30)

    def sell(payload):
        resp = client.post("/transactions", headers=cashier_headers, json=payload)
        assert resp.status_code == 201
        return resp.json()["data"]

    sell({"payment_method": "cash", "customer_id": customer.id,
          "items": [{"product_id": noodles.id, "quantity": 2}, {"product_id": pen.id, "quantity": 1}]})
    sell({"payment_method": "card", "items": [{"product_id": pen.id, "quantity": 2}]})
    voided = sell({"payment_method": "cash", "items": [{"product_id": noodles.id, "quantity": 5}]})
    client.post(f"/transactions/{voided['id']}/void", headers=manager_headers)
    return {"noodles": noodles, "pen": pen}


def get(client, headers, path, **params):
    resp = client.get(f"/reports/{path}", headers=headers, params=params)
    assert resp.status_code == 200, resp.json()
    return resp.json()["data"]


def test_reports_need_manager(client, cashier_headers):
    assert client.get("/reports/sales-by-date", headers=cashier_headers).status_code == 403


def test_sales_by_date_ignores_voided(client, manager_headers, sales):
    data = get(client, manager_headers, "sales-by-date")

    assert data["summary"]["total_transactions"] == 2
    assert data["summary"]["total_sales"] == 9500 + 5000
    assert data["summary"]["total_items"] == 5
    today = utcnow().date().isoformat()
    assert [b["transactions"] for b in data["items"] if b["period"] == today] == [2]


def test_sales_by_date_grouped_by_month(client, manager_headers, sales):
    data = get(client, manager_headers, "sales-by-date", group_by="month")
    assert len(data["items"]) == 1
    assert data["items"][0]["total"] == 14500


def test_inverted_range_is_rejected(client, manager_headers):
    today = utcnow().date()
    resp = client.get("/reports/sales-by-date", headers=manager_headers, params={
        "start_date": today.isoformat(), "end_date": (today - timedelta(days=1)).isoformat(),
    })
    assert resp.status_code == 422


def test_sales_by_payment(client, manager_headers, sales):
    data = get(client, manager_headers, "sales-by-payment")
    by_method = {r["payment_method"]: r for r in data["items"]}
    assert by_method["cash"]["total"] == 9500
    assert by_method["card"]["total"] == 5000
    assert data["total"] == 14500


def test_sales_by_product_and_category(client, manager_headers, sales, category):
    rows = get(client, manager_headers, "sales-by-product")
    by_name = {r["product_name"]: r for r in rows}
    assert by_name["Mie Instan"]["quantity"] == 2
    assert by_name["Mie Instan"]["profit"] == 1000
    assert by_name["Pulpen"]["revenue"] == 7500

    rows = get(client, manager_headers, "sales-by-product", category_id=category.id)
    assert [r["product_name"] for r in rows] == ["Mie Instan"]

    rows = get(client, manager_headers, "sales-by-category")
    assert {r["category_name"]: r["revenue"] for r in rows} == {"Uncategorized": 7500, "Makanan": 7000}


def test_profit(client, manager_headers, sales):
    data = get(client, manager_headers, "profit", group_by="year")
    assert data["revenue"] == 14500
    assert data["cost"] == 2 * 3000 + 3 * 1500
    assert data["profit"] == 14500 - 10500


def test_inventory(client, manager_headers, sales):
    data = get(client, manager_headers, "inventory")
    assert data["total_products"] == 2
    assert data["total_stock"] == 48 + 27
    assert data["stock_value"] == 48 * 3000 + 27 * 1500


def test_customers_report_has_walk_in_bucket(client, manager_headers, sales):
    rows = get(client, manager_headers, "customers")
    assert {r["customer_name"]: r["transactions"] for r in rows} == {"Andi": 1, "Walk-in Customer": 1}


def test_tax_and_staff(client, manager_headers, sales):
    data = get(client, manager_headers, "tax")
    assert data["total_tax"] == 0
    assert data["total_taxable"] == 14500

    rows = get(client, manager_headers, "staff-performance")
    assert rows[0]["transactions"] == 2
    assert rows[0]["voided"] == 1


def test_stock_adjustment_report(client, manager_headers, sales):
    data = get(client, manager_headers, "stock-adjustments")
    summary = {s["adjustment_type"]: s for s in data["summary"]}
    assert summary["sale"]["count"] == 4
    assert summary["correction"]["quantity"] == 5


def test_dashboard(client, manager_headers, sales):
    data = get(client, manager_headers, "dashboard")
    assert data["today"]["transactions"] == 2
    assert data["today"]["amount"] == 14500
    assert data["growth"]["amount"] == 100.0
    assert len(data["recent_transactions"]) == 3
    assert data["top_products"][0]["product_name"] == "Pulpen"


# ---- store settings ----
def test_settings_flow(client, admin_headers, cashier_headers):
    data = client.get("/settings", headers=cashier_headers).json()["data"]
    assert data["store_name"] == "POS Store"
    assert data["tax_percentage"] == 0

    assert client.put("/settings", headers=cashier_headers, json={"tax_percentage": 11}).status_code == 403

    resp = client.put("/settings", headers=admin_headers, json={"store_name": "Toko Maju", "tax_percentage": 11})
    assert resp.json()["data"]["store_name"] == "Toko Maju"
    assert client.put("/settings", headers=admin_headers, json={"tax_percentage": 150}).status_code == 422

    resp = client.post("/settings/reset", headers=admin_headers)
    assert resp.json()["data"]["store_name"] == "POS Store"
    assert resp.json()["data"]["tax_percentage"] == 0


def test_tax_setting_applies_to_checkout(client, admin_headers, cashier_headers, make_product):
    client.put("/settings", headers=admin_headers, json={"tax_percentage": 10})
    product = make_product(price=10000, stock=5)

    resp = client.post("/transactions", headers=cashier_headers, json={
        "payment_method": "cash", "amount_paid": 20000, "items": [{"product_id": product.id, "quantity": 1}],
    })

    data = resp.json()["data"]
    assert (data["subtotal"], data["tax"], data["total"], data["change"]) == (10000, 1000, 11000, 9000)
