def adjust(client, headers, product_id, quantity, adjustment_type, **extra):
    payload = {"product_id": product_id, "adjustment_quantity": quantity, "adjustment_type": adjustment_type}
    payload.update(extra)
    return client.post("/stock/adjust", headers=headers, json=payload)


def test_purchase_with_supplier(client, manager_headers, make_product, supplier, db):
    product = make_product(stock=10)

    resp = adjust(client, manager_headers, product.id, 5, "purchase", supplier_id=supplier.id, notes="Weekly order")

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert (data["previous_stock"], data["adjustment_quantity"], data["new_stock"]) == (10, 5, 15)
    assert data["supplier_name"] == supplier.name
    assert data["user_name"] == "Manager"
    db.refresh(product)
    assert product.stock == 15


def test_rule_violations_are_422_envelopes(client, manager_headers, make_product):
    product = make_product(stock=2)

    resp = adjust(client, manager_headers, product.id, -5, "loss")
    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == "error"
    assert body["errors"] == {"current_stock": 2, "adjustment": -5, "result": -3}

    assert adjust(client, manager_headers, product.id, 0, "purchase").status_code == 422
    assert adjust(client, manager_headers, product.id, 1, "return").status_code == 422
    assert adjust(client, manager_headers, product.id, 1, "purchase", supplier_id=99).status_code == 422


def test_sale_type_is_not_accepted_manually(client, manager_headers, make_product):
    product = make_product(stock=5)
    assert adjust(client, manager_headers, product.id, -1, "sale").status_code == 422


def test_missing_product(client, manager_headers):
    assert adjust(client, manager_headers, 404, 1, "purchase").status_code == 404


def test_cashier_cannot_adjust(client, cashier_headers, make_product):
    product = make_product()
    assert adjust(client, cashier_headers, product.id, 1, "purchase").status_code == 403


def test_history_filters(client, manager_headers, make_product, supplier):
    a = make_product(stock=10)
    b = make_product(stock=10)
    adjust(client, manager_headers, a.id, 3, "purchase", supplier_id=supplier.id)
    adjust(client, manager_headers, a.id, -1, "loss")
    adjust(client, manager_headers, b.id, 2, "correction")

    page = client.get("/stock/history", headers=manager_headers).json()["data"]
    assert page["total"] == 3
    assert page["items"][0]["adjustment_type"] == "correction"

    page = client.get("/stock/history", headers=manager_headers, params={"adjustment_type": "loss"}).json()["data"]
    assert [i["adjustment_quantity"] for i in page["items"]] == [-1]

    page = client.get("/stock/history", headers=manager_headers, params={"supplier_id": supplier.id}).json()["data"]
    assert page["total"] == 1

    page = client.get(f"/stock/history/{a.id}", headers=manager_headers).json()["data"]
    assert page["total"] == 2

    adjustment_id = page["items"][0]["id"]
    resp = client.get(f"/stock/adjustments/{adjustment_id}", headers=manager_headers)
    assert resp.json()["data"]["product_id"] == a.id
    assert client.get("/stock/adjustments/999", headers=manager_headers).status_code == 404


def test_monthly_stats_count_checkout_sales(client, manager_headers, cashier_headers, make_product):
    product = make_product(stock=10)
    adjust(client, manager_headers, product.id, 5, "purchase")
    adjust(client, manager_headers, product.id, -1, "loss")
    client.post("/transactions", headers=cashier_headers, json={
        "payment_method": "card", "items": [{"product_id": product.id, "quantity": 2}],
    })

    data = client.get("/stock/monthly-stats", headers=manager_headers).json()["data"]

    assert (data["purchases"], data["losses"], data["sales"], data["total"]) == (1, 1, 1, 3)


def test_movements_list_every_day(client, manager_headers, make_product):
    product = make_product(stock=10)
    adjust(client, manager_headers, product.id, 4, "purchase")
    adjust(client, manager_headers, product.id, -2, "return")

    data = client.get("/stock/movements", headers=manager_headers).json()["data"]

    assert len(data) == 30
    today = data[-1]
    assert today["purchase"] == 4
    assert today["return"] == -2
    assert all(day["purchase"] == 0 for day in data[:-1])
