from models.stock import StockAdjustment
from models.transaction import Transaction


def add(client, headers, product_id, quantity=1, discount=0):
    return client.post("/cart/add", headers=headers, json={
        "product_id": product_id, "quantity": quantity, "discount": discount,
    })


def test_empty_cart(client, cashier_headers):
    resp = client.get("/cart", headers=cashier_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"items": [], "item_count": 0, "subtotal": 0.0}


def test_adding_same_product_merges_quantity(client, cashier_headers, make_product):
    product = make_product(price=3500, stock=10)

    add(client, cashier_headers, product.id, 1)
    resp = add(client, cashier_headers, product.id, 2)

    data = resp.json()["data"]
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 3
    assert data["item_count"] == 3
    assert data["subtotal"] == 10500


def test_cannot_add_more_than_stock(client, cashier_headers, make_product):
    product = make_product(stock=2)
    add(client, cashier_headers, product.id, 2)
    resp = add(client, cashier_headers, product.id, 1)
    assert resp.status_code == 422
    assert resp.json()["errors"] == {"available": 2, "requested": 3}


def test_cannot_add_inactive_product(client, cashier_headers, make_product):
    product = make_product(is_active=False)
    assert add(client, cashier_headers, product.id).status_code == 422


def test_update_and_remove_line(client, cashier_headers, make_product):
    product = make_product(price=2000, stock=10)
    item_id = add(client, cashier_headers, product.id, 1).json()["data"]["items"][0]["id"]

    resp = client.put(f"/cart/items/{item_id}", headers=cashier_headers, json={"quantity": 4, "discount": 500})
    line = resp.json()["data"]["items"][0]
    assert (line["quantity"], line["discount"], line["line_total"]) == (4, 500, 7500)

    resp = client.delete(f"/cart/items/{item_id}", headers=cashier_headers)
    assert resp.json()["data"]["items"] == []
    assert client.delete(f"/cart/items/{item_id}", headers=cashier_headers).status_code == 404


def test_carts_are_per_cashier(client, cashier_headers, manager_headers, make_product):
    product = make_product()
    add(client, cashier_headers, product.id)
    assert client.get("/cart", headers=manager_headers).json()["data"]["items"] == []


def test_clear_cart(client, cashier_headers, make_product):
    add(client, cashier_headers, make_product().id)
    resp = client.delete("/cart", headers=cashier_headers)
    assert resp.json()["data"]["items"] == []


def test_checkout_from_cart(client, cashier_headers, make_product, db):
    product = make_product(price=3500, stock=50)
    add(client, cashier_headers, product.id, 2)

    resp = client.post("/cart/checkout", headers=cashier_headers, json={
        "payment_method": "cash", "amount_paid": 10000,
    })

    assert resp.status_code == 201
    tx = resp.json()["data"]
    assert tx["invoice_number"] == "INV-0001"
    assert tx["total"] == 7000
    assert tx["change"] == 3000
    assert tx["items"][0]["quantity"] == 2

    db.refresh(product)
    assert product.stock == 48
    assert client.get("/cart", headers=cashier_headers).json()["data"]["items"] == []


def test_checkout_with_short_payment_keeps_cart(client, cashier_headers, make_product, db):
    product = make_product(price=3500, stock=50)
    add(client, cashier_headers, product.id, 2)

    resp = client.post("/cart/checkout", headers=cashier_headers, json={
        "payment_method": "cash", "amount_paid": 5000,
    })

    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == "error"
    assert body["message"] == "Insufficient payment amount"
    db.refresh(product)
    assert product.stock == 50
    assert len(client.get("/cart", headers=cashier_headers).json()["data"]["items"]) == 1


def test_checkout_empty_cart(client, cashier_headers):
    resp = client.post("/cart/checkout", headers=cashier_headers, json={"payment_method": "card"})
    assert resp.status_code == 422
    assert resp.json()["message"] == "Cart is empty"


def test_checkout_fails_when_stock_ran_out_after_adding(client, cashier_headers, manager_headers, make_product, db):
    first = make_product(stock=5)
    second = make_product(stock=3)
    add(client, cashier_headers, first.id, 2)
    add(client, cashier_headers, second.id, 3)
    # Stock shrinks between adding to the cart and paying
    client.post("/stock/adjust", headers=manager_headers, json={
        "product_id": second.id, "adjustment_quantity": -2, "adjustment_type": "loss",
    })

    resp = client.post("/cart/checkout", headers=cashier_headers, json={"payment_method": "e-wallet"})

    assert resp.status_code == 422
    assert "Insufficient stock" in resp.json()["message"]
    db.refresh(first)
    assert first.stock == 5
    assert db.query(Transaction).count() == 0
    assert db.query(StockAdjustment).filter(StockAdjustment.adjustment_type == "sale").count() == 0
