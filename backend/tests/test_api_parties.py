def test_supplier_crud(client, manager_headers):
    resp = client.post("/suppliers", headers=manager_headers, json={
        "name": "CV Segar Jaya", "contact_name": "Siti", "email": "order@segar.example.com",
    })
    assert resp.status_code == 201
    supplier_id = resp.json()["data"]["id"]

    dup = client.post("/suppliers", headers=manager_headers, json={"name": "Other", "email": "order@segar.example.com"})
    assert dup.status_code == 409

    resp = client.put(f"/suppliers/{supplier_id}", headers=manager_headers, json={"phone": "0812", "is_active": False})
    assert resp.json()["data"]["phone"] == "0812"

    page = client.get("/suppliers", headers=manager_headers, params={"is_active": False}).json()["data"]
    assert [s["id"] for s in page["items"]] == [supplier_id]

    assert client.delete(f"/suppliers/{supplier_id}", headers=manager_headers).status_code == 200
    assert client.get(f"/suppliers/{supplier_id}", headers=manager_headers).status_code == 404


def test_supplier_search_and_adjustments(client, manager_headers, supplier, make_product):
    product = make_product(stock=1)
    client.post("/stock/adjust", headers=manager_headers, json={
        "product_id": product.id, "adjustment_quantity": 6, "adjustment_type": "purchase", "supplier_id": supplier.id,
    })

    found = client.get("/suppliers/search", headers=manager_headers, params={"query": "sumber"}).json()["data"]
    assert [s["id"] for s in found] == [supplier.id]

    page = client.get(f"/suppliers/{supplier.id}/stock-adjustments", headers=manager_headers).json()["data"]
    assert page["items"][0]["adjustment_quantity"] == 6

    # History keeps the supplier
    assert client.delete(f"/suppliers/{supplier.id}", headers=manager_headers).status_code == 409


def test_cashier_cannot_manage_suppliers(client, cashier_headers):
    assert client.get("/suppliers", headers=cashier_headers).status_code == 403


def test_customer_crud(client, manager_headers, cashier_headers):
    # Cashiers register customers at the till
    resp = client.post("/customers", headers=cashier_headers, json={"name": "Budi", "phone": "0813"})
    assert resp.status_code == 201
    customer_id = resp.json()["data"]["id"]

    found = client.get("/customers/search", headers=cashier_headers, params={"query": "0813"}).json()["data"]
    assert [c["name"] for c in found] == ["Budi"]

    resp = client.put(f"/customers/{customer_id}", headers=manager_headers, json={"address": "Jl. Merdeka 1"})
    assert resp.json()["data"]["address"] == "Jl. Merdeka 1"

    assert client.delete(f"/customers/{customer_id}", headers=manager_headers).status_code == 200


def test_customer_detail_counts_completed_sales(client, manager_headers, cashier_headers, customer, make_product):
    product = make_product(price=1000, stock=20)
    ids = []
    for quantity in (1, 3):
        resp = client.post("/transactions", headers=cashier_headers, json={
            "payment_method": "cash", "customer_id": customer.id,
            "items": [{"product_id": product.id, "quantity": quantity}],
        })
        ids.append(resp.json()["data"]["id"])
    client.post(f"/transactions/{ids[0]}/void", headers=manager_headers)

    data = client.get(f"/customers/{customer.id}", headers=manager_headers).json()["data"]
    assert data["total_transactions"] == 1
    assert data["total_spent"] == 3000
    assert data["last_transaction_date"] is not None

    page = client.get(f"/customers/{customer.id}/transactions", headers=manager_headers).json()["data"]
    assert page["total"] == 2

    assert client.delete(f"/customers/{customer.id}", headers=manager_headers).status_code == 409
