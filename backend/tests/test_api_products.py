from models.product import Product


def product_payload(**overrides):
    payload = {
        "name": "Mie Instan",
        "sku": "mi001",
        "barcode": "8992388111114",
        "price": 3500,
        "cost": 3000,
        "stock": 50,
        "low_stock_threshold": 10,
    }
    payload.update(overrides)
    return payload


def test_manager_creates_product(client, manager_headers, category):
    resp = client.post("/products", headers=manager_headers, json=product_payload(category_id=category.id))

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["sku"] == "MI001"
    assert data["stock"] == 50
    assert data["category_name"] == "Makanan"
    assert data["is_low_stock"] is False


def test_threshold_defaults_to_store_setting(client, manager_headers):
    payload = product_payload()
    payload.pop("low_stock_threshold")
    resp = client.post("/products", headers=manager_headers, json=payload)
    assert resp.json()["data"]["low_stock_threshold"] == 5


def test_cashier_cannot_create_product(client, cashier_headers):
    resp = client.post("/products", headers=cashier_headers, json=product_payload())
    assert resp.status_code == 403


def test_duplicate_sku_is_conflict(client, manager_headers):
    client.post("/products", headers=manager_headers, json=product_payload())
    resp = client.post("/products", headers=manager_headers, json=product_payload(barcode="123"))

    assert resp.status_code == 409
    assert "sku" in resp.json()["errors"]


def test_negative_price_is_rejected(client, manager_headers):
    resp = client.post("/products", headers=manager_headers, json=product_payload(price=-1))
    assert resp.status_code == 422


def test_update_never_touches_stock(client, manager_headers, make_product, db):
    product = make_product(stock=12)

    resp = client.put(f"/products/{product.id}", headers=manager_headers, json={"price": 4000, "stock": 999})

    assert resp.status_code == 200
    assert resp.json()["data"]["price"] == 4000
    db.refresh(product)
    assert product.stock == 12


def test_list_filters_and_pagination(client, cashier_headers, make_product, category):
    make_product(name="Teh Botol", stock=36, low_stock_threshold=12, category=category)
    make_product(name="Roti Tawar", stock=4, low_stock_threshold=5, category=category)
    make_product(name="Pulpen", stock=0, low_stock_threshold=10)
    make_product(name="Buku", stock=25, is_active=False)

    def names(**params):
        resp = client.get("/products", headers=cashier_headers, params=params)
        assert resp.status_code == 200
        return [p["name"] for p in resp.json()["data"]["items"]]

    assert names(search="rot") == ["Roti Tawar"]
    assert names(category_id=category.id) == ["Roti Tawar", "Teh Botol"]
    assert names(stock_status="low") == ["Pulpen", "Roti Tawar"]
    assert names(stock_status="out") == ["Pulpen"]
    assert names(is_active=False) == ["Buku"]

    page = client.get("/products", headers=cashier_headers, params={"page": 2, "page_size": 3}).json()["data"]
    assert page["total"] == 4
    assert len(page["items"]) == 1


def test_low_stock_excludes_inactive(client, cashier_headers, make_product):
    make_product(name="A", stock=1, low_stock_threshold=5)
    make_product(name="B", stock=0, low_stock_threshold=5, is_active=False)
    make_product(name="C", stock=50, low_stock_threshold=5)

    data = client.get("/products/low-stock", headers=cashier_headers).json()["data"]
    assert [p["name"] for p in data] == ["A"]


def test_barcode_lookup_and_quick_search(client, cashier_headers, make_product):
    make_product(name="Air Mineral", barcode="8992388222225", sku="AM001")

    resp = client.get("/products/barcode/8992388222225", headers=cashier_headers)
    assert resp.json()["data"]["sku"] == "AM001"
    assert client.get("/products/barcode/000", headers=cashier_headers).status_code == 404

    resp = client.get("/products/search", headers=cashier_headers, params={"query": "am0"})
    assert [p["name"] for p in resp.json()["data"]] == ["Air Mineral"]


def test_delete_product(client, manager_headers, make_product, db):
    product = make_product()
    resp = client.delete(f"/products/{product.id}", headers=manager_headers)
    assert resp.status_code == 200
    assert db.query(Product).count() == 0


def test_delete_product_with_history_is_refused(client, manager_headers, make_product):
    product = make_product(stock=5)
    client.post("/stock/adjust", headers=manager_headers, json={
        "product_id": product.id, "adjustment_quantity": 1, "adjustment_type": "purchase",
    })
    resp = client.delete(f"/products/{product.id}", headers=manager_headers)
    assert resp.status_code == 409


def test_missing_product_is_404_envelope(client, cashier_headers):
    resp = client.get("/products/999", headers=cashier_headers)
    assert resp.status_code == 404
    assert resp.json() == {"status": "error", "message": "Product not found", "data": None, "errors": None}


# ---- categories ----
def test_category_crud(client, manager_headers, cashier_headers):
    resp = client.post("/categories", headers=manager_headers, json={"name": "Snack", "description": "Camilan"})
    assert resp.status_code == 201
    category_id = resp.json()["data"]["id"]

    assert client.post("/categories", headers=manager_headers, json={"name": "snack"}).status_code == 409
    assert client.post("/categories", headers=cashier_headers, json={"name": "Other"}).status_code == 403

    resp = client.put(f"/categories/{category_id}", headers=manager_headers, json={"name": "Snacks"})
    assert resp.json()["data"]["name"] == "Snacks"

    listed = client.get("/categories", headers=cashier_headers).json()["data"]
    assert [c["name"] for c in listed] == ["Snacks"]

    assert client.delete(f"/categories/{category_id}", headers=manager_headers).status_code == 200


def test_category_in_use_cannot_be_deleted(client, manager_headers, make_product, category):
    make_product(category=category)
    resp = client.delete(f"/categories/{category.id}", headers=manager_headers)
    assert resp.status_code == 409
