import pytest

from pos_backend.models.product import Stock
from pos_backend.models.sale import Sale, SaleItem
from pos_backend.services.sales import parse_sale_quantity


def _stock(db, product_id):
    db.expire_all()
    return db.query(Stock).filter(Stock.product_id == product_id).one().quantity


def _sell(client, headers, *items, customer_id=None):
    payload = {"items": [{"barcode": b, "quantity": q} for b, q in items]}
    if customer_id is not None:
        payload["customer_id"] = customer_id
    return client.post("/sales", headers=headers, json=payload)


@pytest.mark.parametrize("value, expected", [
    (3, 3), ("3", 3), (" 12 ", 12), (0, None), ("0", None), (-1, None),
    ("-2", None), ("2.5", None), ("abc", None), (None, None), (True, None),
])
def test_parse_sale_quantity(value, expected):
    assert parse_sale_quantity(value) == expected


def test_selling_three_units_of_ten(client, admin_headers, make_product, db):
    product = make_product(unit_cost="2.50", sale_price="", quantity="10")

    res = _sell(client, admin_headers, (product["barcode"], 3))
    assert res.status_code == 201, res.text
    sale = res.json()

    assert _stock(db, product["id"]) == 7
    assert sale["total"] == pytest.approx(2.50 * 3)
    assert sale["status"] == "COMPLETED"
    assert sale["items"] == [{
        "product_id": product["id"], "product_name": "Caderno", "barcode": product["barcode"],
        "quantity": 3, "unit_price": 2.5, "subtotal": 7.5,
    }]


def test_total_is_sum_of_line_subtotals(client, admin_headers, make_product, make_customer, db):
    pen = make_product(name="Caneta", unit_cost="1.00", sale_price="1.99", quantity="20")
    book = make_product(name="Livro", unit_cost="30.00", sale_price="", quantity="5")
    customer = make_customer()

    res = _sell(client, admin_headers, (pen["barcode"], "4"), (book["barcode"], 2), customer_id=customer["id"])
    assert res.status_code == 201, res.text
    sale = res.json()

    assert sale["customer_name"] == "Maria Souza"
    assert sale["total"] == pytest.approx(4 * 1.99 + 2 * 30.00)
    assert sale["total"] == pytest.approx(sum(i["subtotal"] for i in sale["items"]))

    # The generated column agrees with quantity * unit_price
    rows = db.query(SaleItem).filter(SaleItem.sale_id == sale["id"]).order_by(SaleItem.id).all()
    assert [r.subtotal for r in rows] == [pytest.approx(7.96), pytest.approx(60.0)]


def test_insufficient_stock_changes_nothing(client, admin_headers, make_product, db):
    first = make_product(name="A", quantity="10")
    scarce = make_product(name="B", quantity="2")

    res = _sell(client, admin_headers, (first["barcode"], 1), (scarce["barcode"], 3))
    assert res.status_code == 409
    assert "Insufficient stock for product B" in res.json()["detail"]

    assert _stock(db, first["id"]) == 10
    assert _stock(db, scarce["id"]) == 2
    assert db.query(Sale).count() == 0
    assert db.query(SaleItem).count() == 0


def test_unknown_barcode_rolls_back_processed_lines(client, admin_headers, make_product, db):
    product = make_product(quantity="10")

    res = _sell(client, admin_headers, (product["barcode"], 2), ("000000009999", 1))
    assert res.status_code == 404
    assert res.json()["detail"] == "Product with barcode 000000009999 not found"

    assert _stock(db, product["id"]) == 10
    assert db.query(Sale).count() == 0
    assert db.query(SaleItem).count() == 0


def test_repeated_barcode_counts_against_the_same_stock(client, admin_headers, make_product, db):
    product = make_product(quantity="5")

    res = _sell(client, admin_headers, (product["barcode"], 3), (product["barcode"], 3))
    assert res.status_code == 409
    assert _stock(db, product["id"]) == 5

    res = _sell(client, admin_headers, (product["barcode"], 3), (product["barcode"], 2))
    assert res.status_code == 201
    assert _stock(db, product["id"]) == 0


@pytest.mark.parametrize("quantity", [0, "0", "-1", "abc", "1.5"])
def test_invalid_quantity_rejected(client, admin_headers, make_product, db, quantity):
    product = make_product()
    res = _sell(client, admin_headers, (product["barcode"], quantity))
    assert res.status_code == 400
    assert _stock(db, product["id"]) == 10
    assert db.query(Sale).count() == 0


def test_empty_sale_and_unknown_customer(client, admin_headers, make_product):
    res = client.post("/sales", headers=admin_headers, json={"items": []})
    assert res.status_code == 400
    assert res.json()["detail"] == "No items added to the sale"

    product = make_product()
    res = _sell(client, admin_headers, (product["barcode"], 1), customer_id=999)
    assert res.status_code == 404


def test_price_is_copied_at_time_of_sale(client, admin_headers, make_product):
    product = make_product(unit_cost="2.00", sale_price="3.00")
    sale = _sell(client, admin_headers, (product["barcode"], 2)).json()

    client.patch(f"/products/{product['id']}/edit", headers=admin_headers,
                 data={"name": "Caderno", "unit_cost": "2.00", "sale_price": "9.00", "quantity": "8"})

    detail = client.get(f"/sales/{sale['id']}", headers=admin_headers).json()
    assert detail["items"][0]["unit_price"] == pytest.approx(3.0)
    assert detail["total"] == pytest.approx(6.0)


def test_cancel_restores_stock_once(client, admin_headers, make_product, db):
    a = make_product(name="A", quantity="10")
    b = make_product(name="B", quantity="4")
    sale = _sell(client, admin_headers, (a["barcode"], 3), (b["barcode"], 4)).json()
    assert _stock(db, a["id"]) == 7
    assert _stock(db, b["id"]) == 0

    res = client.post(f"/sales/{sale['id']}/cancel", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "CANCELLED"
    assert _stock(db, a["id"]) == 10
    assert _stock(db, b["id"]) == 4

    res = client.post(f"/sales/{sale['id']}/cancel", headers=admin_headers)
    assert res.status_code == 409
    assert res.json()["detail"] == "Sale is already cancelled"
    assert _stock(db, a["id"]) == 10


def test_cancel_requires_admin_and_existing_sale(client, admin_headers, user_headers, make_product):
    product = make_product()
    sale = _sell(client, user_headers, (product["barcode"], 1)).json()

    assert client.post(f"/sales/{sale['id']}/cancel", headers=user_headers).status_code == 403
    assert client.post("/sales/999/cancel", headers=admin_headers).status_code == 404


def test_list_sales(client, admin_headers, make_product):
    product = make_product()
    first = _sell(client, admin_headers, (product["barcode"], 1)).json()
    second = _sell(client, admin_headers, (product["barcode"], 2)).json()
    client.post(f"/sales/{first['id']}/cancel", headers=admin_headers)

    body = client.get("/sales", headers=admin_headers).json()
    assert [s["id"] for s in body["items"]] == [second["id"], first["id"]]

    body = client.get("/sales", headers=admin_headers, params={"status": "CANCELLED"}).json()
    assert [s["id"] for s in body["items"]] == [first["id"]]


def test_receipt_pdf(client, admin_headers, make_product, make_customer):
    product = make_product()
    customer = make_customer()
    sale = _sell(client, admin_headers, (product["barcode"], 2), customer_id=customer["id"]).json()

    res = client.get(f"/sales/{sale['id']}/receipt", headers=admin_headers)
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert f"receipt_sale_{sale['id']}.pdf" in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF")

    assert client.get("/sales/999/receipt", headers=admin_headers).status_code == 404
