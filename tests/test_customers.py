import json
from urllib.parse import parse_qs, urlparse

import pytest

from pos_backend.models.customer import Customer
from pos_backend.services.customers import format_tax_id, normalize_tax_id
from pos_backend.utils.results import Failure, Ok


@pytest.mark.parametrize("raw", ["123.456.789-01", "12345678901", " 123 456 789 01 ", "123/456.789-01"])
def test_tax_id_normalizes_to_eleven_digits(raw):
    assert normalize_tax_id(raw) == Ok("12345678901")


@pytest.mark.parametrize("raw", ["", None, "1234567890", "123456789012", "123.456.789-0a", "abcdefghijk"])
def test_tax_id_rejected_unless_eleven_digits(raw):
    result = normalize_tax_id(raw)
    assert isinstance(result, Failure)
    assert "11 numeric digits" in result.message


def test_format_tax_id():
    assert format_tax_id("12345678901") == "123.456.789-01"
    assert format_tax_id(None) == ""


def _redirect_params(res):
    parsed = urlparse(res.headers["location"])
    return parsed.path, parse_qs(parsed.query)


def test_create_customer_via_form(client, admin_headers, db):
    res = client.post("/customers", headers=admin_headers, follow_redirects=False, data={
        "name": "Joao Lima", "tax_id": "111.222.333-44", "email": "joao@mail.com",
    })
    assert res.status_code == 303
    assert res.headers["location"] == "/customers"

    customer = db.query(Customer).one()
    assert customer.tax_id == "11122233344"
    assert customer.phone is None


def test_duplicate_tax_id_redirects_with_form_data(client, admin_headers, make_customer, db):
    make_customer(tax_id="111.222.333-44")
    form = {"name": "Outro", "tax_id": "11122233344", "email": "outro@mail.com"}

    res = client.post("/customers", headers=admin_headers, follow_redirects=False, data=form)
    assert res.status_code == 303
    path, params = _redirect_params(res)
    assert path == "/customers"
    assert params["error"] == ["Tax id already registered"]
    assert json.loads(params["formData"][0])["name"] == "Outro"
    assert db.query(Customer).count() == 1

    # The list page echoes the error and the submitted data
    listing = client.get(res.headers["location"], headers=admin_headers).json()
    assert listing["error"] == "Tax id already registered"
    assert listing["form_data"]["tax_id"] == "11122233344"


def test_missing_name_and_bad_tax_id(client, admin_headers, db):
    res = client.post("/customers", headers=admin_headers, follow_redirects=False,
                      data={"tax_id": "11122233344"})
    assert _redirect_params(res)[1]["error"] == ["Name is required"]

    res = client.post("/customers", headers=admin_headers, follow_redirects=False,
                      data={"name": "Ana", "tax_id": "123"})
    assert "11 numeric digits" in _redirect_params(res)[1]["error"][0]
    assert db.query(Customer).count() == 0


def test_edit_customer(client, admin_headers, make_customer, db):
    first = make_customer(name="Ana", tax_id="11111111111")
    make_customer(name="Bia", tax_id="22222222222")

    # Keeping its own tax id is not a conflict
    res = client.post(f"/customers/{first['id']}/edit", headers=admin_headers, follow_redirects=False,
                      data={"name": "Ana Paula", "tax_id": "111.111.111-11"})
    assert res.headers["location"] == "/customers"

    res = client.post(f"/customers/{first['id']}/edit", headers=admin_headers, follow_redirects=False,
                      data={"name": "Ana Paula", "tax_id": "22222222222"})
    assert _redirect_params(res)[1]["error"] == ["Tax id already registered for another customer"]

    db.expire_all()
    stored = db.query(Customer).filter(Customer.id == first["id"]).one()
    assert stored.name == "Ana Paula"
    assert stored.tax_id == "11111111111"


def test_search_and_typeahead(client, admin_headers, make_customer):
    make_customer(name="Carlos Mendes", tax_id="98765432100", email="carlos@mail.com")
    make_customer(name="Daniela Rocha", tax_id="12312312312")

    res = client.get("/customers", headers=admin_headers, params={"search": "CARLOS"})
    assert [c["name"] for c in res.json()["items"]] == ["Carlos Mendes"]

    res = client.get("/customers", headers=admin_headers, params={"search": "123.123"})
    assert [c["name"] for c in res.json()["items"]] == ["Daniela Rocha"]

    res = client.get("/customers/search", headers=admin_headers, params={"search": "mail.com"})
    assert res.json() == [{"id": 1, "name": "Carlos Mendes", "tax_id": "987.654.321-00"}]


def test_quick_create_errors_are_json(client, admin_headers, make_customer):
    make_customer(tax_id="11122233344")
    res = client.post("/customers/quick", headers=admin_headers, json={"name": "X", "tax_id": "111.222.333-44"})
    assert res.status_code == 409
    assert res.json()["detail"] == "Tax id already registered"

    res = client.post("/customers/quick", headers=admin_headers, json={"name": "X", "tax_id": "12"})
    assert res.status_code == 400


def test_delete_customer_keeps_sales(client, admin_headers, make_customer, make_product):
    customer = make_customer()
    product = make_product()
    sale = client.post("/sales", headers=admin_headers, json={
        "customer_id": customer["id"], "items": [{"barcode": product["barcode"], "quantity": 1}],
    }).json()
    assert sale["customer_name"] == "Maria Souza"

    assert client.delete(f"/customers/{customer['id']}", headers=admin_headers).status_code == 200

    detail = client.get(f"/sales/{sale['id']}", headers=admin_headers).json()
    assert detail["customer_id"] is None
    assert detail["total"] == pytest.approx(2.5)


@pytest.mark.parametrize("raw", ["１２３４５６７８９０１", "١٢٣٤٥٦٧٨٩٠١"])
def test_tax_id_accepts_only_ascii_digits(raw):
    assert isinstance(normalize_tax_id(raw), Failure)


def test_non_ascii_digits_cannot_dodge_duplicate_check(client, admin_headers, make_customer, db):
    make_customer(tax_id="12345678901")
    res = client.post("/customers/quick", headers=admin_headers,
                      json={"name": "Copia", "tax_id": "１２３４５６７８９０１"})
    assert res.status_code == 400
    assert db.query(Customer).count() == 1
