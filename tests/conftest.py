import pytest
from fastapi.testclient import TestClient

from pos_backend.config import Settings
from pos_backend.main import create_app

ADMIN_EMAIL = "admin@loja.com.br"
ADMIN_PASSWORD = "admin123"
SETUP_KEY = "first-run-key"


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "SECRET_KEY": "test-secret",
        "ADMIN_SETUP_KEY": SETUP_KEY,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.ctx.session_factory()
    yield session
    session.close()


def login(client, email, password):
    res = client.post("/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    res = client.post("/setup", json={
        "setup_key": SETUP_KEY, "name": "Admin", "email": ADMIN_EMAIL, "password": ADMIN_PASSWORD,
    })
    assert res.status_code == 201, res.text
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def user_headers(client, admin_headers):
    res = client.post("/users", headers=admin_headers, json={
        "name": "Cashier", "email": "caixa@loja.com.br", "password": "caixa123", "role": "user",
    })
    assert res.status_code == 201, res.text
    return login(client, "caixa@loja.com.br", "caixa123")


@pytest.fixture
def make_product(client, admin_headers):
    def _make(name="Caderno", unit_cost="2.50", sale_price="", quantity="10", **extra):
        data = {"name": name, "unit_cost": unit_cost, "sale_price": sale_price, "quantity": quantity}
        data.update(extra)
        res = client.post("/products", headers=admin_headers, data=data)
        assert res.status_code == 201, res.text
        return res.json()
    return _make


@pytest.fixture
def make_customer(client, admin_headers):
    def _make(name="Maria Souza", tax_id="123.456.789-01", **extra):
        payload = {"name": name, "tax_id": tax_id}
        payload.update(extra)
        res = client.post("/customers/quick", headers=admin_headers, json=payload)
        assert res.status_code == 201, res.text
        return res.json()
    return _make
