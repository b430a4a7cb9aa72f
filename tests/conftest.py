import pytest
from fastapi.testclient import TestClient

from storefront.auth import token_for_admin
from storefront.config import Settings
from storefront.main import create_app
from storefront.models import Admin, Category, Product


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key="test-secret",
        environment="test",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client):
    session = client.app.state.database.session()
    try:
        yield session
    finally:
        session.close()


def _make_admin(db, username, role):
    admin = Admin(username=username, email=f"{username}@kingicegold.com.mx",
                  password_hash="x", role=role)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def admin(db):
    return _make_admin(db, "gerente", "admin")


@pytest.fixture
def admin_headers(admin, settings):
    return {"Authorization": f"Bearer {token_for_admin(admin, settings)}"}


@pytest.fixture
def editor_headers(db, settings):
    editor = _make_admin(db, "editor", "editor")
    return {"Authorization": f"Bearer {token_for_admin(editor, settings)}"}


@pytest.fixture
def product(db):
    cat = Category(name="Anillos", slug="anillos", display_order=1)
    db.add(cat)
    db.flush()
    pr = Product(category_id=cat.id, name="Anillo Cubano", slug="anillo-cubano",
                 sku="AN-001", price=1000)
    db.add(pr)
    db.commit()
    db.refresh(pr)
    return pr


@pytest.fixture
def order_payload():
    return {
        "customer": {
            "name": "Ana López",
            "email": "ana.lopez@gmail.com",
            "phone": "5512345678",
            "street": "Av. Juárez 10",
            "city": "CDMX",
            "state": "CDMX",
            "zip_code": "06000",
        },
        "items": [{"name": "Ring", "price": 1000, "quantity": 2}],
        "subtotal": 2000,
        "shipping_cost": 150,
        "total": 2150,
        "whatsapp_message": "Hola, quiero confirmar mi pedido",
    }


@pytest.fixture
def create_order(client, order_payload):
    def _create(**overrides):
        body = {**order_payload, **overrides}
        res = client.post("/api/orders", json=body)
        assert res.status_code == 201, res.text
        return res.json()["order"]
    return _create
