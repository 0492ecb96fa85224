"""End-to-end HTTP tests: FastAPI TestClient against a throwaway SQLite database."""
import pytest

from shopapi.models.users import UserRole
from shopapi.services import accounts

PASSWORD = "secret123"


@pytest.fixture()
def register_and_login(client, session_factory):
    def _login(email, role=UserRole.CUSTOMER):
        if role == UserRole.ADMIN:
            with session_factory() as session:
                accounts.register(session, email, PASSWORD, role=role)
        else:
            res = client.post("/register", json={"email": email, "password": PASSWORD})
            assert res.status_code == 201, res.text
        res = client.post("/login", json={"email": email, "password": PASSWORD})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['access_token']}"}
    return _login


@pytest.fixture()
def admin(register_and_login):
    return register_and_login("admin@example.com", UserRole.ADMIN)


@pytest.fixture()
def customer(register_and_login):
    return register_and_login("customer@example.com")


@pytest.fixture()
def product(client, admin):
    res = client.post(
        "/products",
        json={"name": "Kettle", "description": "1.7l", "price": "49.99", "stock_quantity": 5},
        headers=admin,
    )
    assert res.status_code == 201, res.text
    return res.json()


def test_ping(client):
    res = client.get("/ping")
    assert res.status_code == 200
    assert res.text == "pong"


def test_register_login_me(client, customer):
    res = client.get("/me", headers=customer)
    assert res.status_code == 200
    assert res.json()["email"] == "customer@example.com"
    assert res.json()["role"] == "customer"


def test_register_duplicate_email(client, customer):
    res = client.post("/register", json={"email": "Customer@example.com", "password": PASSWORD})
    assert res.status_code == 409
    assert res.json()["code"] == "EMAIL_TAKEN"


def test_login_wrong_password(client, customer):
    res = client.post("/login", json={"email": "customer@example.com", "password": "wrongpass1"})
    assert res.status_code == 401
    assert res.json()["code"] == "INVALID_CREDENTIALS"


def test_login_rejects_malformed_password(client, customer):
    res = client.post("/login", json={"email": "customer@example.com", "password": "short"})
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_INPUT"
    assert "password" in res.json()["details"]


def test_missing_auth_header(client):
    res = client.get("/orders")
    assert res.status_code == 401
    assert res.json()["code"] == "MISSING_AUTH_HEADER"


def test_garbage_token(client):
    res = client.get("/orders", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
    assert res.json()["code"] == "INVALID_TOKEN"


def test_logout_then_again(client, customer):
    assert client.post("/logout", headers=customer).status_code == 204
    res = client.post("/logout", headers=customer)
    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


def test_customer_cannot_manage_products(client, customer):
    res = client.post(
        "/products", json={"name": "X", "price": "1.00", "stock_quantity": 1}, headers=customer,
    )
    assert res.status_code == 403
    assert res.json()["code"] == "ADMIN_REQUIRED"


def test_product_price_must_be_positive(client, admin):
    res = client.post("/products", json={"name": "X", "price": "0", "stock_quantity": 1}, headers=admin)
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_INPUT"
    assert "price" in res.json()["details"]


def test_order_flow(client, customer, admin, product):
    res = client.post(
        "/orders", json={"items": [{"product_id": product["id"], "quantity": 3}]}, headers=customer,
    )
    assert res.status_code == 201, res.text
    order = res.json()
    assert order["status"] == "pending"
    assert order["total_amount"] == pytest.approx(149.97)
    assert order["items"][0]["unit_price"] == pytest.approx(49.99)
    assert order["items"][0]["subtotal"] == pytest.approx(149.97)

    stock = client.get(f"/products/{product['id']}", headers=customer).json()["stock_quantity"]
    assert stock == 2

    listed = client.get("/orders", headers=customer).json()
    assert [o["id"] for o in listed] == [order["id"]]
    assert "items" not in listed[0]

    # Admins may read any order
    assert client.get(f"/orders/{order['id']}", headers=admin).status_code == 200

    res = client.post(f"/orders/{order['id']}/cancel", headers=customer)
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"
    assert client.get(f"/products/{product['id']}", headers=customer).json()["stock_quantity"] == 5

    res = client.post(f"/orders/{order['id']}/cancel", headers=customer)
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_ORDER_STATUS"


def test_insufficient_stock(client, customer, product):
    res = client.post(
        "/orders", json={"items": [{"product_id": product["id"], "quantity": 6}]}, headers=customer,
    )
    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "INSUFFICIENT_STOCK"
    assert body["details"] == {"product_id": product["id"], "available": 5, "requested": 6}


def test_unknown_product(client, customer):
    res = client.post("/orders", json={"items": [{"product_id": "missing", "quantity": 1}]}, headers=customer)
    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


@pytest.mark.parametrize("payload", [
    {"items": []},
    {"items": [{"product_id": "p", "quantity": 0}]},
    {},
])
def test_malformed_order(client, customer, payload):
    res = client.post("/orders", json=payload, headers=customer)
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_INPUT"


def test_other_user_cannot_touch_order(client, customer, register_and_login, product):
    order = client.post(
        "/orders", json={"items": [{"product_id": product["id"], "quantity": 1}]}, headers=customer,
    ).json()
    intruder = register_and_login("intruder@example.com")

    res = client.post(f"/orders/{order['id']}/cancel", headers=intruder)
    assert res.status_code == 403
    assert res.json()["code"] == "UNAUTHORIZED"
    assert client.get(f"/orders/{order['id']}", headers=intruder).status_code == 403


def test_admin_status_updates(client, customer, admin, product):
    order = client.post(
        "/orders", json={"items": [{"product_id": product["id"], "quantity": 1}]}, headers=customer,
    ).json()
    url = f"/orders/{order['id']}/status"

    assert client.put(url, json={"status": "shipped"}, headers=customer).status_code == 403

    res = client.put(url, json={"status": "delivered"}, headers=admin)
    assert res.status_code == 200
    assert res.json()["status"] == "delivered"

    res = client.put(url, json={"status": "pending"}, headers=admin)
    assert res.status_code == 400
    assert res.json()["code"] == "TERMINAL_STATE"

    res = client.put(url, json={"status": "lost"}, headers=admin)
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_INPUT"


def test_referenced_product_cannot_be_deleted(client, customer, admin, product):
    client.post("/orders", json={"items": [{"product_id": product["id"], "quantity": 1}]}, headers=customer)

    res = client.delete(f"/products/{product['id']}", headers=admin)
    assert res.status_code == 409
    assert res.json()["code"] == "CONFLICT"


def test_audit_log_records_actions(client, customer, admin, product):
    client.post("/orders", json={"items": [{"product_id": product["id"], "quantity": 1}]}, headers=customer)

    res = client.get("/logs", params={"action": "ORDER_CREATE"}, headers=admin)
    assert res.status_code == 200
    assert res.json()["total"] == 1
    assert client.get("/logs", headers=customer).status_code == 403
