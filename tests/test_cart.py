from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.cart import Cart, CartItem
from app.services.cart_service import CartService


def _headers(user) -> dict:
    return {"user-id": str(user.id)}


def test_add_item_creates_cart_and_line(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)

    response = client.post(
        "/api/v1/cart/add",
        headers=_headers(buyer),
        json={"product_id": product.id},
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["message"] == "Product added to cart successfully"
    assert payload["data"]["cart_item"]["quantity"] == 1

    cart = db_session.query(Cart).filter(Cart.user_id == buyer.id).one()
    assert db_session.query(CartItem).filter(CartItem.cart_id == cart.id).count() == 1


def test_adding_same_product_increments_quantity(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)

    first = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id, "quantity": 2})
    second = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id, "quantity": 3})

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["message"] == "Product quantity updated in cart"
    assert second.json()["data"]["cart_item"]["quantity"] == 5
    assert db_session.query(CartItem).count() == 1
    assert db_session.query(Cart).count() == 1


def test_cannot_add_own_product(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    product = make_product(seller)

    response = client.post("/api/v1/cart/add", headers=_headers(seller), json={"product_id": product.id})

    assert response.status_code == 400
    assert response.json()["error"] == "You cannot add your own product to cart"
    assert db_session.query(CartItem).count() == 0


def test_cannot_add_unavailable_product(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller, status="sold")

    response = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id})

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Product is no longer available"
    assert payload["errors"] == [{"product_title": product.title, "status": "sold"}]


def test_null_status_product_can_be_added(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller, status=None)

    response = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id})

    assert response.status_code == 201


def test_add_missing_product(client: TestClient, make_user):
    buyer = make_user("buyer")

    response = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": 999})

    assert response.status_code == 404


def test_add_rejects_zero_quantity(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)

    response = client.post(
        "/api/v1/cart/add",
        headers=_headers(buyer),
        json={"product_id": product.id, "quantity": 0},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Quantity must be at least 1"


def test_get_or_create_cart_is_idempotent(db_session: Session, make_user):
    buyer = make_user("buyer")

    first = CartService.get_or_create_cart(db_session, buyer.id)
    db_session.commit()
    second = CartService.get_or_create_cart(db_session, buyer.id)

    assert first.id == second.id
    assert db_session.query(Cart).filter(Cart.user_id == buyer.id).count() == 1


def test_get_cart_lists_items_newest_first_with_buckets(
    client: TestClient, db_session: Session, make_user, make_product
):
    seller = make_user("seller")
    buyer = make_user("buyer")
    lamp = make_product(seller, title="Desk Lamp", price=100.0)
    chair = make_product(seller, title="Office Chair", price=50.0)

    client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": lamp.id})
    client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": chair.id, "quantity": 2})

    lamp.status = "sold"
    db_session.commit()

    response = client.get("/api/v1/cart", headers=_headers(buyer))

    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["product"]["title"] for item in data["cart_items"]] == ["Office Chair", "Desk Lamp"]
    assert data["total"] == 2
    assert data["available_count"] == 1
    assert data["unavailable_count"] == 1
    assert data["subtotal"] == 100.0
    assert data["cart_items"][1]["status"] == "sold"
    assert data["cart_items"][0]["product"]["owner"]["username"] == "seller"


def test_get_cart_creates_empty_cart(client: TestClient, db_session: Session, make_user):
    buyer = make_user("buyer")

    response = client.get("/api/v1/cart", headers=_headers(buyer))

    assert response.status_code == 200
    assert response.json()["data"]["cart_items"] == []
    assert db_session.query(Cart).filter(Cart.user_id == buyer.id).count() == 1


def test_remove_item_of_another_user_is_forbidden(
    client: TestClient, db_session: Session, make_user, make_product
):
    seller = make_user("seller")
    buyer = make_user("buyer")
    intruder = make_user("intruder")
    product = make_product(seller)

    added = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id})
    item_id = added.json()["data"]["cart_item"]["id"]

    response = client.delete(f"/api/v1/cart/{item_id}", headers=_headers(intruder))

    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized to remove this cart item"
    assert db_session.query(CartItem).filter(CartItem.id == item_id).count() == 1


def test_remove_item(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)

    added = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id})
    item_id = added.json()["data"]["cart_item"]["id"]

    response = client.delete(f"/api/v1/cart/{item_id}", headers=_headers(buyer))

    assert response.status_code == 200
    assert response.json()["data"]["deleted_item"]["product"]["title"] == product.title
    assert db_session.query(CartItem).filter(CartItem.id == item_id).count() == 0


def test_remove_missing_item(client: TestClient, make_user):
    buyer = make_user("buyer")

    response = client.delete("/api/v1/cart/999", headers=_headers(buyer))

    assert response.status_code == 404
    assert response.json()["error"] == "Cart item not found"


def test_update_item_quantity(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    intruder = make_user("intruder")
    product = make_product(seller)

    added = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id})
    item_id = added.json()["data"]["cart_item"]["id"]

    forbidden = client.put(f"/api/v1/cart/{item_id}", headers=_headers(intruder), json={"quantity": 4})
    assert forbidden.status_code == 403

    response = client.put(f"/api/v1/cart/{item_id}", headers=_headers(buyer), json={"quantity": 4})
    assert response.status_code == 200
    assert response.json()["data"]["cart_item"]["quantity"] == 4


def test_add_rejects_quantity_above_limit(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)

    response = client.post(
        "/api/v1/cart/add",
        headers=_headers(buyer),
        json={"product_id": product.id, "quantity": 10**20},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Quantity cannot exceed 99"
    assert db_session.query(CartItem).count() == 0


def test_repeated_add_cannot_push_line_past_limit(
    client: TestClient, db_session: Session, make_user, make_product
):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)

    first = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id, "quantity": 60})
    second = client.post("/api/v1/cart/add", headers=_headers(buyer), json={"product_id": product.id, "quantity": 60})

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["error"] == "Quantity cannot exceed 99"
    assert db_session.query(CartItem.quantity).scalar() == 60
