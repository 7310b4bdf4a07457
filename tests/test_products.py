from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.cart import Cart, CartItem
from app.models.product import Product, ProductImage
from app.models.purchase import PreviousPurchase


def _headers(user) -> dict:
    return {"user-id": str(user.id)}


def _listing_payload(**overrides) -> dict:
    payload = {
        "title": "Road Bike",
        "description": "Lightweight aluminium road bike, recently serviced.",
        "category": "Sports",
        "price": 250.0,
        "images": [
            "https://img.example.com/bike-front.jpg",
            "https://img.example.com/bike-side.jpg",
        ],
    }
    payload.update(overrides)
    return payload


def test_create_product_sets_owner_status_and_main_image(client: TestClient, db_session: Session, make_user):
    seller = make_user("seller")

    response = client.post("/api/v1/products", headers=_headers(seller), json=_listing_payload())

    assert response.status_code == 201
    product = response.json()["data"]["product"]
    assert product["status"] == "available"
    assert product["owner"]["username"] == "seller"
    assert product["location"] == seller.address
    assert product["images"] == [
        "https://img.example.com/bike-front.jpg",
        "https://img.example.com/bike-side.jpg",
    ]

    images = (
        db_session.query(ProductImage)
        .filter(ProductImage.product_id == product["id"])
        .order_by(ProductImage.id)
        .all()
    )
    assert [image.is_main for image in images] == [True, False]


def test_create_product_requires_identity(client: TestClient):
    response = client.post("/api/v1/products", json=_listing_payload())

    assert response.status_code == 401
    assert response.json()["error"] == "User not authenticated"


def test_create_product_rejects_unknown_user(client: TestClient):
    response = client.post("/api/v1/products", headers={"user-id": "999"}, json=_listing_payload())

    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_create_product_rejects_non_numeric_identity(client: TestClient):
    response = client.post("/api/v1/products", headers={"user-id": "abc"}, json=_listing_payload())

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid user identifier"


def test_create_product_validation_errors(client: TestClient, make_user):
    seller = make_user("seller")

    cases = [
        (_listing_payload(title="ab"), "Title must be between 3 and 100 characters"),
        (_listing_payload(description="short"), "Description must be between 10 and 1000 characters"),
        (_listing_payload(price=0), "Price must be between $0.01 and $10,000"),
        (_listing_payload(price=20000), "Price must be between $0.01 and $10,000"),
        (_listing_payload(images=[]), "At least one image is required"),
        (
            _listing_payload(images=[f"https://img.example.com/{i}.jpg" for i in range(6)]),
            "Maximum 5 images allowed",
        ),
    ]
    for payload, message in cases:
        response = client.post("/api/v1/products", headers=_headers(seller), json=payload)
        assert response.status_code == 400, payload
        assert response.json()["error"] == message


def test_create_product_missing_field_is_bad_request(client: TestClient, make_user):
    seller = make_user("seller")
    payload = _listing_payload()
    del payload["category"]

    response = client.post("/api/v1/products", headers=_headers(seller), json=payload)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_product_strips_markup(client: TestClient, make_user):
    seller = make_user("seller")

    response = client.post(
        "/api/v1/products",
        headers=_headers(seller),
        json=_listing_payload(title="<b>Road Bike</b>"),
    )

    assert response.status_code == 201
    assert response.json()["data"]["product"]["title"] == "Road Bike"


def test_list_products_search_category_and_pagination(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    make_product(seller, title="Oak Bookshelf", category="Furniture")
    make_product(seller, title="Camping Stove", category="Outdoors")
    make_product(seller, title="Pine Bookshelf", category="Furniture")

    response = client.get("/api/v1/products", params={"category": "Furniture"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert {p["title"] for p in data["products"]} == {"Oak Bookshelf", "Pine Bookshelf"}
    assert data["pagination"]["total"] == 2

    response = client.get("/api/v1/products", params={"search": "stove"})
    titles = [p["title"] for p in response.json()["data"]["products"]]
    assert titles == ["Camping Stove"]

    response = client.get("/api/v1/products", params={"search": "outdoors"})
    assert [p["title"] for p in response.json()["data"]["products"]] == ["Camping Stove"]

    response = client.get("/api/v1/products", params={"page": 2, "limit": 2})
    data = response.json()["data"]
    assert len(data["products"]) == 1
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_list_products_newest_first(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    first = make_product(seller, title="First Listing")
    second = make_product(seller, title="Second Listing")

    response = client.get("/api/v1/products")

    ids = [p["id"] for p in response.json()["data"]["products"]]
    assert ids == [second.id, first.id]


def test_product_detail_reads_null_status_as_available(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    product = make_product(seller, status=None)

    response = client.get(f"/api/v1/products/{product.id}")

    assert response.status_code == 200
    data = response.json()["data"]["product"]
    assert data["status"] == "available"
    assert data["owner"]["id"] == seller.id
    assert len(data["images"]) == 1


def test_product_detail_not_found(client: TestClient):
    response = client.get("/api/v1/products/12345")

    assert response.status_code == 404
    assert response.json()["error"] == "Product not found"


def test_my_listings_only_returns_callers_products(client: TestClient, make_user, make_product):
    seller = make_user("seller")
    other = make_user("other")
    mine = make_product(seller, title="Mine")
    make_product(other, title="Theirs")

    response = client.get("/api/v1/products/my-listings", headers=_headers(seller))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["products"][0]["id"] == mine.id


def test_delete_product_owner_only(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    stranger = make_user("stranger")
    product = make_product(seller)
    product_id = product.id

    forbidden = client.delete(f"/api/v1/products/{product_id}", headers=_headers(stranger))
    assert forbidden.status_code == 403
    assert db_session.query(Product).filter(Product.id == product_id).count() == 1

    response = client.delete(f"/api/v1/products/{product_id}", headers=_headers(seller))
    assert response.status_code == 200
    assert response.json()["data"]["deleted_product"] == {"id": product_id, "title": "Vintage Desk Lamp"}
    assert db_session.query(Product).filter(Product.id == product_id).count() == 0
    assert db_session.query(ProductImage).filter(ProductImage.product_id == product_id).count() == 0


def test_delete_product_removes_it_from_carts(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller)
    product_id = product.id

    cart = Cart(user_id=buyer.id)
    db_session.add(cart)
    db_session.flush()
    db_session.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=1))
    db_session.commit()

    response = client.delete(f"/api/v1/products/{product_id}", headers=_headers(seller))

    assert response.status_code == 200
    assert db_session.query(CartItem).filter(CartItem.product_id == product_id).count() == 0


def test_delete_purchased_product_is_refused(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    buyer = make_user("buyer")
    product = make_product(seller, status="sold")
    db_session.add(PreviousPurchase(user_id=buyer.id, product_id=product.id))
    db_session.commit()

    response = client.delete(f"/api/v1/products/{product.id}", headers=_headers(seller))

    assert response.status_code == 409
    assert db_session.query(Product).filter(Product.id == product.id).count() == 1


def test_delete_product_via_legacy_path(client: TestClient, db_session: Session, make_user, make_product):
    seller = make_user("seller")
    product_id = make_product(seller).id

    response = client.delete(f"/api/v1/products/{product_id}/delete", headers=_headers(seller))

    assert response.status_code == 200
    assert db_session.query(Product).filter(Product.id == product_id).count() == 0


def test_ampersand_category_is_stored_plain_and_filterable(client: TestClient, make_user):
    seller = make_user("seller")

    created = client.post(
        "/api/v1/products",
        headers=_headers(seller),
        json=_listing_payload(category="Home & Garden"),
    )
    assert created.status_code == 201
    assert created.json()["data"]["product"]["category"] == "Home & Garden"

    response = client.get("/api/v1/products", params={"category": "Home & Garden"})

    data = response.json()["data"]
    assert data["pagination"]["total"] == 1
    assert data["products"][0]["id"] == created.json()["data"]["product"]["id"]


def test_title_with_ampersand_counts_one_character(client: TestClient, make_user):
    seller = make_user("seller")
    title = "A" * 98 + " &"

    response = client.post("/api/v1/products", headers=_headers(seller), json=_listing_payload(title=title))

    assert response.status_code == 201
    assert response.json()["data"]["product"]["title"] == title
