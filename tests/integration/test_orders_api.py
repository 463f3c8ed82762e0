"""
Integration tests for the Orders REST API.

The services behind the endpoints run on the in-memory store with a fixed
clock, so responses are deterministic.
"""


def _place(client, as_user, *items, user="buyer-1"):
    body = {
        "items": [{"product_id": pid, "quantity": qty} for pid, qty in items],
        "shipping_address": {
            "full_name": "Wanjiru Kamau",
            "phone": "+254700000000",
            "address": "12 Moi Avenue",
            "city": "Nairobi",
            "country": "Kenya",
        },
        "payment_method": "mpesa",
    }
    return client.post("/api/v1/orders", json=body, headers=as_user(user))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_order(client, as_user):
    response = _place(client, as_user, ("prod-1", 2))

    assert response.status_code == 201
    data = response.json()
    assert data["order_number"] == "ORD-20240115-001"
    assert data["status"] == "pending"
    assert data["buyer_id"] == "buyer-1"
    assert data["seller_id"] == "seller-1"
    assert data["total_amount"] == "200.00"
    assert data["commission"] == "20.00"
    assert data["seller_earnings"] == "180.00"
    assert data["items"][0]["price_at_purchase"] == "100.00"


def test_missing_identity_is_unauthorized(client):
    response = client.post("/api/v1/orders", json={"items": []})

    assert response.status_code == 401


def test_unknown_role_is_unauthorized(client, as_user):
    response = client.get("/api/v1/orders/buyer", headers=as_user("someone", "superuser"))

    assert response.status_code == 401


def test_empty_items_is_bad_request(client, as_user):
    response = client.post("/api/v1/orders", json={"items": []}, headers=as_user("buyer-1"))

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert response.json()["field"] == "items"


def test_insufficient_stock_reports_quantities(client, as_user):
    response = _place(client, as_user, ("prod-2", 5))

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "insufficient_stock"
    assert body["available"] == 3
    assert body["requested"] == 5


def test_unknown_product_is_not_found(client, as_user):
    response = _place(client, as_user, ("ghost", 1))

    assert response.status_code == 404
    assert response.json()["resource_id"] == ["ghost"]


def test_get_order_visibility(client, as_user):
    order_id = _place(client, as_user, ("prod-1", 1)).json()["id"]

    assert client.get(f"/api/v1/orders/{order_id}", headers=as_user("buyer-1")).status_code == 200
    assert client.get(f"/api/v1/orders/{order_id}", headers=as_user("seller-1", "seller")).status_code == 200
    assert client.get(f"/api/v1/orders/{order_id}", headers=as_user("buyer-2")).status_code == 403
    assert client.get("/api/v1/orders/missing", headers=as_user("buyer-1")).status_code == 404


def test_fulfilment_flow(client, as_user):
    order_id = _place(client, as_user, ("prod-1", 1)).json()["id"]
    seller = as_user("seller-1", "seller")

    confirmed = client.patch(f"/api/v1/orders/{order_id}/confirm", headers=seller)
    assert confirmed.json()["status"] == "confirmed"

    shipped = client.patch(
        f"/api/v1/orders/{order_id}/ship", json={"tracking_number": "TRK-77"}, headers=seller
    )
    assert shipped.status_code == 200
    assert shipped.json()["tracking_number"] == "TRK-77"
    assert shipped.json()["estimated_delivery"].startswith("2024-01-22T10:30:00")

    delivered = client.patch(f"/api/v1/orders/{order_id}/confirm-delivery", headers=as_user("buyer-1"))
    assert delivered.json()["status"] == "delivered"


def test_invalid_transition_is_bad_request(client, as_user):
    order_id = _place(client, as_user, ("prod-1", 1)).json()["id"]

    response = client.patch(
        f"/api/v1/orders/{order_id}/status",
        json={"status": "delivered"},
        headers=as_user("seller-1", "seller"),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_transition"
    assert body["detail"] == "Cannot transition from pending to delivered"


def test_cancel_with_and_without_body(client, as_user):
    first = _place(client, as_user, ("prod-1", 1)).json()["id"]
    second = _place(client, as_user, ("prod-1", 1)).json()["id"]

    with_reason = client.patch(
        f"/api/v1/orders/{first}/cancel", json={"reason": "Found it cheaper"}, headers=as_user("buyer-1")
    )
    without_body = client.patch(f"/api/v1/orders/{second}/cancel", headers=as_user("buyer-1"))

    assert with_reason.json()["cancellation_reason"] == "Found it cheaper"
    assert without_body.json()["cancellation_reason"] == "Cancelled by buyer"


def test_seller_cannot_cancel(client, as_user):
    order_id = _place(client, as_user, ("prod-1", 1)).json()["id"]

    response = client.patch(f"/api/v1/orders/{order_id}/cancel", headers=as_user("seller-1", "seller"))

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_refund_and_payment_are_admin_only(client, as_user):
    order_id = _place(client, as_user, ("prod-1", 1)).json()["id"]
    client.patch(f"/api/v1/orders/{order_id}/cancel", headers=as_user("buyer-1"))

    denied = client.patch(f"/api/v1/orders/{order_id}/refund", headers=as_user("buyer-1"))
    refunded = client.patch(
        f"/api/v1/orders/{order_id}/refund", json={"reason": "Goodwill"}, headers=as_user("admin-1", "admin")
    )

    assert denied.status_code == 403
    assert refunded.status_code == 200
    assert refunded.json()["status"] == "refunded"
    assert refunded.json()["notes"] == "Goodwill"


def test_record_payment(client, as_user):
    order_id = _place(client, as_user, ("prod-1", 1)).json()["id"]

    response = client.post(
        f"/api/v1/orders/{order_id}/payment",
        json={"payment_status": "paid", "transaction_id": "QGH7XYZ"},
        headers=as_user("admin-1", "admin"),
    )

    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"
    assert response.json()["transaction_id"] == "QGH7XYZ"


def test_listings(client, as_user):
    _place(client, as_user, ("prod-1", 1))
    _place(client, as_user, ("prod-2", 1))
    _place(client, as_user, ("prod-9", 2), user="buyer-2")

    buyer_view = client.get("/api/v1/orders/buyer", headers=as_user("buyer-1")).json()
    assert buyer_view["pagination"] == {"page": 1, "limit": 20, "total": 2, "pages": 1}

    seller_view = client.get(
        "/api/v1/orders/seller", params={"limit": 1}, headers=as_user("seller-1", "seller")
    ).json()
    assert len(seller_view["orders"]) == 1
    assert seller_view["pagination"]["pages"] == 2
    assert seller_view["stats"]["total_orders"] == 2

    all_orders = client.get(
        "/api/v1/orders", params={"search": "003"}, headers=as_user("admin-1", "admin")
    ).json()
    assert [o["order_number"] for o in all_orders["orders"]] == ["ORD-20240115-003"]


def test_listing_rejects_bad_paging(client, as_user):
    response = client.get("/api/v1/orders/buyer", params={"limit": 500}, headers=as_user("buyer-1"))

    assert response.status_code == 422


def test_stats(client, as_user):
    _place(client, as_user, ("prod-1", 2))

    denied = client.get("/api/v1/orders/stats", headers=as_user("seller-1", "seller"))
    stats = client.get(
        "/api/v1/orders/stats",
        params={"startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-31T23:59:59Z"},
        headers=as_user("admin-1", "admin"),
    )

    assert denied.status_code == 403
    assert stats.status_code == 200
    body = stats.json()
    assert body["total_orders"] == 1
    assert body["total_revenue"] == "200.00"
    assert body["top_products"][0]["product_id"] == "prod-1"
