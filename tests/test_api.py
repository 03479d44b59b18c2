from decimal import Decimal

from kiosk.services.wallet import get_balance, top_up_wallet

from conftest import auth_headers, machine_headers


def test_health_endpoints(client):
    assert client.get("/healthz").json()["status"] == "ok"
    assert client.get("/").json() == {"status": "ok"}


def test_drinks_are_public(client, drinks):
    res = client.get("/api/v1/drinks")
    assert res.status_code == 200
    body = res.json()
    assert {item["id"] for item in body} == {"drink-cola", "drink-water"}
    assert "imageUrl" in body[0]
    assert "inStock" in body[0]

    detail = client.get("/api/v1/drinks/drink-cola")
    assert detail.status_code == 200
    assert Decimal(detail.json()["price"]) == Decimal("150.00")

    missing = client.get("/api/v1/drinks/nope")
    assert missing.status_code == 404
    assert missing.json()["code"] == "ITEM_NOT_FOUND"


def test_order_endpoints_require_bearer_token(client, drinks):
    assert client.post("/api/v1/orders", json={"itemId": "drink-cola", "paymentMethod": "wallet"}).status_code == 401
    assert client.get("/api/v1/orders").status_code == 401
    bad = client.get("/api/v1/wallet/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_wallet_purchase_flow(client, db, drinks):
    top_up_wallet(db, "user-1", "1000.00")
    headers = auth_headers("user-1")

    res = client.post(
        "/api/v1/orders",
        json={"itemId": "drink-cola", "paymentMethod": "wallet"},
        headers=headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert len(body["otp"]) == 4
    assert body["status"] == "pending"
    assert body["itemId"] == "drink-cola"
    assert Decimal(body["amount"]) == Decimal("150.00")

    wallet = client.get("/api/v1/wallet/me", headers=headers).json()
    assert Decimal(wallet["balance"]) == Decimal("850.00")

    # OTP is only ever returned at creation time.
    detail = client.get(f"/api/v1/orders/{body['orderId']}", headers=headers)
    assert detail.status_code == 200
    assert "otp" not in detail.json()

    listing = client.get("/api/v1/orders", headers=headers).json()
    assert [item["orderId"] for item in listing] == [body["orderId"]]

    redeemed = client.post("/api/v1/machine/redeem", json={"otp": body["otp"]}, headers=machine_headers())
    assert redeemed.status_code == 200
    after = client.get(f"/api/v1/orders/{body['orderId']}", headers=headers).json()
    assert after["status"] == "completed"
    assert after["redeemedAt"] is not None


def test_insufficient_funds_returns_400(client, db, drinks):
    top_up_wallet(db, "user-1", "100.00")
    res = client.post(
        "/api/v1/orders",
        json={"itemId": "drink-cola", "paymentMethod": "wallet"},
        headers=auth_headers("user-1"),
    )
    assert res.status_code == 400
    assert res.json() == {"detail": "Insufficient balance", "code": "INSUFFICIENT_FUNDS"}
    assert get_balance(db, "user-1") == Decimal("100.00")


def test_order_belongs_to_its_owner(client, drinks):
    created = client.post(
        "/api/v1/orders",
        json={"itemId": "drink-water", "paymentMethod": "card"},
        headers=auth_headers("user-1"),
    ).json()

    res = client.get(f"/api/v1/orders/{created['orderId']}", headers=auth_headers("user-2"))
    assert res.status_code == 403
    assert client.get("/api/v1/orders/missing", headers=auth_headers("user-1")).status_code == 404


def test_invalid_payment_method_is_validation_error(client, drinks):
    res = client.post(
        "/api/v1/orders",
        json={"itemId": "drink-cola", "paymentMethod": "cash"},
        headers=auth_headers("user-1"),
    )
    assert res.status_code == 422


def test_top_up_and_history(client):
    headers = auth_headers("user-1")
    res = client.post("/api/v1/wallet/top-up", json={"amount": "500.00"}, headers=headers)
    assert res.status_code == 200
    assert Decimal(res.json()["newBalance"]) == Decimal("500.00")

    history = client.get("/api/v1/wallet/transactions", headers=headers).json()
    assert len(history) == 1
    assert history[0]["txType"] == "credit"
    assert Decimal(history[0]["amount"]) == Decimal("500.00")


def test_top_up_rejects_non_positive_amount(client):
    res = client.post("/api/v1/wallet/top-up", json={"amount": "-5"}, headers=auth_headers("user-1"))
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_AMOUNT"


def test_top_up_rejects_malformed_amount(client):
    headers = auth_headers("user-1")
    for body in ({"amount": "abc"}, {"amount": None}, {}, {"amount": [1]}):
        res = client.post("/api/v1/wallet/top-up", json=body, headers=headers)
        assert res.status_code == 400, body
        assert res.json()["code"] == "INVALID_AMOUNT"

    wallet = client.get("/api/v1/wallet/me", headers=headers).json()
    assert Decimal(wallet["balance"]) == Decimal("0.00")


def test_order_rejects_malformed_amount(client, db, drinks):
    top_up_wallet(db, "user-1", "1000.00")
    res = client.post(
        "/api/v1/orders",
        json={"itemId": "drink-cola", "paymentMethod": "wallet", "amount": "abc"},
        headers=auth_headers("user-1"),
    )
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_AMOUNT"
    assert get_balance(db, "user-1") == Decimal("1000.00")


def test_order_accepts_numeric_amount_matching_price(client, db, drinks):
    top_up_wallet(db, "user-1", "1000.00")
    res = client.post(
        "/api/v1/orders",
        json={"itemId": "drink-cola", "paymentMethod": "wallet", "amount": 150},
        headers=auth_headers("user-1"),
    )
    assert res.status_code == 201
