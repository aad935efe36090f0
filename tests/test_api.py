import pytest
from fastapi import status


def _create_product(client, **overrides):
    payload = {
        "code": "BRG001",
        "name": "Beras Premium 5kg",
        "category": "Sembako",
        "cost_price": 65000,
        "sell_price": 75000,
        "stock_quantity": 50,
        "unit": "karung"
    }
    payload.update(overrides)
    response = client.post("/products", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def _create_member(client, name="Ahmad Hidayat"):
    response = client.post("/members", json={"name": name, "phone": "081234567890"})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def _sell(client, product, quantity=1, **sale):
    payload = {
        "line_items": [{
            "product_id": product["id"],
            "product_name": product["name"],
            "code": product["code"],
            "quantity": quantity,
            "cost_price": product["cost_price"],
            "sell_price": product["sell_price"]
        }],
        "payment_method": "CASH"
    }
    payload.update(sale)
    return client.post("/transactions", json=payload)


def test_root_endpoint(test_client):
    response = test_client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert "Welcome" in response.json()["message"]


def test_product_endpoints(test_client):
    product = _create_product(test_client)
    _create_product(test_client, code="BRG014", name="Shampo Sunsachet", sell_price=3000, stock_quantity=3)

    response = test_client.get("/products", params={"low_stock": True})
    assert response.status_code == status.HTTP_200_OK
    assert [p["code"] for p in response.json()] == ["BRG014"]

    response = test_client.patch(f"/products/{product['id']}", json={"sell_price": 76000})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["sell_price"] == 76000

    response = test_client.delete(f"/products/{product['id']}")
    assert response.json() == {"success": True}

    response = test_client.get(f"/products/{product['id']}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"]["kind"] == "not_found"


def test_create_product_validation(test_client):
    response = test_client.post("/products", json={"code": "BRG001", "name": "Beras", "sell_price": -1})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    detail = response.json()["detail"]
    assert detail["kind"] == "invalid_input"
    assert "sell_price" in detail["message"]


def test_member_endpoints(test_client):
    member = _create_member(test_client)
    assert member["status"] == "active"

    response = test_client.get("/members", params={"search": "hidayat"})
    assert [m["id"] for m in response.json()] == [member["id"]]

    response = test_client.patch(f"/members/{member['id']}", json={"status": "inactive"})
    assert response.json()["status"] == "inactive"

    response = test_client.get("/members", params={"status": "active"})
    assert response.json() == []

    response = test_client.get("/members/not-an-id")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_cash_sale_endpoint(test_client):
    product = _create_product(test_client, code="BRG003", name="Gula Pasir 1kg", sell_price=15000, stock_quantity=40)

    response = _sell(test_client, product, quantity=2, amount_tendered=50000)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["total"] == 30000
    assert data["change_given"] == 20000
    assert data["line_items"][0]["subtotal"] == 30000

    response = test_client.get(f"/transactions/{data['id']}")
    assert response.json()["transaction_number"] == data["transaction_number"]

    stock = test_client.get(f"/products/{product['id']}").json()["stock_quantity"]
    assert stock == 38

    assert test_client.get("/debts").json() == []


def test_short_cash_payment_rejected(test_client):
    product = _create_product(test_client)

    response = _sell(test_client, product, amount_tendered=1000)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["kind"] == "invalid_input"
    assert test_client.get("/transactions").json() == []


def test_credit_sale_requires_member(test_client):
    product = _create_product(test_client)

    response = _sell(test_client, product, payment_method="CREDIT")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    detail = response.json()["detail"]
    assert detail["kind"] == "invalid_input"
    assert detail["message"]


def test_credit_sale_and_payments_flow(test_client):
    product = _create_product(test_client)
    member = _create_member(test_client)

    response = _sell(test_client, product, payment_method="CREDIT", member_id=member["id"])
    assert response.status_code == status.HTTP_201_CREATED
    transaction = response.json()
    assert transaction["member_name"] == "Ahmad Hidayat"

    debts = test_client.get("/debts", params={"member_id": member["id"]}).json()
    assert len(debts) == 1
    debt = debts[0]
    assert debt["transaction_id"] == transaction["id"]
    assert debt["remaining_amount"] == 75000
    assert debt["status"] == "unpaid"

    response = test_client.post(f"/debts/{debt['id']}/payments", json={"amount": 30000})
    assert response.status_code == status.HTTP_201_CREATED
    result = response.json()
    assert result["payment"]["amount_paid"] == 30000
    assert result["debt"]["remaining_amount"] == 45000
    assert result["debt"]["status"] == "unpaid"

    response = test_client.post(f"/debts/{debt['id']}/payments", json={"amount": 45000})
    assert response.json()["debt"]["status"] == "paid"

    response = test_client.post(f"/debts/{debt['id']}/payments", json={"amount": 1})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["kind"] == "over_payment"

    payments = test_client.get("/debt-payments", params={"debt_id": debt["id"]}).json()
    assert sorted(p["amount_paid"] for p in payments) == [30000, 45000]

    summary = test_client.get("/debts/summary").json()
    assert summary == [{
        "member_id": member["id"],
        "member_name": "Ahmad Hidayat",
        "debt_count": 1,
        "total_original": 75000,
        "total_paid": 75000,
        "total_remaining": 0,
        "status": "paid"
    }]


def test_payment_amount_must_be_positive(test_client):
    product = _create_product(test_client)
    member = _create_member(test_client)
    _sell(test_client, product, payment_method="CREDIT", member_id=member["id"])
    debt = test_client.get("/debts").json()[0]

    response = test_client.post(f"/debts/{debt['id']}/payments", json={"amount": 0})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["kind"] == "invalid_input"


@pytest.mark.parametrize("amount", [10.5, "abc", None])
def test_malformed_payment_amount_rejected(test_client, amount):
    product = _create_product(test_client)
    member = _create_member(test_client)
    _sell(test_client, product, payment_method="CREDIT", member_id=member["id"])
    debt = test_client.get("/debts").json()[0]

    response = test_client.post(f"/debts/{debt['id']}/payments", json={"amount": amount})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    detail = response.json()["detail"]
    assert detail["kind"] == "invalid_input"
    assert "amount" in detail["message"]
    assert test_client.get("/debt-payments").json() == []
    assert test_client.get(f"/debts/{debt['id']}").json()["remaining_amount"] == 75000


def test_zero_total_credit_sale_rejected(test_client):
    product = _create_product(test_client, code="BRG099", name="Sampel Gratis", sell_price=0)
    member = _create_member(test_client)

    response = _sell(test_client, product, payment_method="CREDIT", member_id=member["id"])

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["kind"] == "invalid_input"
    assert test_client.get("/debts").json() == []


def test_payment_unknown_debt(test_client):
    response = test_client.post("/debts/507f1f77bcf86cd799439011/payments", json={"amount": 1000})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"]["kind"] == "not_found"


def test_debt_patch_sets_due_date_only(test_client):
    product = _create_product(test_client)
    member = _create_member(test_client)
    _sell(test_client, product, payment_method="CREDIT", member_id=member["id"])
    debt = test_client.get("/debts").json()[0]

    response = test_client.patch(
        f"/debts/{debt['id']}",
        json={"due_date": "2030-01-31T00:00:00", "remaining_amount": 0, "status": "paid"}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["due_date"].startswith("2030-01-31")
    assert data["remaining_amount"] == 75000
    assert data["status"] == "unpaid"


def test_dashboard_and_reports(test_client):
    product = _create_product(test_client)
    member = _create_member(test_client)
    _sell(test_client, product, amount_tendered=100000)
    _sell(test_client, product, payment_method="CREDIT", member_id=member["id"])

    dashboard = test_client.get("/dashboard").json()
    assert dashboard["total_sales_today"] == 150000
    assert dashboard["transactions_today"] == 2
    assert dashboard["active_members"] == 1
    assert dashboard["total_products"] == 1
    assert dashboard["total_receivables"] == 75000
    assert dashboard["low_stock_products"] == 0

    [day] = test_client.get("/reports/daily-sales").json()
    assert day["transaction_count"] == 2
    assert day["total_cash"] == 75000
    assert day["total_credit"] == 75000

    [purchases] = test_client.get("/reports/member-purchases").json()
    assert purchases["member_id"] == member["id"]
    assert purchases["total_credit"] == 75000

    [debts] = test_client.get("/reports/debts").json()
    assert debts["total_remaining"] == 75000
    assert debts["status"] == "unpaid"


def test_transaction_list_date_filter(test_client):
    product = _create_product(test_client)
    _sell(test_client, product)

    response = test_client.get("/transactions", params={"start_date": "2000-01-01", "end_date": "2000-01-31"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []
    assert len(test_client.get("/transactions", params={"payment_method": "CASH"}).json()) == 1


def test_seed_only_once(test_client):
    response = test_client.post("/seed")
    assert response.json()["success"] is True

    assert len(test_client.get("/members", params={"status": "all"}).json()) == 5
    assert len(test_client.get("/products").json()) == 15

    response = test_client.post("/seed")
    assert response.json()["success"] is False
