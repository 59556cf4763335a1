"""Tests for the payments API and payment totals."""


class TestCreatePayment:
    def test_credit_card_payment(self, client, credit_card):
        resp = client.post("/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": 1200})
        assert resp.status_code == 201, resp.text
        payment = resp.json()["payment"]
        assert payment["reference_id"] == credit_card["id"]
        assert payment["payment_method"] == "bank_transfer"
        assert payment["reference"]["bank_name"] == "HDFC"

    def test_borrowed_payment_updates_record(self, client, borrowed):
        resp = client.post("/payments", json={"type": "borrowed", "reference_id": str(borrowed["id"]), "amount": 300})
        assert resp.status_code == 201
        record = client.get(f"/borrowed-money/{borrowed['id']}").json()["summary"]["borrowedMoney"]
        assert record["repaid_amount"] == 300
        assert record["status"] == "partial"

    def test_reference_must_match_type(self, client, credit_card):
        # A credit card id is not a borrowed record
        resp = client.post("/payments", json={"type": "borrowed", "reference_id": credit_card["id"], "amount": 10})
        assert resp.status_code == 400
        assert resp.json()["field"] == "reference_id"

    def test_reference_of_other_user(self, client, other_client):
        record = other_client.post(
            "/borrowed-money", json={"name": "X", "amount": 100, "type": "lent"}
        ).json()["borrowedMoney"]
        resp = client.post("/payments", json={"type": "borrowed", "reference_id": record["id"], "amount": 10})
        assert resp.status_code == 400
        assert "does not belong to you" in resp.json()["message"]

    def test_malformed_reference(self, client):
        resp = client.post("/payments", json={"type": "credit_card", "reference_id": "abc", "amount": 10})
        assert resp.status_code == 400
        assert resp.json()["value"] == "abc"

    def test_invalid_type(self, client, credit_card):
        resp = client.post("/payments", json={"type": "loan", "reference_id": credit_card["id"], "amount": 10})
        assert resp.status_code == 400
        assert resp.json()["field"] == "type"

    def test_amount_must_be_positive(self, client, credit_card):
        resp = client.post("/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": -1})
        assert resp.status_code == 400
        assert resp.json()["field"] == "amount"


class TestPaymentCrud:
    def test_get_update_delete(self, client, credit_card):
        payment = client.post(
            "/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": 100}
        ).json()["payment"]

        assert client.get(f"/payments/{payment['id']}").json()["payment"]["amount"] == 100

        resp = client.put(f"/payments/{payment['id']}", json={"amount": 150, "payment_method": "upi"})
        assert resp.status_code == 200
        assert resp.json()["payment"]["amount"] == 150
        assert resp.json()["payment"]["payment_method"] == "upi"

        assert client.delete(f"/payments/{payment['id']}").status_code == 200
        assert client.get(f"/payments/{payment['id']}").status_code == 404

    def test_other_user_cannot_modify(self, client, other_client, credit_card):
        payment = client.post(
            "/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": 100}
        ).json()["payment"]
        assert other_client.put(f"/payments/{payment['id']}", json={"amount": 1}).status_code == 404
        assert other_client.delete(f"/payments/{payment['id']}").status_code == 404

    def test_list_filters_and_paging(self, client, credit_card, borrowed):
        for amount, day in ((100, "2026-01-01"), (200, "2026-02-01"), (300, "2026-03-01")):
            client.post("/payments", json={
                "type": "credit_card", "reference_id": credit_card["id"], "amount": amount, "payment_date": day,
            })
        client.post("/payments", json={"type": "borrowed", "reference_id": borrowed["id"], "amount": 50,
                                       "payment_date": "2026-02-15"})

        body = client.get("/payments").json()
        assert body["total"] == 4
        assert body["payments"][0]["payment_date"] == "2026-03-01"

        body = client.get("/payments", params={"type": "credit_card", "limit": 2}).json()
        assert body["total"] == 3
        assert body["totalPages"] == 2
        assert len(body["payments"]) == 2

        body = client.get("/payments", params={"start_date": "2026-02-01", "end_date": "2026-02-28"}).json()
        assert body["total"] == 2

        body = client.get("/payments", params={"min_amount": 150, "sort_by": "amount", "sort_order": "asc"}).json()
        assert [p["amount"] for p in body["payments"]] == [200, 300]


class TestPaymentTotals:
    def test_missing_type_defaults_to_zero(self, client, credit_card):
        client.post("/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": 400})
        client.post("/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": 100})
        totals = client.get("/payments/summary/totals").json()["totals"]
        assert totals["credit_card"] == {"amount": 500, "count": 2}
        assert totals["borrowed"] == {"amount": 0, "count": 0}

    def test_date_range(self, client, credit_card):
        client.post("/payments", json={"type": "credit_card", "reference_id": credit_card["id"], "amount": 400,
                                       "payment_date": "2025-12-31"})
        totals = client.get("/payments/summary/totals", params={"start_date": "2026-01-01"}).json()["totals"]
        assert totals["credit_card"] == {"amount": 0, "count": 0}
