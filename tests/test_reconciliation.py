"""Tests for the repaid-amount/status reconciliation of borrowed/lent records."""

import pytest

from finance_tracker import reconciliation
from finance_tracker.errors import ConflictError
from finance_tracker.models import BorrowedMoney


def make_record(amount=1000.0, repaid=0.0):
    return BorrowedMoney(amount=amount, repaid_amount=repaid, status="pending", type="borrowed", name="Ravi")


class TestDeriveStatus:
    """Status is a pure function of repaid amount vs principal."""

    @pytest.mark.parametrize(
        "repaid, expected",
        [(0, "pending"), (0.01, "partial"), (999.99, "partial"), (1000, "repaid"), (1500, "repaid")],
    )
    def test_status_from_repaid(self, repaid, expected):
        assert reconciliation.derive_status(repaid, 1000) == expected

    def test_clamp_keeps_repaid_within_principal(self):
        assert reconciliation.clamp_repaid(-5, 100) == 0
        assert reconciliation.clamp_repaid(50, 100) == 50
        assert reconciliation.clamp_repaid(150, 100) == 100


class TestIncremental:
    def test_partial_then_full(self):
        record = make_record()
        reconciliation.apply_incremental(record, 400)
        assert record.repaid_amount == 400
        assert record.status == "partial"

        reconciliation.apply_incremental(record, 600)
        assert record.repaid_amount == 1000
        assert record.status == "repaid"

    def test_overpayment_is_clamped(self):
        record = make_record(amount=300, repaid=200)
        reconciliation.apply_incremental(record, 500)
        assert record.repaid_amount == 300
        assert record.status == "repaid"
        assert record.remaining_amount == 0


class TestRepaymentGuard:
    def test_rejects_more_than_remaining_without_mutation(self):
        record = make_record(repaid=400)
        with pytest.raises(ConflictError) as exc_info:
            reconciliation.check_repayment(record, 700)
        assert exc_info.value.extra["remaining_amount"] == 600
        assert record.repaid_amount == 400

    def test_accepts_exact_remaining(self):
        record = make_record(repaid=400)
        reconciliation.check_repayment(record, 600)

    def test_cents_settle_exactly(self):
        record = make_record(amount=0.3)
        reconciliation.apply_incremental(record, 0.1)
        assert record.remaining_amount == 0.2

        reconciliation.check_repayment(record, 0.2)
        reconciliation.apply_incremental(record, 0.2)
        assert record.repaid_amount == 0.3
        assert record.remaining_amount == 0
        assert record.status == "repaid"


class TestRepayScenario:
    """principal=1000: repay 400, try 700, repay 600."""

    def test_repay_flow(self, client, borrowed):
        url = f"/borrowed-money/{borrowed['id']}/repay"

        resp = client.post(url, json={"amount": 400, "payment_date": "2026-01-10"})
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["borrowedMoney"]["repaid_amount"] == 400
        assert body["borrowedMoney"]["status"] == "partial"
        assert body["remaining_amount"] == 600
        assert body["payment"]["payment_method"] == "cash"
        assert body["payment"]["note"] == "Repayment for Ravi"

        resp = client.post(url, json={"amount": 700, "payment_date": "2026-01-11"})
        assert resp.status_code == 400
        assert resp.json()["remaining_amount"] == 600

        record = client.get(f"/borrowed-money/{borrowed['id']}").json()["summary"]
        assert record["borrowedMoney"]["repaid_amount"] == 400
        assert record["payment_count"] == 1

        resp = client.post(url, json={"amount": 600, "payment_date": "2026-01-12", "payment_method": "upi"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["borrowedMoney"]["repaid_amount"] == 1000
        assert body["borrowedMoney"]["status"] == "repaid"
        assert body["remaining_amount"] == 0

    def test_repay_balance_with_cents(self, client):
        record = client.post(
            "/borrowed-money", json={"name": "Meera", "amount": 0.3, "type": "lent"}
        ).json()["borrowedMoney"]
        url = f"/borrowed-money/{record['id']}/repay"

        body = client.post(url, json={"amount": 0.1, "payment_date": "2026-01-10"}).json()
        assert body["remaining_amount"] == 0.2

        resp = client.post(url, json={"amount": 0.2, "payment_date": "2026-01-11"})
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["borrowedMoney"]["status"] == "repaid"
        assert body["borrowedMoney"]["repaid_amount"] == 0.3
        assert body["remaining_amount"] == 0

        resp = client.post(url, json={"amount": 0.01, "payment_date": "2026-01-12"})
        assert resp.status_code == 400
        assert resp.json()["remaining_amount"] == 0

    def test_repay_requires_payment_date(self, client, borrowed):
        resp = client.post(f"/borrowed-money/{borrowed['id']}/repay", json={"amount": 10})
        assert resp.status_code == 400
        assert resp.json()["field"] == "payment_date"

    def test_repay_rejects_non_positive_amount(self, client, borrowed):
        resp = client.post(
            f"/borrowed-money/{borrowed['id']}/repay", json={"amount": 0, "payment_date": "2026-01-10"}
        )
        assert resp.status_code == 400
        assert resp.json()["field"] == "amount"

    def test_repay_unknown_record_is_404(self, client):
        resp = client.post("/borrowed-money/9999/repay", json={"amount": 10, "payment_date": "2026-01-10"})
        assert resp.status_code == 404


class TestRecomputeFromPayments:
    def _pay(self, client, borrowed_id, amount):
        resp = client.post(
            "/payments",
            json={"type": "borrowed", "reference_id": borrowed_id, "amount": amount, "payment_date": "2026-02-01"},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["payment"]

    def _record(self, client, borrowed_id):
        return client.get(f"/borrowed-money/{borrowed_id}").json()["summary"]["borrowedMoney"]

    def test_payment_create_is_incremental(self, client, borrowed):
        self._pay(client, borrowed["id"], 250)
        self._pay(client, borrowed["id"], 250)
        record = self._record(client, borrowed["id"])
        assert record["repaid_amount"] == 500
        assert record["status"] == "partial"

    def test_payment_update_recomputes(self, client, borrowed):
        first = self._pay(client, borrowed["id"], 300)
        self._pay(client, borrowed["id"], 200)

        resp = client.put(f"/payments/{first['id']}", json={"amount": 100})
        assert resp.status_code == 200
        record = self._record(client, borrowed["id"])
        assert record["repaid_amount"] == 300
        assert record["status"] == "partial"

    def test_update_to_overpay_is_clamped(self, client, borrowed):
        payment = self._pay(client, borrowed["id"], 300)
        client.put(f"/payments/{payment['id']}", json={"amount": 5000})
        record = self._record(client, borrowed["id"])
        assert record["repaid_amount"] == 1000
        assert record["status"] == "repaid"

    def test_deleting_all_payments_resets_to_pending(self, client, borrowed):
        first = self._pay(client, borrowed["id"], 400)
        second = self._pay(client, borrowed["id"], 600)
        assert self._record(client, borrowed["id"])["status"] == "repaid"

        assert client.delete(f"/payments/{first['id']}").status_code == 200
        record = self._record(client, borrowed["id"])
        assert record["repaid_amount"] == 600
        assert record["status"] == "partial"

        assert client.delete(f"/payments/{second['id']}").status_code == 200
        record = self._record(client, borrowed["id"])
        assert record["repaid_amount"] == 0
        assert record["status"] == "pending"

    def test_lowering_principal_reclamps(self, client, borrowed):
        self._pay(client, borrowed["id"], 600)
        resp = client.put(f"/borrowed-money/{borrowed['id']}", json={"amount": 500})
        assert resp.status_code == 200
        record = resp.json()["borrowedMoney"]
        assert record["repaid_amount"] == 500
        assert record["status"] == "repaid"

        # Raising it again restores the real payment total
        record = client.put(f"/borrowed-money/{borrowed['id']}", json={"amount": 2000}).json()["borrowedMoney"]
        assert record["repaid_amount"] == 600
        assert record["status"] == "partial"
        assert record["remaining_amount"] == 1400
