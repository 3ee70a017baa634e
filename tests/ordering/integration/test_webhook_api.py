"""Integration tests for the gateway notification endpoint."""

from ordering.ledger.payment_record import PaymentRecord
from ordering.order.order import Order
from protean import current_domain


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestFormEncodedNotification:
    def test_success_acknowledged_with_ok(self, client, checkout, signed_payload):
        order_id = checkout()["order_id"]

        response = client.post("/payments/webhook", data=signed_payload(order_id, status_code="2"))

        assert response.status_code == 200
        assert response.text == "OK"
        order = _order(order_id)
        assert order.payment_status == "PAID"
        assert order.order_status == "CONFIRMED"

    def test_redelivery_is_acknowledged_and_idempotent(self, client, checkout, signed_payload):
        order_id = checkout()["order_id"]
        payload = signed_payload(order_id, status_code="2")

        first = client.post("/payments/webhook", data=payload)
        second = client.post("/payments/webhook", data=payload)

        assert first.text == second.text == "OK"
        assert len(_order(order_id).history) == 2
        assert len(current_domain.repository_for(PaymentRecord)._dao.query.all().items) == 1

    def test_failure_cancels_order(self, client, checkout, signed_payload):
        order_id = checkout()["order_id"]
        response = client.post("/payments/webhook", data=signed_payload(order_id, status_code="-2"))

        assert response.text == "OK"
        assert _order(order_id).order_status == "CANCELLED"


class TestJsonNotification:
    def test_json_body_is_accepted(self, client, checkout, signed_payload):
        order_id = checkout()["order_id"]
        payload = signed_payload(order_id, status_code="2")
        body = {
            "merchant_id": payload["merchant_id"],
            "order_id": order_id,
            "payment_id": payload["payment_id"],
            "amount": payload["payhere_amount"],
            "currency": payload["payhere_currency"],
            "status_code": "2",
            "signature": payload["md5sig"],
            "method": "VISA",
            "message": "ok",
        }

        response = client.post("/payments/webhook", json=body)

        assert response.status_code == 200
        assert response.text == "OK"
        assert _order(order_id).payment_status == "PAID"


class TestRejectedNotification:
    def test_tampered_amount(self, client, checkout, signed_payload):
        order_id = checkout()["order_id"]
        payload = signed_payload(order_id, status_code="2")
        payload["payhere_amount"] = "1.00"

        response = client.post("/payments/webhook", data=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "authentication_failure"
        assert _order(order_id).payment_status == "PENDING"

    def test_missing_signature(self, client, checkout, signed_payload):
        order_id = checkout()["order_id"]
        payload = signed_payload(order_id, status_code="2")
        del payload["md5sig"]

        response = client.post("/payments/webhook", data=payload)
        assert response.status_code == 400

    def test_unknown_order(self, client, signed_payload):
        payload = signed_payload("6f1c2a9e-0000-4000-8000-000000000000", status_code="2")

        response = client.post("/payments/webhook", data=payload)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert response.text != "OK"
