"""Integration tests for GET /orders/{id}."""

CUSTOMER = {"X-Actor-Id": "cust-001", "X-Actor-Role": "customer"}
OTHER_CUSTOMER = {"X-Actor-Id": "cust-002", "X-Actor-Role": "customer"}
RIDER = {"X-Actor-Id": "rider-001", "X-Actor-Role": "delivery"}
ADMIN = {"X-Actor-Id": "admin-001", "X-Actor-Role": "admin"}


class TestReadOrder:
    def test_owner_reads_order(self, client, checkout):
        order_id = checkout()["order_id"]

        response = client.get(f"/orders/{order_id}", headers=CUSTOMER)

        assert response.status_code == 200
        body = response.json()
        assert body["order_id"] == order_id
        assert body["total_amount"] == 2500.0
        assert body["items"][0]["title"] == "Ceylon Tea Caddy"
        assert body["address"]["city"] == "Colombo"
        assert [c["status"] for c in body["status_history"]] == ["PENDING"]

    def test_other_customer_is_forbidden(self, client, checkout):
        order_id = checkout()["order_id"]
        assert client.get(f"/orders/{order_id}", headers=OTHER_CUSTOMER).status_code == 403

    def test_unassigned_rider_is_forbidden(self, client, checkout):
        order_id = checkout()["order_id"]
        assert client.get(f"/orders/{order_id}", headers=RIDER).status_code == 403

    def test_assigned_rider_reads_order(self, client, checkout):
        order_id = checkout()["order_id"]
        client.post(f"/admin/orders/{order_id}/assign", headers=ADMIN, json={"delivery_actor_id": "rider-001"})
        assert client.get(f"/orders/{order_id}", headers=RIDER).status_code == 200

    def test_admin_reads_any_order(self, client, checkout):
        order_id = checkout()["order_id"]
        assert client.get(f"/orders/{order_id}", headers=ADMIN).status_code == 200

    def test_unknown_order(self, client):
        response = client.get("/orders/6f1c2a9e-0000-4000-8000-000000000000", headers=ADMIN)
        assert response.status_code == 404
