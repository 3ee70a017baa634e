"""BDD scenarios for the order payment lifecycle."""

from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/payment_lifecycle.feature")


def _rider(actor_id):
    return {"X-Actor-Id": actor_id, "X-Actor-Role": "delivery"}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the gateway posted a signed notification with status code "{code}"'))
def _(client, order_id, signed_payload, code):
    response = client.post("/payments/webhook", data=signed_payload(order_id, status_code=code, amount="1000.00"))
    assert response.status_code == 200, response.text


@given(parsers.cfparse('"{actor_id}" has delivered the order'))
def _(client, order_id, actor_id):
    for status in ["PROCESSING", "SHIPPED", "OUT_FOR_DELIVERY", "DELIVERED"]:
        response = client.patch(
            f"/delivery/orders/{order_id}/status",
            headers=_rider(actor_id),
            json={"status": status},
        )
        assert response.status_code == 200, response.text


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse('the gateway posts a signed notification with status code "{code}"'),
    target_fixture="response",
)
def _(client, order_id, signed_payload, code):
    return client.post("/payments/webhook", data=signed_payload(order_id, status_code=code, amount="1000.00"))


@when(
    parsers.cfparse('the gateway posts a notification with status code "{code}" and a tampered signature'),
    target_fixture="response",
)
def _(client, order_id, signed_payload, code):
    payload = signed_payload(order_id, status_code=code, amount="1000.00")
    # Signature taken over a failed outcome, replayed with a success code
    payload["md5sig"] = signed_payload(order_id, status_code="-2", amount="1000.00")["md5sig"]
    return client.post("/payments/webhook", data=payload)


@when(parsers.cfparse('"{actor_id}" marks the cash as collected'), target_fixture="response")
def _(client, order_id, actor_id):
    return client.patch(f"/delivery/orders/{order_id}/cod-collected", headers=_rider(actor_id))


@when(parsers.cfparse('"{actor_id}" sets the order status to "{status}"'), target_fixture="response")
def _(client, order_id, actor_id, status):
    return client.patch(
        f"/delivery/orders/{order_id}/status",
        headers=_rider(actor_id),
        json={"status": status},
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the webhook responds {status_code:d} with "{text}"'))
def _(response, status_code, text):
    assert response.status_code == status_code
    assert response.text == text


@then(parsers.cfparse("the webhook responds {status_code:d}"))
def _(response, status_code):
    assert response.status_code == status_code


@then("the request succeeds")
def _(response):
    assert response.status_code == 200, response.text


@then(parsers.cfparse('the request fails with {status_code:d} "{kind}"'))
def _(response, status_code, kind):
    assert response.status_code == status_code
    assert response.json()["error"] == kind
