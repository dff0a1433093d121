"""
Tests for the httpx-backed gateways, using httpx.MockTransport so no network is touched.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from orderflow.application.exceptions import StateConflict, TransientFailure
from orderflow.infrastructure.auth.static_credentials import StaticCredentialProvider
from orderflow.infrastructure.http.api_client import ApiClient
from orderflow.infrastructure.http.booking_gateway import HttpBookingGateway
from orderflow.infrastructure.http.cart_gateway import HttpCartGateway
from orderflow.infrastructure.http.delivery_source import HttpDeliverySource
from orderflow.infrastructure.http.offer_catalog import HttpOfferCatalog


def _api(handler, token: str | None = "tok-123") -> ApiClient:
    return ApiClient(
        base_url="https://api.test/api",
        credentials=StaticCredentialProvider(token),
        transport=httpx.MockTransport(handler),
    )


class Recorder:
    """Collects requests and answers each with the same JSON body."""

    def __init__(self, body, status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


@pytest.mark.asyncio
async def test_rejection_payload_and_auth_header():
    recorder = Recorder(
        {"success": True, "data": {"_id": "b1", "status": "rejected", "rejectionReason": "Fully booked"}}
    )
    gateway = HttpBookingGateway(_api(recorder))

    booking = await gateway.update_status("b1", "rejected", rejection_reason="Fully booked")

    request = recorder.requests[0]
    assert request.method == "PATCH"
    assert request.url.path == "/api/booking/b1/status"
    assert request.headers["Authorization"] == "Bearer tok-123"
    assert json.loads(request.content) == {"status": "rejected", "rejectionReason": "Fully booked"}
    assert booking.id == "b1"
    assert booking.rejection_reason == "Fully booked"


@pytest.mark.asyncio
async def test_no_auth_header_without_token():
    recorder = Recorder({"success": True, "data": None})
    gateway = HttpBookingGateway(_api(recorder, token=None))

    assert await gateway.update_status("b1", "completed") is None
    assert "Authorization" not in recorder.requests[0].headers


@pytest.mark.asyncio
async def test_booking_parses_otp_fields_and_services():
    recorder = Recorder(
        {
            "success": True,
            "data": {
                "_id": "b9",
                "status": "confirmed",
                "serviceOtp": "482913",
                "otpGeneratedAt": "2026-05-10T09:00:00Z",
                "professionalId": {"_id": "p1", "name": "Asha"},
                "services": [{"serviceId": "s1"}, {"serviceId": "s2"}],
            },
        }
    )
    gateway = HttpBookingGateway(_api(recorder))

    booking = await gateway.get_booking("b9")

    assert booking.service_otp == "482913"
    assert booking.otp_generated_at == datetime(2026, 5, 10, 9, 0, tzinfo=timezone.utc)
    assert booking.professional_id == "p1"
    assert booking.service_count == 2


@pytest.mark.asyncio
async def test_unsuccessful_envelope_raises_conflict_with_server_message():
    recorder = Recorder({"success": False, "message": "Booking cannot be cancelled"}, status_code=400)
    gateway = HttpBookingGateway(_api(recorder))

    with pytest.raises(StateConflict) as excinfo:
        await gateway.cancel("b1")
    assert excinfo.value.message == "Booking cannot be cancelled"
    assert recorder.requests[0].url.path == "/api/booking/b1/cancel"


@pytest.mark.asyncio
async def test_server_error_is_transient():
    gateway = HttpDeliverySource(_api(Recorder({"success": False}, status_code=503)))

    with pytest.raises(TransientFailure) as excinfo:
        await gateway.fetch_latest("o1")
    assert excinfo.value.retryable is True


@pytest.mark.asyncio
async def test_network_error_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = HttpDeliverySource(_api(handler))

    with pytest.raises(TransientFailure):
        await gateway.fetch_latest("o1")


@pytest.mark.asyncio
async def test_unreadable_body_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(TransientFailure):
        await HttpDeliverySource(_api(handler)).fetch_latest("o1")


@pytest.mark.asyncio
async def test_delivery_snapshot_parsing():
    recorder = Recorder(
        {
            "success": True,
            "data": {
                "status": "courier_assigned",
                "borzoOrderId": 889123,
                "courier": {"name": "Ravi", "phone": "+919800000000"},
                "pricing": {"distance": 4.2, "finalPrice": 85},
                "trackingUrl": "https://track.example/889123",
                "pickupAddress": {"address": "Salon, MG Road"},
                "dropAddress": {"address": "Flat 4B"},
            },
        }
    )

    snapshot = await HttpDeliverySource(_api(recorder)).fetch_latest("o1")

    assert recorder.requests[0].url.path == "/api/delivery/status/o1"
    assert snapshot.status == "courier_assigned"
    assert snapshot.provider_order_id == "889123"
    assert snapshot.courier.name == "Ravi"
    assert snapshot.pricing.final_price == 85
    assert snapshot.pickup_address == "Salon, MG Road"


@pytest.mark.asyncio
async def test_delivery_without_request_is_none():
    snapshot = await HttpDeliverySource(_api(Recorder({"success": True, "data": None}))).fetch_latest("o1")
    assert snapshot is None


@pytest.mark.asyncio
async def test_cart_lines_accept_each_target_shape():
    recorder = Recorder(
        {
            "success": True,
            "data": {
                "items": [
                    {"_id": "l1", "service": {"_id": "s1", "name": "Facial"}, "quantity": 1, "price": 900},
                    {"_id": "l2", "serviceId": "s2", "quantity": 2},
                    {"_id": "l3", "product": "p7", "quantity": 3},
                    {"_id": "l4", "quantity": 1},
                ]
            },
        }
    )

    lines = await HttpCartGateway(_api(recorder)).fetch_lines()

    assert [(line.id, line.target_id, line.quantity) for line in lines] == [
        ("l1", "s1", 1),
        ("l2", "s2", 2),
        ("l3", "p7", 3),
    ]


@pytest.mark.asyncio
async def test_cart_mutations_hit_line_endpoints():
    recorder = Recorder({"success": True, "data": None})
    gateway = HttpCartGateway(_api(recorder))

    await gateway.update_quantity("l2", 4)
    await gateway.remove("l1")
    await gateway.add("s9")

    update, delete, add = recorder.requests
    assert (update.method, update.url.path) == ("PATCH", "/api/cart/l2")
    assert json.loads(update.content) == {"quantity": 4}
    assert (delete.method, delete.url.path) == ("DELETE", "/api/cart/l1")
    assert (add.method, add.url.path) == ("POST", "/api/cart/add")
    assert json.loads(add.content) == {"serviceId": "s9", "quantity": 1}


@pytest.mark.asyncio
async def test_offer_catalog_query():
    recorder = Recorder(
        {
            "success": True,
            "data": [
                {
                    "_id": "s1",
                    "name": "Haircut",
                    "price": 600,
                    "offerActive": True,
                    "offerDiscount": 40,
                    "offerEndDate": "2026-03-02T12:00:00Z",
                    "primaryImage": "https://img.example/s1.jpg",
                }
            ],
        }
    )

    items = await HttpOfferCatalog(_api(recorder)).list_offers("service", limit=20)

    params = recorder.requests[0].url.params
    assert recorder.requests[0].url.path == "/api/services"
    assert params["offerActive"] == "true"
    assert params["sortBy"] == "offerDiscount"
    assert params["limit"] == "20"
    assert items[0].kind == "service"
    assert items[0].offer.discount == 40
    assert items[0].image_url == "https://img.example/s1.jpg"
