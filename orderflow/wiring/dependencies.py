from datetime import timedelta
from functools import lru_cache
import logging
from typing import Callable

from orderflow.core.config import settings
from orderflow.application.ports.booking_gateway import BookingGatewayPort
from orderflow.application.ports.cart_gateway import CartGatewayPort
from orderflow.application.ports.catalog import OfferCatalogPort
from orderflow.application.ports.credentials import CredentialProviderPort
from orderflow.application.ports.delivery_source import DeliverySourcePort
from orderflow.application.use_cases.booking_lifecycle import BookingLifecycle
from orderflow.application.use_cases.cart_quantity import CartQuantityController
from orderflow.application.use_cases.delivery_reconciler import DeliveryReconciler, TrackingView
from orderflow.application.use_cases.offer_feed import OfferFeed
from orderflow.infrastructure.auth.static_credentials import StaticCredentialProvider
from orderflow.infrastructure.http.api_client import ApiClient
from orderflow.infrastructure.http.booking_gateway import HttpBookingGateway
from orderflow.infrastructure.http.cart_gateway import HttpCartGateway
from orderflow.infrastructure.http.delivery_source import HttpDeliverySource
from orderflow.infrastructure.http.offer_catalog import HttpOfferCatalog
from orderflow.infrastructure.mock.mock_booking_gateway import MockBookingGateway
from orderflow.infrastructure.mock.mock_cart_gateway import MockCartGateway
from orderflow.infrastructure.mock.mock_delivery_source import ScriptedDeliverySource
from orderflow.infrastructure.mock.mock_offer_catalog import MockOfferCatalog


logger = logging.getLogger(__name__)

_booking_lifecycle: BookingLifecycle | None = None
_cart_controller: CartQuantityController | None = None


def _use_mocks() -> bool:
    if settings.API_BASE_URL:
        return False
    if settings.ENV.lower() in {"dev", "local"}:
        return True
    raise ValueError("API_BASE_URL is required outside dev/local.")


@lru_cache
def get_credentials() -> CredentialProviderPort:
    logger.info("ACCESS_TOKEN present=%s", bool(settings.ACCESS_TOKEN))
    return StaticCredentialProvider(settings.ACCESS_TOKEN)


@lru_cache
def get_api_client() -> ApiClient:
    return ApiClient(
        base_url=settings.API_BASE_URL or "",
        credentials=get_credentials(),
        timeout=settings.API_TIMEOUT_SECONDS,
    )


async def close_api_client() -> None:
    """Close the shared HTTP client if one was ever built."""
    if get_api_client.cache_info().currsize:
        await get_api_client().aclose()
        get_api_client.cache_clear()


@lru_cache
def get_booking_gateway() -> BookingGatewayPort:
    if _use_mocks():
        logger.info("Using MockBookingGateway (API_BASE_URL missing, ENV=dev/local)")
        return MockBookingGateway()
    return HttpBookingGateway(get_api_client())


@lru_cache
def get_delivery_source() -> DeliverySourcePort:
    if _use_mocks():
        return ScriptedDeliverySource()
    return HttpDeliverySource(get_api_client())


@lru_cache
def get_cart_gateway() -> CartGatewayPort:
    if _use_mocks():
        return MockCartGateway()
    return HttpCartGateway(get_api_client())


@lru_cache
def get_offer_catalog() -> OfferCatalogPort:
    if _use_mocks():
        return MockOfferCatalog()
    return HttpOfferCatalog(get_api_client())


def get_booking_lifecycle() -> BookingLifecycle:
    global _booking_lifecycle
    if _booking_lifecycle is None:
        _booking_lifecycle = BookingLifecycle(
            gateway=get_booking_gateway(),
            otp_window=timedelta(hours=settings.OTP_DISPLAY_WINDOW_HOURS),
        )
    return _booking_lifecycle


def get_cart_controller() -> CartQuantityController:
    global _cart_controller
    if _cart_controller is None:
        _cart_controller = CartQuantityController(gateway=get_cart_gateway())
    return _cart_controller


def get_offer_feed() -> OfferFeed:
    return OfferFeed(catalog=get_offer_catalog(), limit=settings.OFFERS_PAGE_LIMIT)


def make_delivery_reconciler(
    order_id: str,
    source: DeliverySourcePort | None = None,
    interval_seconds: float | None = None,
    on_update: Callable[[TrackingView], None] | None = None,
) -> DeliveryReconciler:
    return DeliveryReconciler(
        order_id=order_id,
        source=source or get_delivery_source(),
        interval_seconds=interval_seconds or settings.DELIVERY_POLL_INTERVAL_SECONDS,
        on_update=on_update,
    )
