from fastapi import APIRouter, Depends, HTTPException, Query

from orderflow.api.v1.schemas import (
    BookingActionSchema,
    BookingSchema,
    CancelRequestSchema,
    CartLineSchema,
    CartMutationSchema,
    CartSchema,
    ConfirmRequestSchema,
    ErrorSchema,
    OfferFeedSchema,
    OfferItemSchema,
    OtpSchema,
    QuantityRequestSchema,
    RejectRequestSchema,
    TrackingViewSchema,
)
from orderflow.application.exceptions import ActionError
from orderflow.application.ports.delivery_source import DeliverySourcePort
from orderflow.application.use_cases.booking_lifecycle import BookingActionResult, BookingLifecycle
from orderflow.application.use_cases.cart_quantity import CartQuantityController
from orderflow.application.use_cases.offer_feed import OfferFeed
from orderflow.core.config import settings
from orderflow.wiring.dependencies import (
    get_booking_lifecycle,
    get_cart_controller,
    get_delivery_source,
    get_offer_feed,
    make_delivery_reconciler,
)

router = APIRouter()

_ERROR_STATUS = {"validation": 400, "conflict": 409, "transient": 502}


def _raise_for(error: ActionError) -> None:
    raise HTTPException(status_code=_ERROR_STATUS.get(error.kind, 400), detail=error.message)


def _booking_response(result: BookingActionResult) -> BookingActionSchema:
    if result.error is not None:
        _raise_for(result.error)
    return BookingActionSchema(
        action=result.action,
        booking=BookingSchema.model_validate(result.booking) if result.booking else None,
    )


@router.get("/deliveries/{order_id}/tracking", response_model=TrackingViewSchema)
async def delivery_tracking(
    order_id: str,
    source: DeliverySourcePort = Depends(get_delivery_source),
):
    reconciler = make_delivery_reconciler(order_id, source=source)
    view = await reconciler.refresh()
    return TrackingViewSchema.model_validate(view)


@router.get("/offers", response_model=OfferFeedSchema)
async def offers(
    tab: str = Query("all", pattern="^(all|products|services)$"),
    feed: OfferFeed = Depends(get_offer_feed),
):
    result = await feed.load()
    items = [
        OfferItemSchema(
            id=q.item.id,
            kind=q.item.kind,
            name=q.item.name,
            price=q.item.price,
            offer_price=q.offer_price,
            savings=q.savings,
            discount=q.item.offer.discount,
            time_left=q.time_left,
            title=q.item.offer.title,
            image_url=q.item.image_url,
            featured=q.item.featured,
        )
        for q in result.filtered(tab)
    ]
    return OfferFeedSchema(
        items=items,
        total_offers=result.total,
        product_offers=result.product_count,
        service_offers=result.service_count,
        errors=[ErrorSchema.model_validate(e, from_attributes=True) for e in result.errors],
    )


@router.get("/bookings/{booking_id}/otp", response_model=OtpSchema)
async def booking_otp(booking_id: str, lifecycle: BookingLifecycle = Depends(get_booking_lifecycle)):
    result = await lifecycle.refresh(booking_id)
    if result.error is not None and lifecycle.cached(booking_id) is None:
        _raise_for(result.error)
    return OtpSchema.model_validate(lifecycle.otp_display(booking_id))


@router.get("/bookings/admin", response_model=list[BookingSchema])
async def admin_bookings(
    status: str = "pending",
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
):
    result = await lifecycle.list_for_admin(status, limit=settings.ADMIN_BOOKINGS_PAGE_LIMIT)
    if result.error is not None:
        _raise_for(result.error)
    return [BookingSchema.model_validate(b) for b in result.bookings]


@router.post("/bookings/{booking_id}/confirm", response_model=BookingActionSchema)
async def confirm_booking(
    booking_id: str,
    req: ConfirmRequestSchema,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
):
    return _booking_response(await lifecycle.request_confirmation(booking_id, admin_notes=req.admin_notes))


@router.post("/bookings/{booking_id}/reject", response_model=BookingActionSchema)
async def reject_booking(
    booking_id: str,
    req: RejectRequestSchema,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
):
    return _booking_response(
        await lifecycle.request_rejection(booking_id, req.reason, admin_notes=req.admin_notes)
    )


@router.post("/bookings/{booking_id}/cancel", response_model=BookingActionSchema)
async def cancel_booking(
    booking_id: str,
    req: CancelRequestSchema,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
):
    return _booking_response(await lifecycle.cancel(booking_id, acknowledged=req.acknowledged))


@router.post("/bookings/{booking_id}/complete", response_model=BookingActionSchema)
async def complete_booking(booking_id: str, lifecycle: BookingLifecycle = Depends(get_booking_lifecycle)):
    return _booking_response(await lifecycle.mark_complete(booking_id))


@router.get("/cart", response_model=CartSchema)
async def cart(controller: CartQuantityController = Depends(get_cart_controller)):
    error = await controller.sync()
    if error is not None and not controller.in_cart_ids:
        _raise_for(error)
    lines = [controller.view(target_id) for target_id in sorted(controller.in_cart_ids)]
    return CartSchema(
        lines=[CartLineSchema.model_validate(line) for line in lines if line is not None],
        total_items=controller.total_items,
        total_price=controller.total_price,
    )


@router.post("/cart/{target_id}/quantity", response_model=CartMutationSchema)
async def set_cart_quantity(
    target_id: str,
    req: QuantityRequestSchema,
    controller: CartQuantityController = Depends(get_cart_controller),
):
    result = await controller.set_quantity(target_id, req.quantity, max_quantity=req.max_quantity)
    return CartMutationSchema(
        outcome=result.outcome,
        line=CartLineSchema.model_validate(result.view) if result.view else None,
        error=ErrorSchema.model_validate(result.error, from_attributes=True) if result.error else None,
    )
