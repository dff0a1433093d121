from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from orderflow.domain.entities.booking import Booking
from orderflow.domain.entities.cart import CartLine
from orderflow.domain.entities.delivery import Courier, DeliveryPricing, DeliveryRequest
from orderflow.domain.entities.offer import OfferDescriptor, PricedItem


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _ref_id(value: Any) -> str | None:
    # references arrive either as a bare id or as a populated document
    if value is None:
        return None
    if isinstance(value, dict):
        ref = value.get("_id") or value.get("id")
        return str(ref) if ref else None
    return str(value)


class ApiEnvelope(_Payload):
    success: bool = False
    data: Any = None
    message: str | None = None


class BookingDTO(_Payload):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    status: str
    service_otp: str | None = Field(default=None, alias="serviceOtp")
    otp_generated_at: datetime | None = Field(default=None, alias="otpGeneratedAt")
    otp_verified_at: datetime | None = Field(default=None, alias="otpVerifiedAt")
    service_started_at: datetime | None = Field(default=None, alias="serviceStartedAt")
    confirmed_at: datetime | None = Field(default=None, alias="confirmedAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    cancelled_at: datetime | None = Field(default=None, alias="cancelledAt")
    rejection_reason: str | None = Field(default=None, alias="rejectionReason")
    admin_notes: str | None = Field(default=None, alias="adminNotes")
    professional_id: Any = Field(default=None, alias="professionalId")
    total_amount: float | None = Field(default=None, alias="totalAmount")
    services: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")

    def to_entity(self) -> Booking:
        return Booking(
            id=self.id,
            status=self.status,
            service_otp=self.service_otp,
            otp_generated_at=self.otp_generated_at,
            otp_verified_at=self.otp_verified_at,
            service_started_at=self.service_started_at,
            confirmed_at=self.confirmed_at,
            completed_at=self.completed_at,
            cancelled_at=self.cancelled_at,
            rejection_reason=self.rejection_reason,
            admin_notes=self.admin_notes,
            professional_id=_ref_id(self.professional_id),
            total_amount=self.total_amount,
            service_count=len(self.services),
            created_at=self.created_at,
        )


class CourierDTO(_Payload):
    name: str | None = None
    phone: str | None = None
    photo: str | None = None


class PricingDTO(_Payload):
    distance: float | None = None
    final_price: float | None = Field(default=None, alias="finalPrice")


class AddressDTO(_Payload):
    address: str | None = None


class DeliveryRequestDTO(_Payload):
    status: str
    courier: CourierDTO | None = None
    pricing: PricingDTO | None = None
    tracking_url: str | None = Field(default=None, alias="trackingUrl")
    estimated_delivery_time: datetime | None = Field(default=None, alias="estimatedDeliveryTime")
    provider_order_id: str | int | None = Field(
        default=None, validation_alias=AliasChoices("providerOrderId", "borzoOrderId")
    )
    pickup_address: AddressDTO | None = Field(default=None, alias="pickupAddress")
    drop_address: AddressDTO | None = Field(default=None, alias="dropAddress")

    def to_entity(self) -> DeliveryRequest:
        return DeliveryRequest(
            status=self.status,
            courier=Courier(**self.courier.model_dump()) if self.courier else None,
            pricing=DeliveryPricing(**self.pricing.model_dump()) if self.pricing else None,
            tracking_url=self.tracking_url,
            estimated_delivery_time=self.estimated_delivery_time,
            provider_order_id=str(self.provider_order_id) if self.provider_order_id else None,
            pickup_address=self.pickup_address.address if self.pickup_address else None,
            drop_address=self.drop_address.address if self.drop_address else None,
        )


class CartLineDTO(_Payload):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    quantity: int = 0
    price: float = 0.0
    service: Any = None
    service_id: Any = Field(default=None, alias="serviceId")
    product: Any = None
    product_id: Any = Field(default=None, alias="productId")
    target_id: str | None = Field(default=None, alias="targetId")

    def to_entity(self) -> CartLine | None:
        target = (
            self.target_id
            or _ref_id(self.service)
            or _ref_id(self.service_id)
            or _ref_id(self.product)
            or _ref_id(self.product_id)
        )
        if not target:
            return None
        return CartLine(id=self.id, target_id=target, quantity=self.quantity, price=self.price)


class CartDTO(_Payload):
    items: list[CartLineDTO] = Field(default_factory=list)

    def to_lines(self) -> list[CartLine]:
        lines: list[CartLine] = []
        for item in self.items:
            line = item.to_entity()
            if line is not None:
                lines.append(line)
        return lines


class CatalogItemDTO(_Payload):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    price: float = 0.0
    offer_active: bool = Field(default=False, alias="offerActive")
    offer_discount: int = Field(default=0, alias="offerDiscount")
    offer_end_date: datetime | None = Field(default=None, alias="offerEndDate")
    offer_start_date: datetime | None = Field(default=None, alias="offerStartDate")
    offer_title: str | None = Field(default=None, alias="offerTitle")
    primary_image: str | None = Field(default=None, alias="primaryImage")
    image_url: str | None = None
    featured: bool = False

    def to_entity(self, kind: str) -> PricedItem:
        return PricedItem(
            id=self.id,
            kind=kind,
            name=self.name,
            price=self.price,
            offer=OfferDescriptor(
                active=self.offer_active,
                discount=self.offer_discount,
                end_date=self.offer_end_date,
                start_date=self.offer_start_date,
                title=self.offer_title,
            ),
            image_url=self.primary_image or self.image_url,
            featured=self.featured,
        )
