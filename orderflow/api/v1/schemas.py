from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from orderflow.domain.entities.cart import LineState


class _ViewSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ErrorSchema(_ViewSchema):
    kind: str
    message: str
    retryable: bool = False


class StatusDisplaySchema(_ViewSchema):
    label: str
    message: str
    color: str
    icon: str


class ProgressStepSchema(_ViewSchema):
    key: str
    label: str
    state: str


class CourierSchema(_ViewSchema):
    name: str | None = None
    phone: str | None = None
    photo: str | None = None


class PricingSchema(_ViewSchema):
    distance: float | None = None
    final_price: float | None = None


class TrackingViewSchema(_ViewSchema):
    order_id: str
    phase: str
    loaded: bool
    status: str | None = None
    display: StatusDisplaySchema | None = None
    show_progress: bool = False
    steps: list[ProgressStepSchema] = Field(default_factory=list)
    courier: CourierSchema | None = None
    pricing: PricingSchema | None = None
    tracking_url: str | None = None
    estimated_delivery_time: datetime | None = None
    provider_order_id: str | None = None
    pickup_address: str | None = None
    drop_address: str | None = None
    last_updated_at: datetime | None = None
    stale: bool = False
    error: ErrorSchema | None = None


class OfferItemSchema(BaseModel):
    id: str
    kind: str
    name: str
    price: float
    offer_price: int
    savings: float
    discount: int
    time_left: str
    title: str | None = None
    image_url: str | None = None
    featured: bool = False


class OfferFeedSchema(BaseModel):
    items: list[OfferItemSchema]
    total_offers: int
    product_offers: int
    service_offers: int
    errors: list[ErrorSchema] = Field(default_factory=list)


class BookingSchema(_ViewSchema):
    id: str
    status: str
    service_otp: str | None = None
    otp_generated_at: datetime | None = None
    otp_verified_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    rejection_reason: str | None = None
    admin_notes: str | None = None
    professional_id: str | None = None
    total_amount: float | None = None


class BookingActionSchema(BaseModel):
    action: str
    booking: BookingSchema | None = None


class OtpSchema(_ViewSchema):
    visible: bool
    code: str | None = None
    generated_at: datetime | None = None
    valid_until: datetime | None = None
    expired: bool = False
    verified_at: datetime | None = None


class ConfirmRequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_notes: str | None = Field(default=None, alias="adminNotes")


class RejectRequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reason: str = ""
    admin_notes: str | None = Field(default=None, alias="adminNotes")


class CancelRequestSchema(BaseModel):
    acknowledged: bool = False


class CartLineSchema(_ViewSchema):
    target_id: str
    quantity: int
    state: LineState
    line_id: str | None = None
    error: str | None = None


class CartSchema(BaseModel):
    lines: list[CartLineSchema]
    total_items: int
    total_price: float


class QuantityRequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quantity: int
    max_quantity: int | None = Field(default=None, alias="maxQuantity")


class CartMutationSchema(BaseModel):
    outcome: str
    line: CartLineSchema | None = None
    error: ErrorSchema | None = None
