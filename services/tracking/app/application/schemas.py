from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from app.domain.enums import (
    PackageStatus,
    PaymentMethod,
    PaymentStatus,
    ServiceLevel,
    TimeSlot,
    QuoteStatus,
    TicketStatus,
    TicketPriority,
)

BCRYPT_MAX_BYTES = 72

def _reject_null(value):
    """Optional in a patch means "may be omitted", not "may be cleared"."""
    if value is None:
        raise ValueError("may be omitted but not null")
    return value

# ---- accounts ----

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        # bcrypt only hashes the first 72 bytes and newer releases reject longer input
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value

class TokenRequest(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserRead(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    created_at: datetime

    class Config:
        from_attributes = True

class AddressCreate(BaseModel):
    label: str = Field(min_length=1, max_length=50)
    full_name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1)
    phone: Optional[str] = Field(None, max_length=50)
    is_default: bool = False

class AddressRead(AddressCreate):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True

# ---- packages ----

class PackageCreate(BaseModel):
    sender_name: str = Field(min_length=1, max_length=200)
    sender_address: str = Field(min_length=1)
    sender_phone: Optional[str] = Field(None, max_length=50)
    sender_email: Optional[EmailStr] = None
    recipient_name: str = Field(min_length=1, max_length=200)
    recipient_address: str = Field(min_length=1)
    recipient_phone: Optional[str] = Field(None, max_length=50)
    recipient_email: Optional[EmailStr] = None
    description: Optional[str] = None
    weight: float = Field(gt=0)
    dimensions: Optional[str] = Field(None, max_length=100)
    shipping_cost: float = Field(ge=0)
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING
    service_level: ServiceLevel = ServiceLevel.STANDARD
    current_location: Optional[str] = Field(None, max_length=255)
    estimated_delivery: Optional[datetime] = None
    scheduled_delivery_date: Optional[datetime] = None
    scheduled_time_slot: Optional[TimeSlot] = None

    class Config:
        use_enum_values = True
        validate_default = True

class PackageUpdate(BaseModel):
    """Mutable package fields. Status goes through the status endpoint."""
    sender_name: Optional[str] = Field(None, min_length=1, max_length=200)
    sender_address: Optional[str] = Field(None, min_length=1)
    sender_phone: Optional[str] = Field(None, max_length=50)
    sender_email: Optional[EmailStr] = None
    recipient_name: Optional[str] = Field(None, min_length=1, max_length=200)
    recipient_address: Optional[str] = Field(None, min_length=1)
    recipient_phone: Optional[str] = Field(None, max_length=50)
    recipient_email: Optional[EmailStr] = None
    description: Optional[str] = None
    weight: Optional[float] = Field(None, gt=0)
    dimensions: Optional[str] = Field(None, max_length=100)
    shipping_cost: Optional[float] = Field(None, ge=0)
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None
    service_level: Optional[ServiceLevel] = None
    current_location: Optional[str] = Field(None, max_length=255)
    estimated_delivery: Optional[datetime] = None
    scheduled_delivery_date: Optional[datetime] = None
    scheduled_time_slot: Optional[TimeSlot] = None

    class Config:
        use_enum_values = True
        extra = "forbid"

    @field_validator(
        "sender_name",
        "sender_address",
        "recipient_name",
        "recipient_address",
        "weight",
        "shipping_cost",
        "payment_method",
        "payment_status",
        "service_level",
    )
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)

class StatusUpdate(BaseModel):
    status: PackageStatus
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None

    class Config:
        use_enum_values = True

class TrackingEventRead(BaseModel):
    id: int
    package_id: int
    status: str
    location: Optional[str] = None
    description: str
    timestamp: datetime

    class Config:
        from_attributes = True

class PackageRead(BaseModel):
    id: int
    tracking_id: str
    sender_name: str
    sender_address: str
    sender_phone: Optional[str] = None
    sender_email: Optional[str] = None
    recipient_name: str
    recipient_address: str
    recipient_phone: Optional[str] = None
    recipient_email: Optional[str] = None
    description: Optional[str] = None
    weight: float
    dimensions: Optional[str] = None
    shipping_cost: float
    payment_method: str
    payment_status: str
    service_level: str
    current_status: str
    current_location: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    scheduled_delivery_date: Optional[datetime] = None
    scheduled_time_slot: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class PackageDetail(PackageRead):
    events: list[TrackingEventRead] = []

class PackageCreated(PackageRead):
    tracking_url: str

class PublicTrackingEvent(BaseModel):
    status: str
    location: Optional[str] = None
    description: str
    timestamp: datetime

    class Config:
        from_attributes = True

class PublicTrackingView(BaseModel):
    """What anyone holding a tracking code may see."""
    tracking_id: str
    sender_name: str
    recipient_name: str
    recipient_address: str
    description: Optional[str] = None
    weight: float
    dimensions: Optional[str] = None
    service_level: str
    current_status: str
    current_location: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    payment_method: str
    payment_status: str
    shipping_cost: float
    created_at: datetime
    events: list[PublicTrackingEvent] = []

    class Config:
        from_attributes = True

class NotificationRead(BaseModel):
    id: int
    package_id: int
    type: str
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    subject: Optional[str] = None
    message: str
    status: str
    auto_send: bool
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

# ---- quotes & invoices ----

class QuoteCreate(BaseModel):
    sender_name: str = Field(min_length=1, max_length=200)
    sender_address: str = Field(min_length=1)
    sender_phone: Optional[str] = Field(None, max_length=50)
    sender_email: EmailStr
    recipient_name: str = Field(min_length=1, max_length=200)
    recipient_address: str = Field(min_length=1)
    recipient_phone: Optional[str] = Field(None, max_length=50)
    recipient_email: Optional[EmailStr] = None
    description: Optional[str] = None
    weight: float = Field(gt=0)
    dimensions: Optional[str] = Field(None, max_length=100)
    delivery_time_slot: TimeSlot = TimeSlot.MORNING

    class Config:
        use_enum_values = True
        validate_default = True

class QuoteUpdate(BaseModel):
    description: Optional[str] = None
    weight: Optional[float] = Field(None, gt=0)
    dimensions: Optional[str] = Field(None, max_length=100)
    delivery_time_slot: Optional[TimeSlot] = None
    recipient_address: Optional[str] = Field(None, min_length=1)

    class Config:
        use_enum_values = True
        extra = "forbid"

    @field_validator("weight", "delivery_time_slot", "recipient_address")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)

class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus

    class Config:
        use_enum_values = True

class QuoteRead(BaseModel):
    id: int
    quote_number: str
    sender_name: str
    sender_address: str
    sender_phone: Optional[str] = None
    sender_email: str
    recipient_name: str
    recipient_address: str
    recipient_phone: Optional[str] = None
    recipient_email: Optional[str] = None
    description: Optional[str] = None
    weight: float
    dimensions: Optional[str] = None
    delivery_time_slot: str
    base_cost: float
    delivery_fee: float
    total_cost: float
    status: str
    is_expired: bool
    valid_until: datetime
    requested_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class InvoiceCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=200)
    customer_email: EmailStr
    description: Optional[str] = None
    amount: float = Field(gt=0)
    payment_method: Optional[PaymentMethod] = None
    due_date: Optional[datetime] = None

    class Config:
        use_enum_values = True

class InvoicePaymentUpdate(BaseModel):
    payment_status: PaymentStatus
    payment_method: Optional[PaymentMethod] = None

    class Config:
        use_enum_values = True

class InvoiceRead(BaseModel):
    id: int
    invoice_number: str
    quote_id: Optional[int] = None
    package_id: Optional[int] = None
    customer_name: str
    customer_email: str
    description: Optional[str] = None
    amount: float
    payment_method: Optional[str] = None
    payment_status: str
    is_overdue: bool
    due_date: datetime
    paid_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

# ---- support ----

class TicketCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    priority: TicketPriority = TicketPriority.NORMAL
    package_id: Optional[int] = None

    class Config:
        use_enum_values = True
        validate_default = True

class TicketAssign(BaseModel):
    assignee_id: Optional[str] = None

class TicketStatusUpdate(BaseModel):
    status: TicketStatus

    class Config:
        use_enum_values = True

class TicketRead(BaseModel):
    id: int
    user_id: str
    subject: str
    status: str
    priority: str
    package_id: Optional[int] = None
    assigned_to: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class MessageCreate(BaseModel):
    body: str = Field(min_length=1)

class MessageRead(BaseModel):
    id: int
    ticket_id: int
    sender_id: str
    body: str
    is_staff: bool
    created_at: datetime

    class Config:
        from_attributes = True

# ---- admin ----

class AnalyticsRead(BaseModel):
    total_packages: int
    packages_by_status: dict[str, int]
    delivered_packages: int
    revenue: float
    pending_invoices: int
    open_tickets: int
    total_users: int
