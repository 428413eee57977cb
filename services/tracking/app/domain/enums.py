from enum import Enum

class PackageStatus(str, Enum):
    CREATED = "created"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED_DELIVERY = "failed_delivery"
    RETURNED = "returned"

class PaymentMethod(str, Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    BITCOIN = "bitcoin"
    ETHEREUM = "ethereum"
    USDC = "usdc"
    PAYPAL = "paypal"

class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

class ServiceLevel(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"

class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    EXPRESS = "express"
    WEEKEND = "weekend"

class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"

class NotificationType(str, Enum):
    EMAIL = "email"
    SMS = "sms"

class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"

class QuoteStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED = "converted"

class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

class TicketPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"

# Event descriptions written to the tracking log when no override is given
STATUS_DESCRIPTIONS = {
    PackageStatus.CREATED.value: "Package created and awaiting pickup",
    PackageStatus.PICKED_UP.value: "Package picked up by courier",
    PackageStatus.IN_TRANSIT.value: "Package is in transit",
    PackageStatus.OUT_FOR_DELIVERY.value: "Package is out for delivery",
    PackageStatus.DELIVERED.value: "Package has been delivered",
    PackageStatus.FAILED_DELIVERY.value: "Delivery attempt failed",
    PackageStatus.RETURNED.value: "Package returned to sender",
}

TIME_SLOT_HOURS = {
    TimeSlot.MORNING.value: "8AM - 12PM",
    TimeSlot.AFTERNOON.value: "12PM - 5PM",
    TimeSlot.EVENING.value: "5PM - 8PM",
    TimeSlot.EXPRESS.value: "Same day delivery",
    TimeSlot.WEEKEND.value: "Weekend delivery",
}
