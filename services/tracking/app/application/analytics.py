from sqlalchemy import func
from sqlalchemy.orm import Session
from app.domain.enums import PackageStatus, PaymentStatus, TicketStatus
from app.domain.models import Invoice, Package, SupportTicket, User

def collect_analytics(db: Session) -> dict:
    counts = dict(
        db.query(Package.current_status, func.count(Package.id)).group_by(Package.current_status).all()
    )
    by_status = {status.value: counts.get(status.value, 0) for status in PackageStatus}
    revenue = (
        db.query(func.coalesce(func.sum(Package.shipping_cost), 0))
        .filter(Package.payment_status == PaymentStatus.PAID.value)
        .scalar()
    )
    return {
        "total_packages": sum(by_status.values()),
        "packages_by_status": by_status,
        "delivered_packages": by_status[PackageStatus.DELIVERED.value],
        "revenue": float(revenue or 0),
        "pending_invoices": db.query(Invoice).filter(Invoice.payment_status == PaymentStatus.PENDING.value).count(),
        "open_tickets": db.query(SupportTicket).filter(
            SupportTicket.status.in_([TicketStatus.OPEN.value, TicketStatus.IN_PROGRESS.value])
        ).count(),
        "total_users": db.query(User).count(),
    }
