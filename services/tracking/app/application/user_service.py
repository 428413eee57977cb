from sqlalchemy.orm import Session
from fastapi import HTTPException
from app.auth_local import hash_password, verify_password
from app.domain.enums import UserRole
from app.domain.models import Address, Notification, User
from .schemas import AddressCreate, RegisterRequest

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def list(self):
        return self.db.query(User).order_by(User.created_at.desc()).all()

    def register(self, data: RegisterRequest, role: str = UserRole.CUSTOMER.value) -> User:
        email = data.email.lower()
        if self.db.query(User.id).filter(User.email == email).first():
            raise HTTPException(status_code=409, detail="Email already registered")
        user = User(
            email=email,
            first_name=data.first_name,
            last_name=data.last_name,
            role=role,
            password_hash=hash_password(data.password),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def authenticate(self, username: str, password: str) -> User:
        user = self.db.query(User).filter(User.email == username.lower()).first()
        if not user or not verify_password(password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return user

    def notifications(self, user: User):
        return (
            self.db.query(Notification)
            .filter(Notification.recipient_email == user.email)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def addresses(self, user: User):
        return self.db.query(Address).filter(Address.user_id == user.id).order_by(Address.id).all()

    def add_address(self, user: User, data: AddressCreate) -> Address:
        if data.is_default:
            self.db.query(Address).filter(Address.user_id == user.id, Address.is_default.is_(True)).update(
                {Address.is_default: False}, synchronize_session=False
            )
        address = Address(user_id=user.id, **data.model_dump())
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address

    def delete_address(self, user: User, address_id: int) -> None:
        address = self.db.get(Address, address_id)
        if not address or address.user_id != user.id:
            raise HTTPException(status_code=404, detail="Address not found")
        self.db.delete(address)
        self.db.commit()
