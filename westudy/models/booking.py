import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, DECIMAL, Integer, ForeignKey, Date, Uuid, Enum as SAEnum
from sqlalchemy.orm import relationship
from westudy.db.session import Base


class BookingStatus(str, enum.Enum):
    confirmed = "confirmed"
    pending = "pending"
    cancelled = "cancelled"
    completed = "completed"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    listing_id = Column(Uuid, ForeignKey("listings.id"), nullable=False, index=True)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False, index=True)
    guests = Column(Integer, nullable=False, default=1)
    total_price = Column(DECIMAL(10, 2), nullable=False)
    status = Column(
        SAEnum(BookingStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        default=BookingStatus.confirmed,
        nullable=False,
        index=True,
    )
    booked_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="bookings")
    listing = relationship("Listing", back_populates="bookings")
