import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, func, Text, DECIMAL, Integer, Float,
    ForeignKey, Table, Uuid, Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from westudy.db.session import Base


class ApprovalStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


listing_amenities = Table(
    "listing_amenities",
    Base.metadata,
    Column("listing_id", Uuid, ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True),
    Column("amenity_id", String(50), ForeignKey("amenities.id"), primary_key=True),
)


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    monthly_price = Column(DECIMAL(10, 2), nullable=False)
    address = Column(Text, nullable=False)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    guests = Column(Integer, nullable=False, default=1)
    bedrooms = Column(Integer, nullable=False, default=1)
    beds = Column(Integer, nullable=False, default=1)
    baths = Column(Integer, nullable=False, default=1)
    rating = Column(DECIMAL(3, 2), default=0)
    review_count = Column(Integer, default=0)
    host_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    university_id = Column(String(50), ForeignKey("university_areas.id"), nullable=True, index=True)
    category_id = Column(String(50), ForeignKey("categories.id"), nullable=True, index=True)
    room_type = Column(String(100), nullable=False, default="Quarto Individual")
    is_available = Column(Boolean, default=True, nullable=False, index=True)
    approval_status = Column(
        SAEnum(ApprovalStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        default=ApprovalStatus.approved,
        nullable=False,
        index=True,
    )
    cancellation_policy = Column(Text, nullable=True)
    house_rules = Column(Text, nullable=True)  # newline separated
    safety_and_property = Column(Text, nullable=True)  # newline separated
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    # Relationships
    host = relationship("User", back_populates="listings")
    university = relationship("UniversityArea", back_populates="listings")
    category = relationship("Category", back_populates="listings")
    amenities = relationship("Amenity", secondary=listing_amenities, order_by="Amenity.id")
    images = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="ListingImage.display_order",
    )
    bookings = relationship("Booking", back_populates="listing")


class ListingImage(Base):
    __tablename__ = "listing_images"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    listing_id = Column(Uuid, ForeignKey("listings.id"), nullable=False, index=True)
    url = Column(Text, nullable=False)
    alt = Column(String(255), nullable=True)
    display_order = Column(Integer, default=0)

    listing = relationship("Listing", back_populates="images")
