"""Listings query service: filters + offset pagination over approved listings."""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from westudy.core.credentials import Credentials
from westudy.core.errors import NotFoundError, ValidationError
from westudy.models.catalog import Amenity, Category, UniversityArea
from westudy.models.listing import ApprovalStatus, Listing, ListingImage
from westudy.schemas.listing import ListingCreate, ListingFilters
from westudy.utils.pagination import paginate
from westudy.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_ID = "prox-campus"
DEFAULT_CANCELLATION_POLICY = (
    "Cancelamento flexível: Reembolso total até 5 dias antes do check-in. "
    "Após esse período, uma taxa pode ser aplicada."
)
DEFAULT_HOUSE_RULES = (
    "Não são permitidas festas ou eventos.\n"
    "Horário de silêncio após as 22:00.\n"
    "Não fumar dentro do quarto ou áreas comuns."
)
DEFAULT_SAFETY_AND_PROPERTY = (
    "Detector de fumaça instalado.\n"
    "Extintor de incêndio disponível."
)


def _card_options():
    return (
        selectinload(Listing.images),
        joinedload(Listing.university),
    )


def build_listing_query(db: Session, filters: ListingFilters):
    """Translate filters into a query over browsable listings, newest first."""
    query = (
        db.query(Listing)
        .outerjoin(UniversityArea, UniversityArea.id == Listing.university_id)
        .options(*_card_options())
        .filter(Listing.approval_status == ApprovalStatus.approved)
    )

    if filters.search_term:
        pattern = contains_pattern(filters.search_term)
        query = query.filter(
            or_(
                Listing.title.ilike(pattern, escape=LIKE_ESCAPE),
                Listing.description.ilike(pattern, escape=LIKE_ESCAPE),
                Listing.address.ilike(pattern, escape=LIKE_ESCAPE),
                UniversityArea.name.ilike(pattern, escape=LIKE_ESCAPE),
                UniversityArea.acronym.ilike(pattern, escape=LIKE_ESCAPE),
                UniversityArea.city.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if filters.category:
        query = query.filter(Listing.category_id == filters.category)
    if filters.university:
        query = query.filter(UniversityArea.acronym == filters.university)
    if filters.min_price is not None:
        query = query.filter(Listing.monthly_price >= filters.min_price)
    if filters.max_price is not None:
        query = query.filter(Listing.monthly_price <= filters.max_price)

    return query.order_by(Listing.created_at.desc(), Listing.id)


def list_listings(db: Session, filters: ListingFilters, page: int, limit: int) -> Tuple[List[Listing], int]:
    return paginate(build_listing_query(db, filters), page, limit)


def get_listing(db: Session, listing_id: uuid.UUID, include_unapproved: bool = False) -> Listing:
    query = (
        db.query(Listing)
        .options(
            selectinload(Listing.images),
            selectinload(Listing.amenities),
            joinedload(Listing.university),
            joinedload(Listing.category),
            joinedload(Listing.host),
        )
        .filter(Listing.id == listing_id)
    )
    if not include_unapproved:
        query = query.filter(Listing.approval_status == ApprovalStatus.approved)
    listing = query.first()
    if not listing:
        raise NotFoundError("Listing not found")
    return listing


def infer_category(title: str) -> str:
    """Pick a category from the title when the submitter did not choose one."""
    lowered = title.lower()
    if "kitnet" in lowered:
        return "kitnet"
    if "república" in lowered or "republica" in lowered:
        return "republica"
    return DEFAULT_CATEGORY_ID


def create_listing(db: Session, credentials: Credentials, data: ListingCreate) -> Listing:
    """
    Store a new listing hosted by the caller.

    Admin submissions are published immediately; everyone else's wait in
    the room-approval queue.
    """
    university = None
    if data.university_acronym:
        university = (
            db.query(UniversityArea)
            .filter(UniversityArea.acronym == data.university_acronym)
            .first()
        )
        if not university:
            raise ValidationError(f"Unknown university '{data.university_acronym}'")

    category_id = data.category_id or infer_category(data.title)
    if not db.get(Category, category_id):
        raise ValidationError(f"Unknown category '{category_id}'")

    amenities = []
    if data.amenity_ids:
        amenities = db.query(Amenity).filter(Amenity.id.in_(data.amenity_ids)).all()
        missing = set(data.amenity_ids) - {a.id for a in amenities}
        if missing:
            raise ValidationError(f"Unknown amenities: {', '.join(sorted(missing))}")

    listing_id = uuid.uuid4()
    listing = Listing(
        id=listing_id,
        title=data.title,
        description=data.description,
        monthly_price=data.monthly_price,
        address=data.address,
        lat=data.lat if data.lat is not None else (university.lat if university else None),
        lng=data.lng if data.lng is not None else (university.lng if university else None),
        guests=data.guests,
        bedrooms=data.bedrooms,
        beds=data.beds,
        baths=data.baths,
        room_type=data.room_type,
        host_id=credentials.user_id,
        university_id=university.id if university else None,
        category_id=category_id,
        amenities=amenities,
        is_available=True,
        approval_status=ApprovalStatus.approved if credentials.is_admin else ApprovalStatus.pending,
        cancellation_policy=data.cancellation_policy or DEFAULT_CANCELLATION_POLICY,
        house_rules=data.house_rules or DEFAULT_HOUSE_RULES,
        safety_and_property=data.safety_and_property or DEFAULT_SAFETY_AND_PROPERTY,
    )

    urls = [u for u in data.image_urls if u.startswith("http")]
    if not urls:
        urls = [f"https://picsum.photos/seed/{listing_id.hex}_placeholder/800/600"]
    listing.images = [
        ListingImage(url=url, alt=f"{data.title} - Imagem {i + 1}", display_order=i)
        for i, url in enumerate(urls)
    ]

    db.add(listing)
    db.commit()
    logger.info(
        "Listing %s submitted by %s (%s)", listing.id, credentials.user_id, listing.approval_status.value
    )
    return get_listing(db, listing.id, include_unapproved=True)


def set_approval_status(
    db: Session, credentials: Credentials, listing_id: uuid.UUID, status: ApprovalStatus
) -> Listing:
    credentials.require_admin()
    listing = db.get(Listing, listing_id)
    if not listing:
        raise NotFoundError("Listing not found")
    listing.approval_status = status
    db.commit()
    logger.info("Listing %s marked %s by %s", listing_id, status.value, credentials.user_id)
    return get_listing(db, listing_id, include_unapproved=True)


def list_by_approval_status(
    db: Session, credentials: Credentials, status: Optional[ApprovalStatus], page: int, limit: int
) -> Tuple[List[Listing], int]:
    credentials.require_admin()
    query = db.query(Listing).options(
        selectinload(Listing.images),
        selectinload(Listing.amenities),
        joinedload(Listing.university),
        joinedload(Listing.category),
        joinedload(Listing.host),
    )
    if status:
        query = query.filter(Listing.approval_status == status)
    return paginate(query.order_by(Listing.created_at.desc(), Listing.id), page, limit)
