"""Shared pytest fixtures and configuration."""

import os
from decimal import Decimal

import pytest

# Set test environment variables before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402

from westudy.core.credentials import Credentials  # noqa: E402
from westudy.core.security import create_access_token, get_password_hash  # noqa: E402
from westudy.db.base import Base  # noqa: E402
from westudy.db.session import SessionLocal, engine  # noqa: E402
from westudy.main import app  # noqa: E402
from westudy.models.catalog import Amenity, Category, UniversityArea  # noqa: E402
from westudy.models.listing import ApprovalStatus, Listing, ListingImage  # noqa: E402
from westudy.models.user import User  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture
def db():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    # No context manager: the lifespan (table creation, sweep task) is not needed here
    return TestClient(app)


@pytest.fixture
def catalog(db):
    db.add_all([
        UniversityArea(id="usp-butanta", name="Universidade de São Paulo", acronym="USP",
                       city="São Paulo", neighborhood="Butantã", lat=-23.5595, lng=-46.7313),
        UniversityArea(id="unicamp-barao", name="Universidade Estadual de Campinas", acronym="Unicamp",
                       city="Campinas", neighborhood="Barão Geraldo", lat=-22.8178, lng=-47.0687),
        Category(id="prox-campus", label="Perto do Campus", icon_name="School"),
        Category(id="kitnet", label="Kitnets", icon_name="Home"),
        Category(id="republica", label="Repúblicas", icon_name="Building"),
        Amenity(id="wifi", name="Wi-Fi", icon_name="Wifi"),
        Amenity(id="kitchen", name="Cozinha Equipada", icon_name="Utensils"),
    ])
    db.commit()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name="Usuário Comum", email=None, is_admin=False, is_active=True, password=PASSWORD):
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@exemplo.com",
            password_hash=get_password_hash(password),
            is_admin=is_admin,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user(name="Usuário Comum", email="usuario@exemplo.com")


@pytest.fixture
def other_user(make_user):
    return make_user(name="Ana Silva", email="ana.silva@exemplo.com")


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin WeStudy", email="admin@westudy.com", is_admin=True)


def _headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def headers_for():
    """Bearer header factory for any user."""
    return _headers_for


@pytest.fixture
def credentials_for():
    return lambda user: Credentials(user_id=user.id, is_admin=user.is_admin)


@pytest.fixture
def auth_headers(user):
    return _headers_for(user)


@pytest.fixture
def admin_headers(admin):
    return _headers_for(admin)


@pytest.fixture
def make_listing(db, catalog, admin):
    def _make(**overrides):
        fields = dict(
            title="Quarto Aconchegante Próximo à USP",
            description="Quarto individual mobiliado.",
            monthly_price=Decimal("1200.00"),
            address="Rua do Matão, 1010, Butantã, São Paulo - SP",
            guests=1,
            bedrooms=1,
            beds=1,
            baths=1,
            rating=Decimal("4.81"),
            review_count=45,
            host_id=admin.id,
            university_id="usp-butanta",
            category_id="prox-campus",
            room_type="Quarto Individual",
            is_available=True,
            approval_status=ApprovalStatus.approved,
        )
        fields.update(overrides)
        listing = Listing(**fields)
        listing.images = [ListingImage(url="https://picsum.photos/seed/q/800/600", alt="Quarto", display_order=0)]
        db.add(listing)
        db.commit()
        db.refresh(listing)
        return listing

    return _make


@pytest.fixture
def listing(make_listing):
    return make_listing()
