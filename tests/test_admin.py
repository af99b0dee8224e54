"""Tests for the admin dashboard, user management and moderation endpoints."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from westudy.core.errors import ForbiddenError
from westudy.models.booking import Booking, BookingStatus
from westudy.models.listing import ApprovalStatus
from westudy.services import admin as admin_service

ADMIN_URL = "/api/v1/admin"


@pytest.fixture
def make_booking(db, user):
    def _make(listing, total, status=BookingStatus.confirmed, booked_at=None, booker=None):
        booking = Booking(
            user_id=(booker or user).id,
            listing_id=listing.id,
            check_in_date=date(2030, 1, 1),
            check_out_date=date(2030, 1, 31),
            guests=1,
            total_price=Decimal(total),
            status=status,
            booked_at=booked_at or datetime.now(timezone.utc),
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.mark.integration
def test_admin_endpoints_require_admin(client, db, auth_headers):
    for path in ("/dashboard/stats", "/users/", "/bookings/", "/listings/"):
        assert client.get(f"{ADMIN_URL}{path}", headers=auth_headers).status_code == 403
        assert client.get(f"{ADMIN_URL}{path}").status_code == 401


@pytest.mark.unit
def test_services_check_admin_credentials(db, user, credentials_for):
    with pytest.raises(ForbiddenError):
        admin_service.dashboard_stats(db, credentials_for(user))


@pytest.mark.integration
def test_dashboard_stats(client, make_listing, make_booking, admin_headers):
    make_booking(make_listing(), "1200.00")
    make_booking(make_listing(), "800.00", status=BookingStatus.completed)
    make_booking(make_listing(), "5000.00", status=BookingStatus.cancelled)
    make_listing(approval_status=ApprovalStatus.pending)

    response = client.get(f"{ADMIN_URL}/dashboard/stats", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["total_revenue"]) == Decimal("300.00")
    assert body["new_users"] == 2
    assert body["pending_approvals"] == 1
    assert body["active_bookings"] == 1


@pytest.mark.unit
def test_monthly_revenue_covers_six_months(db, admin, make_listing, make_booking, credentials_for):
    room = make_listing()
    make_booking(room, "1000.00", booked_at=datetime(2030, 5, 10, tzinfo=timezone.utc))
    make_booking(room, "2000.00", booked_at=datetime(2030, 5, 20, tzinfo=timezone.utc))
    make_booking(room, "400.00", booked_at=datetime(2030, 2, 1, tzinfo=timezone.utc))
    make_booking(room, "900.00", booked_at=datetime(2029, 12, 31, tzinfo=timezone.utc))
    make_booking(room, "700.00", status=BookingStatus.cancelled, booked_at=datetime(2030, 4, 1, tzinfo=timezone.utc))

    points = admin_service.monthly_revenue(db, credentials_for(admin), today=date(2030, 6, 15))

    assert [p.month for p in points] == ["2030-01", "2030-02", "2030-03", "2030-04", "2030-05", "2030-06"]
    assert [p.revenue for p in points] == [
        Decimal("0.00"),
        Decimal("60.00"),
        Decimal("0.00"),
        Decimal("0.00"),
        Decimal("450.00"),
        Decimal("0.00"),
    ]


@pytest.mark.unit
def test_monthly_revenue_wraps_the_year(db, admin, credentials_for):
    points = admin_service.monthly_revenue(db, credentials_for(admin), today=date(2030, 2, 3))

    assert [p.month for p in points] == ["2029-09", "2029-10", "2029-11", "2029-12", "2030-01", "2030-02"]


@pytest.mark.integration
def test_booking_status_breakdown_includes_zero_counts(client, make_listing, make_booking, admin_headers):
    room = make_listing()
    make_booking(room, "100.00")
    make_booking(room, "100.00", status=BookingStatus.cancelled)
    make_booking(room, "100.00", status=BookingStatus.cancelled)

    body = client.get(f"{ADMIN_URL}/dashboard/booking-status", headers=admin_headers).json()

    assert {row["status"]: row["count"] for row in body} == {
        "confirmed": 1,
        "pending": 0,
        "cancelled": 2,
        "completed": 0,
    }


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.mark.integration
def test_list_users_with_search(client, user, other_user, admin_headers):
    everyone = client.get(f"{ADMIN_URL}/users/", headers=admin_headers).json()
    found = client.get(f"{ADMIN_URL}/users/", params={"search": "ANA"}, headers=admin_headers).json()

    assert everyone["total"] == 3
    assert [u["email"] for u in found["data"]] == ["ana.silva@exemplo.com"]


@pytest.mark.integration
def test_user_search_wildcards_match_literally(client, user, other_user, admin_headers):
    found = client.get(f"{ADMIN_URL}/users/", params={"search": "_"}, headers=admin_headers).json()

    assert found["total"] == 0


@pytest.mark.integration
def test_deactivate_user(client, user, auth_headers, admin_headers):
    response = client.patch(f"{ADMIN_URL}/users/{user.id}", json={"is_active": False}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get("/api/v1/me", headers=auth_headers).status_code == 403


@pytest.mark.integration
def test_promote_user(client, user, admin_headers):
    response = client.patch(f"{ADMIN_URL}/users/{user.id}", json={"is_admin": True}, headers=admin_headers)

    assert response.json()["is_admin"] is True


@pytest.mark.integration
def test_admin_cannot_demote_themselves(client, admin, admin_headers):
    response = client.patch(f"{ADMIN_URL}/users/{admin.id}", json={"is_admin": False}, headers=admin_headers)

    assert response.status_code == 409


@pytest.mark.integration
def test_update_unknown_user(client, admin_headers):
    response = client.patch(
        f"{ADMIN_URL}/users/6f1c1c1e-8b8a-4d55-9a43-5e4d7b0c2f10", json={"is_active": False}, headers=admin_headers
    )

    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Listings and bookings
# ---------------------------------------------------------------------------


@pytest.mark.integration
def test_approval_queue(client, make_listing, admin_headers):
    pending = make_listing(title="Aguardando", approval_status=ApprovalStatus.pending)
    make_listing(title="Publicado")

    body = client.get(f"{ADMIN_URL}/listings/", params={"status": "pending"}, headers=admin_headers).json()

    assert [item["id"] for item in body["data"]] == [str(pending.id)]


@pytest.mark.integration
def test_approve_publishes_listing(client, make_listing, admin_headers):
    pending = make_listing(approval_status=ApprovalStatus.pending)

    response = client.patch(f"{ADMIN_URL}/listings/{pending.id}/approve", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["approval_status"] == "approved"
    assert client.get(f"/api/v1/listings/{pending.id}").status_code == 200


@pytest.mark.integration
def test_reject_keeps_listing_hidden(client, make_listing, admin_headers):
    pending = make_listing(approval_status=ApprovalStatus.pending)

    response = client.patch(f"{ADMIN_URL}/listings/{pending.id}/reject", headers=admin_headers)

    assert response.json()["approval_status"] == "rejected"
    assert client.get(f"/api/v1/listings/{pending.id}").status_code == 404


@pytest.mark.integration
def test_admin_added_listing_is_published(client, catalog, admin_headers):
    payload = {"title": "Kitnet Nova", "monthly_price": "1500.00", "address": "Rua B", "university_acronym": "Unicamp"}

    response = client.post(f"{ADMIN_URL}/listings/", json=payload, headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["approval_status"] == "approved"
    assert response.json()["category_id"] == "kitnet"
    assert client.get("/api/v1/listings/").json()["total"] == 1


@pytest.mark.integration
def test_all_bookings_with_status_filter(client, make_listing, make_booking, other_user, admin_headers):
    room = make_listing()
    make_booking(room, "100.00")
    make_booking(room, "100.00", status=BookingStatus.cancelled, booker=other_user)

    everything = client.get(f"{ADMIN_URL}/bookings/", headers=admin_headers).json()
    cancelled = client.get(f"{ADMIN_URL}/bookings/", params={"status": "cancelled"}, headers=admin_headers).json()

    assert everything["total"] == 2
    assert cancelled["total"] == 1
    assert cancelled["data"][0]["user"]["name"] == "Ana Silva"
