"""Tests for the booking workflow: pricing, availability compare-and-set, cancel, unlock, sweep."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from westudy.core.errors import ListingUnavailableError, NotFoundError, ValidationError
from westudy.db.session import SessionLocal
from westudy.models.booking import Booking, BookingStatus
from westudy.models.listing import ApprovalStatus, Listing
from westudy.services import bookings as booking_service

BOOKINGS_URL = "/api/v1/bookings/"


def _payload(listing, check_in=date(2030, 3, 1), nights=30, guests=1):
    return {
        "listing_id": str(listing.id),
        "check_in_date": check_in.isoformat(),
        "check_out_date": (check_in + timedelta(days=nights)).isoformat(),
        "guests": guests,
    }


@pytest.mark.unit
def test_quote_total_prorates_monthly_price():
    assert booking_service.quote_total(Decimal("1200.00"), date(2030, 1, 1), date(2030, 1, 31)) == Decimal("1200.00")
    assert booking_service.quote_total(Decimal("950.00"), date(2030, 1, 1), date(2030, 1, 8)) == Decimal("221.67")


@pytest.mark.unit
def test_quote_total_rejects_empty_stay():
    with pytest.raises(ValidationError):
        booking_service.quote_total(Decimal("1200.00"), date(2030, 1, 1), date(2030, 1, 1))


@pytest.mark.integration
def test_book_listing(client, db, listing, auth_headers, user):
    response = client.post(BOOKINGS_URL, json=_payload(listing, nights=45), headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "confirmed"
    assert Decimal(body["total_price"]) == Decimal("1800.00")
    assert body["user_id"] == str(user.id)
    assert body["listing"]["title"] == listing.title
    assert body["listing"]["is_available"] is False

    db.expire_all()
    assert db.get(Listing, listing.id).is_available is False


@pytest.mark.integration
def test_booking_an_unavailable_listing_conflicts(client, db, listing, auth_headers, other_user, headers_for):
    first = client.post(BOOKINGS_URL, json=_payload(listing), headers=headers_for(other_user))
    assert first.status_code == 201

    response = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["error"] == "listing_unavailable"
    assert db.query(Booking).count() == 1


@pytest.mark.integration
def test_booking_requires_authentication(client, listing):
    response = client.post(BOOKINGS_URL, json=_payload(listing))

    assert response.status_code == 401


@pytest.mark.integration
def test_booking_unknown_listing_returns_404(client, db, auth_headers):
    payload = {
        "listing_id": "6f1c1c1e-8b8a-4d55-9a43-5e4d7b0c2f10",
        "check_in_date": "2030-03-01",
        "check_out_date": "2030-04-01",
        "guests": 1,
    }

    response = client.post(BOOKINGS_URL, json=payload, headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.integration
def test_check_out_before_check_in_is_rejected(client, db, listing, auth_headers):
    payload = _payload(listing)
    payload["check_out_date"] = "2030-02-01"

    response = client.post(BOOKINGS_URL, json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    db.expire_all()
    assert db.get(Listing, listing.id).is_available is True


@pytest.mark.integration
def test_too_many_guests_is_rejected(client, db, listing, auth_headers):
    response = client.post(BOOKINGS_URL, json=_payload(listing, guests=3), headers=auth_headers)

    assert response.status_code == 400
    assert db.query(Booking).count() == 0


@pytest.mark.unit
def test_losing_the_availability_race_writes_nothing(db, listing, user, credentials_for):
    assert db.get(Listing, listing.id).is_available is True

    # Another request takes the room after our session has loaded it
    other = SessionLocal()
    other.query(Listing).filter(Listing.id == listing.id).update({"is_available": False})
    other.commit()
    other.close()

    with pytest.raises(ListingUnavailableError):
        booking_service.book(db, credentials_for(user), listing.id, date(2030, 1, 1), date(2030, 2, 1), 1)

    assert db.query(Booking).count() == 0


@pytest.mark.unit
def test_pending_listing_cannot_be_booked(db, make_listing, user, credentials_for):
    pending = make_listing(approval_status=ApprovalStatus.pending)

    with pytest.raises(NotFoundError):
        booking_service.book(db, credentials_for(user), pending.id, date(2030, 1, 1), date(2030, 2, 1), 1)


@pytest.mark.integration
def test_list_my_bookings(client, make_listing, auth_headers, other_user, headers_for):
    a = make_listing(title="A")
    b = make_listing(title="B")
    client.post(BOOKINGS_URL, json=_payload(a, check_in=date(2030, 1, 1)), headers=auth_headers)
    client.post(BOOKINGS_URL, json=_payload(b, check_in=date(2030, 6, 1)), headers=auth_headers)

    mine = client.get(BOOKINGS_URL, headers=auth_headers).json()
    theirs = client.get(BOOKINGS_URL, headers=headers_for(other_user)).json()

    assert [x["listing"]["title"] for x in mine] == ["B", "A"]
    assert theirs == []


@pytest.mark.integration
def test_other_users_booking_reads_as_missing(client, listing, auth_headers, other_user, headers_for):
    booking_id = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers).json()["id"]

    assert client.get(f"{BOOKINGS_URL}{booking_id}", headers=auth_headers).status_code == 200
    assert client.get(f"{BOOKINGS_URL}{booking_id}", headers=headers_for(other_user)).status_code == 404


@pytest.mark.integration
def test_cancel_releases_listing(client, db, listing, auth_headers):
    booking_id = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers).json()["id"]

    response = client.patch(f"{BOOKINGS_URL}{booking_id}/cancel", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancelled_at"] is not None
    db.expire_all()
    assert db.get(Listing, listing.id).is_available is True

    # The room can be booked again
    again = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers)
    assert again.status_code == 201


@pytest.mark.integration
def test_cancel_twice_conflicts(client, listing, auth_headers):
    booking_id = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers).json()["id"]
    client.patch(f"{BOOKINGS_URL}{booking_id}/cancel", headers=auth_headers)

    response = client.patch(f"{BOOKINGS_URL}{booking_id}/cancel", headers=auth_headers)

    assert response.status_code == 409


@pytest.mark.integration
def test_unlock_confirmed_booking(client, listing, auth_headers):
    booking_id = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers).json()["id"]

    response = client.post(f"{BOOKINGS_URL}{booking_id}/unlock", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert booking_id in response.json()["message"]


@pytest.mark.integration
def test_unlock_someone_elses_booking_is_forbidden(client, listing, auth_headers, other_user, headers_for):
    booking_id = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers).json()["id"]

    response = client.post(f"{BOOKINGS_URL}{booking_id}/unlock", headers=headers_for(other_user))

    assert response.status_code == 403


@pytest.mark.integration
def test_unlock_cancelled_booking_is_forbidden(client, listing, auth_headers):
    booking_id = client.post(BOOKINGS_URL, json=_payload(listing), headers=auth_headers).json()["id"]
    client.patch(f"{BOOKINGS_URL}{booking_id}/cancel", headers=auth_headers)

    response = client.post(f"{BOOKINGS_URL}{booking_id}/unlock", headers=auth_headers)

    assert response.status_code == 403
    assert "cancelled" in response.json()["message"]


@pytest.mark.integration
def test_unlock_unknown_booking_returns_404(client, db, auth_headers):
    response = client.post(f"{BOOKINGS_URL}6f1c1c1e-8b8a-4d55-9a43-5e4d7b0c2f10/unlock", headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.unit
def test_complete_past_bookings(db, make_listing, user, credentials_for):
    past = make_listing(title="Passado")
    future = make_listing(title="Futuro")
    creds = credentials_for(user)
    booking_service.book(db, creds, past.id, date(2030, 1, 1), date(2030, 2, 1), 1)
    booking_service.book(db, creds, future.id, date(2030, 6, 1), date(2030, 7, 1), 1)

    completed = booking_service.complete_past_bookings(db, today=date(2030, 3, 1))

    assert completed == 1
    db.expire_all()
    statuses = {b.listing_id: b.status for b in db.query(Booking).all()}
    assert statuses[past.id] == BookingStatus.completed
    assert statuses[future.id] == BookingStatus.confirmed
    assert db.get(Listing, past.id).is_available is True
    assert db.get(Listing, future.id).is_available is False
    assert booking_service.complete_past_bookings(db, today=date(2030, 3, 1)) == 0
