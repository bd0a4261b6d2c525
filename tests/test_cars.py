import pytest
from fastapi import status

from rentmyride.models.booking import Booking, BookingStatus
from tests.conf_tests import (
    client,
    clear_db,
    test_db,
    customer,
    owner,
    other_user,
    owner_headers,
    auth_headers,
    business,
    vehicle,
    headers_for,
    future_dt,
)

CAR_DATA = {"make": "Hyundai", "model": "i20", "year": 2022, "price_per_day": "38.50", "seats": 5}


@pytest.fixture
def confirmed_booking(test_db, vehicle, customer):
    booking = Booking(
        vehicle_id=vehicle.id,
        user_id=customer.id,
        start_date=future_dt(3),
        end_date=future_dt(5),
        total_days=2,
        total_price=30,
        status=BookingStatus.CONFIRMED,
    )
    test_db.add(booking)
    test_db.commit()
    test_db.refresh(booking)
    return booking


def test_create_business_makes_owner(auth_headers, customer):
    response = client.post("/api/businesses/", json={"name": "Fresh Rentals", "city": "Shelbyville"}, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["owner_id"] == customer.id

    me = client.get("/api/auth/me", headers=auth_headers).json()["data"]
    assert me["role"] == "OWNER"

    mine = client.get("/api/businesses/mine", headers=auth_headers).json()["data"]
    assert [b["name"] for b in mine] == ["Fresh Rentals"]


def test_create_car_success(owner_headers, business):
    response = client.post("/api/cars/", json={**CAR_DATA, "business_id": business.id}, headers=owner_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()["data"]
    assert data["make"] == "Hyundai"
    assert data["price_per_day"] == 38.5
    assert data["is_available"] is True


def test_create_car_requires_business_owner(business, other_user):
    response = client.post(
        "/api/cars/", json={**CAR_DATA, "business_id": business.id}, headers=headers_for(other_user)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "FORBIDDEN"


def test_create_car_unauthenticated(business):
    response = client.post("/api/cars/", json={**CAR_DATA, "business_id": business.id})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_car_invalid_price(owner_headers, business):
    response = client.post(
        "/api/cars/", json={**CAR_DATA, "price_per_day": "-1", "business_id": business.id}, headers=owner_headers
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_INPUT"


def test_list_and_filter_cars(owner_headers, business, vehicle):
    client.post("/api/cars/", json={**CAR_DATA, "business_id": business.id}, headers=owner_headers)

    all_cars = client.get("/api/cars/").json()["data"]
    assert len(all_cars) == 2

    toyotas = client.get("/api/cars/", params={"make": "toyota"}).json()["data"]
    assert [c["id"] for c in toyotas] == [vehicle.id]

    cheap = client.get("/api/cars/", params={"max_price": "20"}).json()["data"]
    assert [c["id"] for c in cheap] == [vehicle.id]


def test_get_car(vehicle):
    response = client.get(f"/api/cars/{vehicle.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["model"] == "Yaris"


def test_get_car_not_found():
    response = client.get("/api/cars/9999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "NOT_FOUND"


def test_update_car_by_owner(owner_headers, vehicle):
    response = client.put(f"/api/cars/{vehicle.id}", json={"is_available": False}, headers=owner_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["is_available"] is False
    assert data["make"] == "Toyota"


def test_update_car_by_stranger(vehicle, other_user):
    response = client.put(f"/api/cars/{vehicle.id}", json={"color": "Red"}, headers=headers_for(other_user))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_availability_empty(vehicle):
    response = client.get(f"/api/cars/{vehicle.id}/availability")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == []


def test_availability_lists_blocking_bookings(vehicle, confirmed_booking):
    response = client.get(f"/api/cars/{vehicle.id}/availability")
    ranges = response.json()["data"]
    assert ranges == [
        {
            "from": confirmed_booking.start_date.date().isoformat(),
            "to": confirmed_booking.end_date.date().isoformat(),
        }
    ]


def test_update_car_rejects_empty_make(owner_headers, vehicle):
    response = client.put(f"/api/cars/{vehicle.id}", json={"make": ""}, headers=owner_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_INPUT"

    listing = client.get("/api/cars/")
    assert listing.status_code == status.HTTP_200_OK
    assert listing.json()["data"][0]["make"] == "Toyota"


def test_list_cars_limit_is_clamped(owner_headers, business, vehicle):
    client.post("/api/cars/", json={**CAR_DATA, "business_id": business.id}, headers=owner_headers)
    cars = client.get("/api/cars/", params={"limit": 0}).json()["data"]
    assert [c["id"] for c in cars] == [vehicle.id]
