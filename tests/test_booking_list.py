from fastapi import status

from tests.conf_tests import (
    client,
    clear_db,
    test_db,
    customer,
    owner,
    other_user,
    auth_headers,
    owner_headers,
    business,
    vehicle,
    headers_for,
    request_booking,
)


def create_bookings(headers, vehicle_id, count):
    ids = []
    for i in range(count):
        response = request_booking(headers, vehicle_id, 10 + i, 11 + i)
        assert response.status_code == status.HTTP_201_CREATED
        ids.append(response.json()["data"]["id"])
    return ids


def test_list_mine_empty(auth_headers):
    response = client.get("/api/bookings/mine", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"items": [], "next_cursor": None}


def test_list_mine_pages_are_disjoint(auth_headers, vehicle):
    ids = create_bookings(auth_headers, vehicle.id, 5)

    first = client.get("/api/bookings/mine", params={"limit": 2}, headers=auth_headers).json()["data"]
    assert [b["id"] for b in first["items"]] == [ids[4], ids[3]]
    assert first["next_cursor"]

    second = client.get(
        "/api/bookings/mine", params={"limit": 2, "cursor": first["next_cursor"]}, headers=auth_headers
    ).json()["data"]
    assert [b["id"] for b in second["items"]] == [ids[2], ids[1]]

    last = client.get(
        "/api/bookings/mine", params={"limit": 2, "cursor": second["next_cursor"]}, headers=auth_headers
    ).json()["data"]
    assert [b["id"] for b in last["items"]] == [ids[0]]
    assert last["next_cursor"] is None


def test_exact_page_has_no_next_cursor(auth_headers, vehicle):
    create_bookings(auth_headers, vehicle.id, 2)
    data = client.get("/api/bookings/mine", params={"limit": 2}, headers=auth_headers).json()["data"]
    assert len(data["items"]) == 2
    assert data["next_cursor"] is None


def test_malformed_cursor_returns_first_page(auth_headers, vehicle):
    ids = create_bookings(auth_headers, vehicle.id, 3)
    data = client.get(
        "/api/bookings/mine", params={"cursor": "not-a-cursor!!"}, headers=auth_headers
    ).json()["data"]
    assert [b["id"] for b in data["items"]] == list(reversed(ids))


def test_limit_is_clamped(auth_headers, vehicle):
    create_bookings(auth_headers, vehicle.id, 2)
    data = client.get("/api/bookings/mine", params={"limit": 0}, headers=auth_headers).json()["data"]
    assert len(data["items"]) == 1
    assert data["next_cursor"]


def test_list_mine_only_shows_own_bookings(auth_headers, vehicle, other_user):
    create_bookings(auth_headers, vehicle.id, 1)
    request_booking(headers_for(other_user), vehicle.id, 20, 21)

    data = client.get("/api/bookings/mine", headers=auth_headers).json()["data"]
    assert len(data["items"]) == 1


def test_status_filter(auth_headers, owner_headers, vehicle):
    ids = create_bookings(auth_headers, vehicle.id, 3)
    client.post(f"/api/bookings/{ids[1]}/approve", headers=owner_headers)

    confirmed = client.get(
        "/api/bookings/mine", params={"status": "CONFIRMED"}, headers=auth_headers
    ).json()["data"]
    assert [b["id"] for b in confirmed["items"]] == [ids[1]]

    pending = client.get("/api/bookings/mine", params={"status": "PENDING"}, headers=auth_headers).json()["data"]
    assert [b["id"] for b in pending["items"]] == [ids[2], ids[0]]


def test_invalid_status_filter(auth_headers):
    response = client.get("/api/bookings/mine", params={"status": "LOST"}, headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_INPUT"


def test_vehicle_bookings_for_owner(auth_headers, owner_headers, vehicle):
    ids = create_bookings(auth_headers, vehicle.id, 3)
    data = client.get(f"/api/bookings/vehicle/{vehicle.id}", headers=owner_headers).json()["data"]
    assert [b["id"] for b in data["items"]] == list(reversed(ids))


def test_vehicle_bookings_forbidden_for_others(auth_headers, vehicle):
    response = client.get(f"/api/bookings/vehicle/{vehicle.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "FORBIDDEN"


def test_vehicle_bookings_unknown_vehicle(owner_headers):
    response = client.get("/api/bookings/vehicle/9999", headers=owner_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_list_requires_auth():
    response = client.get("/api/bookings/mine")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
