from datetime import date, timedelta

from tests.conftest import auth_headers, create_staff

API = "/api/v1"

def visit_date():
    return (date.today() + timedelta(days=30)).isoformat()

def book(client, park, **overrides):
    payload = {
        "park_id": park.id,
        "visit_date": visit_date(),
        "visitor_name": "Anu Thomas",
        "visitor_email": "anu@example.com",
        "adults": 2,
        "children": 1,
    }
    payload.update(overrides)
    return client.post(f"{API}/bookings", json=payload)

def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}

def test_price_preview(client, park):
    response = client.get(f"{API}/bookings/price-preview", params={"park_id": park.id, "adults": 2, "children": 1})
    assert response.status_code == 200
    assert response.json()["total_amount"] == "290.00"

def test_visitor_booking_flow(client, park):
    response = book(client, park)
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "active"
    assert booking["park"]["name"] == park.name

    response = client.put(
        f"{API}/bookings/{booking['id']}/payment",
        json={"payment_status": "completed", "payment_method": "card", "amount": "290.00"}
    )
    assert response.status_code == 200
    assert response.json()["payment_status"] == "completed"

    assert client.put(f"{API}/bookings/{booking['id']}/download").json()["is_downloaded"] is True
    assert client.get(f"{API}/bookings/{booking['id']}").json()["ticket_no"] == booking["ticket_no"]

    qr = client.get(f"{API}/bookings/{booking['id']}/qr")
    assert qr.status_code == 200
    assert qr.headers["content-type"] == "image/png"

def test_booking_validation_error_shape(client, park):
    response = book(client, park, visitor_email="not-an-email")
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "code": "invalid_email",
        "message": "Please enter a valid email address",
        "field": "visitor_email",
        "reason": None,
    }

def test_past_visit_date_rejected(client, park):
    response = book(client, park, visit_date=(date.today() - timedelta(days=2)).isoformat())
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_visit_date"

def test_unknown_booking(client):
    response = client.get(f"{API}/bookings/12345")
    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "Ticket not found"

def test_admin_endpoints_require_token(client):
    assert client.get(f"{API}/bookings").status_code == 401
    assert client.put(f"{API}/bookings/ticket/ABCD1234/use").status_code == 401

def test_gate_redemption(client, db, park):
    checker = create_staff(db, "gate@parkpass.in", "ticket-checker", parks=[park])
    ticket_no = book(client, park).json()["ticket_no"]

    response = client.put(f"{API}/bookings/ticket/{ticket_no}/use", headers=auth_headers(checker))
    assert response.status_code == 200
    assert response.json()["ticket"]["status"] == "used"

    response = client.put(f"{API}/bookings/ticket/{ticket_no}/use", headers=auth_headers(checker))
    assert response.status_code == 409
    assert response.json()["detail"]["message"] == "This ticket has already been used"

def test_checker_from_other_park_gets_403(client, db, park, other_park):
    checker = create_staff(db, "veli.gate@parkpass.in", "ticket-checker", parks=[other_park])
    ticket_no = book(client, park).json()["ticket_no"]

    response = client.put(f"{API}/bookings/ticket/{ticket_no}/use", headers=auth_headers(checker))
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "different_park"
    assert response.json()["detail"]["message"] == "Ticket belongs to a different park"

def test_cancel_and_delete(client, db, park):
    admin = create_staff(db, "admin@parkpass.in", "super-admin")
    ticket_no = book(client, park).json()["ticket_no"]
    headers = auth_headers(admin)

    assert client.put(f"{API}/bookings/ticket/{ticket_no}/cancel", headers=headers).status_code == 200
    assert client.put(f"{API}/bookings/ticket/{ticket_no}/cancel", headers=headers).status_code == 200

    response = client.delete(f"{API}/bookings/ticket/{ticket_no}", headers=headers)
    assert response.status_code == 200
    assert response.json()["ticket"]["ticket_no"] == ticket_no
    assert client.get(f"{API}/bookings/ticket/{ticket_no}", headers=headers).status_code == 404

def test_search_and_analytics(client, db, park, other_park):
    park_admin = create_staff(db, "napier.admin@parkpass.in", "park-admin", parks=[park])
    book(client, park)
    book(client, other_park)
    headers = auth_headers(park_admin)

    listing = client.get(f"{API}/bookings", headers=headers).json()
    assert listing["total"] == 1
    assert listing["bookings"][0]["park_id"] == park.id

    analytics = client.get(f"{API}/bookings/analytics", headers=headers).json()
    assert analytics["total_bookings"] == 1
    assert analytics["currency"] == "INR"

def test_login_and_me(client, db, park):
    create_staff(db, "napier.admin@parkpass.in", "park-admin", parks=[park], password="ParkAdmin123!")

    response = client.post(f"{API}/auth/login", json={"email": "napier.admin@parkpass.in", "password": "ParkAdmin123!"})
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert response.json()["user"]["assigned_park_ids"] == [park.id]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["role"] == "park-admin"

def test_login_with_wrong_password(client, db):
    create_staff(db, "admin@parkpass.in", "super-admin")
    response = client.post(f"{API}/auth/login", json={"email": "admin@parkpass.in", "password": "wrong-password"})
    assert response.status_code == 401

def test_deactivated_user_token_rejected(client, db):
    user = create_staff(db, "admin@parkpass.in", "super-admin")
    headers = auth_headers(user)
    user.is_active = False
    db.commit()

    assert client.get(f"{API}/auth/me", headers=headers).status_code == 401

def test_user_management_is_super_admin_only(client, db, park):
    admin = create_staff(db, "admin@parkpass.in", "super-admin")
    park_admin = create_staff(db, "napier.admin@parkpass.in", "park-admin", parks=[park])

    payload = {
        "name": "Gate Checker",
        "email": "gate@parkpass.in",
        "password": "Checker123!",
        "role": "ticket-checker",
        "assigned_park_ids": [park.id],
    }
    assert client.post(f"{API}/auth/users", json=payload, headers=auth_headers(park_admin)).status_code == 403

    response = client.post(f"{API}/auth/users", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    created = response.json()
    assert created["assigned_park_ids"] == [park.id]

    assert client.post(f"{API}/auth/users", json=payload, headers=auth_headers(admin)).status_code == 400

    response = client.put(f"{API}/auth/users/{created['id']}", json={"assigned_park_ids": []}, headers=auth_headers(admin))
    assert response.json()["assigned_park_ids"] == []

    unknown_park = client.put(
        f"{API}/auth/users/{created['id']}", json={"assigned_park_ids": [999]}, headers=auth_headers(admin)
    )
    assert unknown_park.status_code == 400

    assert client.delete(f"{API}/auth/users/{created['id']}", headers=auth_headers(admin)).status_code == 200
    assert client.delete(f"{API}/auth/users/{admin.id}", headers=auth_headers(admin)).status_code == 400

def test_out_of_range_ids(client, db):
    headers = auth_headers(create_staff(db, "admin@parkpass.in", "super-admin"))

    response = client.get(f"{API}/bookings/ticket/99999999999999999999", headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "ticket_not_found"

    assert client.get(f"{API}/bookings/99999999999999999999").status_code == 422
    assert client.get(f"{API}/bookings/0").status_code == 422

def test_oversized_fields_rejected_before_storage(client, park):
    response = book(client, park, visitor_email="a" * 250 + "@example.com")
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "visitor_email"]

    response = book(client, park, visitor_phone="9" * 51)
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "visitor_phone"]

    booking_id = book(client, park).json()["id"]
    response = client.put(
        f"{API}/bookings/{booking_id}/payment",
        json={"payment_status": "completed", "payment_id": "P" * 101}
    )
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "payment_id"]
    assert client.get(f"{API}/bookings/{booking_id}").json()["payment_status"] == "pending"
