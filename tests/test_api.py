"""HTTP surface: tenant resolution, public booking flow and the admin routes."""

from datetime import timedelta

from app.core.security import create_access_token, get_password_hash
from app.models.user import StaffUser

from tests.conftest import MONDAY

API = "/api/v1"


def book(client, headers, seed, start="10:00", service=None, phone="11999990000", **extra):
    payload = {
        "professional_id": seed.carlos.id,
        "service_id": (service or seed.haircut).id,
        "client_name": "João",
        "client_phone": phone,
        "date": MONDAY.isoformat(),
        "start_time": start,
        **extra,
    }
    return client.post(f"{API}/appointments/", json=payload, headers=headers)


# ---------------------------------------------------------------------------
# Tenant resolution
# ---------------------------------------------------------------------------


def test_missing_tenant_is_rejected(client):
    response = client.get(f"{API}/services")
    assert response.status_code == 400


def test_unknown_tenant(client):
    response = client.get(f"{API}/services", headers={"X-Tenant": "nope"})
    assert response.status_code == 404
    assert response.json()["error"] == "invalid_reference"


def test_tenant_from_query_string(client):
    response = client.get(f"{API}/services", params={"tenant": "norte"})
    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["Corte"]


def test_catalog_is_per_tenant(client, seed, tenant_headers):
    professionals = client.get(f"{API}/professionals", headers=tenant_headers).json()
    assert [p["name"] for p in professionals] == ["Carlos"]
    assert sorted(professionals[0]["service_ids"]) == sorted([seed.haircut.id, seed.beard.id])

    services = client.get(f"{API}/services", headers=tenant_headers).json()
    assert [s["name"] for s in services] == ["Barba", "Coloração", "Corte"]


# ---------------------------------------------------------------------------
# Public booking flow
# ---------------------------------------------------------------------------


def test_available_slots(client, seed, tenant_headers):
    response = client.get(
        f"{API}/availability/{seed.carlos.id}/{MONDAY.isoformat()}",
        params={"service_id": seed.haircut.id},
        headers=tenant_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["reason"] is None
    assert body["available_slots"][0] == "09:00"
    assert body["available_slots"][-1] == "17:30"
    assert "12:00" not in body["available_slots"]
    assert len(body["available_slots"]) == 16


def test_available_slots_without_schedule(client, seed, tenant_headers):
    response = client.get(f"{API}/availability/{seed.carlos.id}/2030-01-08", headers=tenant_headers)
    assert response.status_code == 200
    assert response.json() == {
        "professional_id": seed.carlos.id,
        "date": "2030-01-08",
        "available_slots": [],
        "reason": "no_availability_configured",
    }


def test_book_then_slot_is_gone(client, seed, tenant_headers):
    response = book(client, tenant_headers, seed, service=seed.beard)

    assert response.status_code == 201
    body = response.json()
    assert body["start_time"] == "10:00"
    assert body["end_time"] == "11:00"
    assert body["utc_offset_minutes"] == -180
    assert body["status"] == "scheduled"
    assert body["service"]["name"] == "Barba"
    assert body["professional"]["name"] == "Carlos"

    slots = client.get(
        f"{API}/availability/{seed.carlos.id}/{MONDAY.isoformat()}",
        params={"service_id": seed.haircut.id},
        headers=tenant_headers,
    ).json()["available_slots"]
    assert "10:00" not in slots
    assert "10:30" not in slots


def test_double_booking_returns_conflict(client, seed, tenant_headers):
    assert book(client, tenant_headers, seed).status_code == 201

    response = book(client, tenant_headers, seed, phone="2")

    assert response.status_code == 409
    assert response.json()["error"] == "slot_conflict"


def test_lunch_break_rejection_body(client, seed, tenant_headers):
    response = book(client, tenant_headers, seed, start="12:00")
    assert response.status_code == 422
    assert response.json()["error"] == "outside_availability"
    assert response.json()["reason"] == "lunch_break"


def test_past_slot_rejected(client, seed, tenant_headers):
    response = book(client, tenant_headers, seed, start="07:00")
    assert response.status_code == 422
    assert response.json()["error"] == "past_slot"


def test_malformed_time_rejected_by_validation(client, seed, tenant_headers):
    response = book(client, tenant_headers, seed, start="9h")
    assert response.status_code == 422


def test_client_fields_are_stripped_before_validation(client, seed, tenant_headers):
    assert book(client, tenant_headers, seed, client_name="   ").status_code == 422
    assert book(client, tenant_headers, seed, phone="  ").status_code == 422

    response = book(client, tenant_headers, seed, phone=" 11999990000 ", client_name=" João ")
    assert response.status_code == 201
    assert response.json()["client_phone"] == "11999990000"
    assert response.json()["client_name"] == "João"


def test_booking_under_other_tenant_is_unknown(client, seed):
    response = book(client, {"X-Tenant": "norte"}, seed)
    assert response.status_code == 404


def test_reward_unavailable(client, seed, tenant_headers):
    response = book(client, tenant_headers, seed, redeem_reward=True)
    assert response.status_code == 409
    assert response.json()["error"] == "reward_unavailable"


def test_lookup_by_phone(client, seed, tenant_headers):
    book(client, tenant_headers, seed, start="10:00")
    book(client, tenant_headers, seed, start="14:00")
    book(client, tenant_headers, seed, start="15:00", phone="other")

    response = client.get(f"{API}/appointments/lookup", params={"phone": "11999990000"}, headers=tenant_headers)
    assert [a["start_time"] for a in response.json()] == ["14:00", "10:00"]

    other_tenant = client.get(
        f"{API}/appointments/lookup", params={"phone": "11999990000"}, headers={"X-Tenant": "norte"}
    )
    assert other_tenant.json() == []


def test_loyalty_unknown_phone(client, seed, tenant_headers):
    response = client.get(f"{API}/loyalty/000", headers=tenant_headers)
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Staff authentication
# ---------------------------------------------------------------------------


def test_login_flow(client, db, seed, tenant_headers):
    db.add(StaffUser(
        tenant_id=seed.centro.id,
        username="maria",
        password_hash=get_password_hash("tesoura123"),
        full_name="Maria",
        role="staff",
    ))
    db.commit()

    bad = client.post(
        f"{API}/auth/login", data={"username": "maria", "password": "wrong"}, headers=tenant_headers
    )
    assert bad.status_code == 401

    response = client.post(
        f"{API}/auth/login", data={"username": "maria", "password": "tesoura123"}, headers=tenant_headers
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={**tenant_headers, "Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "maria"

    # Same user name does not exist under the other tenant.
    elsewhere = client.post(
        f"{API}/auth/login", data={"username": "maria", "password": "tesoura123"}, headers={"X-Tenant": "norte"}
    )
    assert elsewhere.status_code == 401


def test_token_for_another_tenant_is_forbidden(client, seed):
    token = create_access_token(subject=str(seed.admin.id), tenant_slug="centro")
    response = client.get(f"{API}/auth/me", headers={"X-Tenant": "norte", "Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_expired_token(client, seed, tenant_headers):
    token = create_access_token(str(seed.admin.id), "centro", expires_delta=timedelta(minutes=-1))
    response = client.get(f"{API}/auth/me", headers={**tenant_headers, "Authorization": f"Bearer {token}"})
    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Admin: weekly schedule
# ---------------------------------------------------------------------------


def test_availability_requires_admin(client, db, seed, tenant_headers):
    assert client.get(
        f"{API}/admin/professionals/{seed.carlos.id}/availability", headers=tenant_headers
    ).status_code == 401

    staff = StaffUser(
        tenant_id=seed.centro.id, username="pedro", password_hash="x", full_name="Pedro", role="staff"
    )
    db.add(staff)
    db.commit()
    token = create_access_token(str(staff.id), "centro")
    response = client.get(
        f"{API}/admin/professionals/{seed.carlos.id}/availability",
        headers={**tenant_headers, "Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403


def test_availability_crud(client, seed, admin_headers):
    base = f"{API}/admin/professionals/{seed.carlos.id}/availability"

    listed = client.get(base, headers=admin_headers).json()
    assert [(w["day_of_week"], w["start_time"]) for w in listed] == [(1, "09:00:00")]

    created = client.post(
        base,
        json={"day_of_week": 2, "start_time": "10:00", "end_time": "16:00"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    window_id = created.json()["id"]

    slots = client.get(f"{API}/availability/{seed.carlos.id}/2030-01-08", headers=admin_headers).json()
    assert slots["available_slots"][0] == "10:00"

    patched = client.patch(
        f"{API}/admin/availability/{window_id}",
        json={"lunch_start": "12:00", "lunch_end": "13:00"},
        headers=admin_headers,
    )
    assert patched.status_code == 200
    assert patched.json()["lunch_start"] == "12:00:00"

    deleted = client.delete(f"{API}/admin/availability/{window_id}", headers=admin_headers)
    assert deleted.status_code == 200
    slots = client.get(f"{API}/availability/{seed.carlos.id}/2030-01-08", headers=admin_headers).json()
    assert slots["reason"] == "no_availability_configured"


def test_invalid_windows_rejected(client, seed, admin_headers):
    base = f"{API}/admin/professionals/{seed.carlos.id}/availability"

    inverted = client.post(
        base, json={"day_of_week": 2, "start_time": "16:00", "end_time": "10:00"}, headers=admin_headers
    )
    assert inverted.status_code == 422

    lunch_outside = client.post(
        base,
        json={
            "day_of_week": 2, "start_time": "10:00", "end_time": "16:00",
            "lunch_start": "09:00", "lunch_end": "11:00",
        },
        headers=admin_headers,
    )
    assert lunch_outside.status_code == 422

    existing = client.get(base, headers=admin_headers).json()[0]
    shrunk = client.patch(
        f"{API}/admin/availability/{existing['id']}", json={"end_time": "12:30"}, headers=admin_headers
    )
    assert shrunk.status_code == 422


def test_availability_of_another_tenants_professional(client, seed, admin_headers):
    response = client.get(f"{API}/admin/professionals/{seed.ana.id}/availability", headers=admin_headers)
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Admin: appointments
# ---------------------------------------------------------------------------


def test_calendar_and_status_change(client, seed, tenant_headers, admin_headers):
    appointment_id = book(client, tenant_headers, seed).json()["id"]
    book(client, tenant_headers, seed, start="15:00", phone="2")

    calendar = client.get(
        f"{API}/admin/appointments/", params={"date": MONDAY.isoformat()}, headers=admin_headers
    )
    assert [a["start_time"] for a in calendar.json()] == ["10:00", "15:00"]

    completed = client.patch(
        f"{API}/admin/appointments/{appointment_id}/status",
        json={"status": "completed"},
        headers=admin_headers,
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"

    loyalty = client.get(f"{API}/loyalty/11999990000", headers=tenant_headers).json()
    assert loyalty["total_attendances"] == 1
    assert loyalty["available_rewards"] == 0
    assert loyalty["visits_until_next_reward"] == 9

    again = client.patch(
        f"{API}/admin/appointments/{appointment_id}/status",
        json={"status": "cancelled"},
        headers=admin_headers,
    )
    assert again.status_code == 409
    assert again.json()["error"] == "invalid_status_transition"

    scheduled_only = client.get(
        f"{API}/admin/appointments/", params={"status": "scheduled"}, headers=admin_headers
    )
    assert [a["start_time"] for a in scheduled_only.json()] == ["15:00"]


def test_calendar_requires_login(client, seed, tenant_headers):
    assert client.get(f"{API}/admin/appointments/", headers=tenant_headers).status_code == 401
