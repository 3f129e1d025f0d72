# tests/test_fleet.py

from datetime import date

import pytest

from fieldops.models import Appointment, Vehicle
from fieldops.shared.validators import validate_plate


@pytest.mark.parametrize(
    "raw, expected",
    [("abc-1234", "ABC-1234"), ("ABC1D23", "ABC1D23"), (" kxz 9a12 ", "KXZ9A12")],
)
def test_plate_normalization(raw, expected):
    assert validate_plate(raw) == expected


@pytest.mark.parametrize("raw", ["AB-1234", "ABCD123", "1234567", ""])
def test_invalid_plates(raw):
    with pytest.raises(ValueError):
        validate_plate(raw)


def test_vehicle_crud(client, login):
    login(role="admin", sector="Comercial")

    created = client.post("/fleet", json={"model": "Fiat Strada", "plate": "abc1d23"})
    assert created.status_code == 201
    vehicle = created.json()
    assert vehicle["plate"] == "ABC1D23"
    assert vehicle["status"] == "available"

    updated = client.patch(f"/fleet/{vehicle['id']}", json={"status": "maintenance"})
    assert updated.json()["status"] == "maintenance"

    assert [v["id"] for v in client.get("/fleet").json()] == [vehicle["id"]]
    assert client.delete(f"/fleet/{vehicle['id']}").status_code == 200
    assert client.get(f"/fleet/{vehicle['id']}").status_code == 404


def test_duplicate_plate_conflicts(client, login):
    login(role="admin", sector="Comercial")
    client.post("/fleet", json={"model": "Fiat Strada", "plate": "ABC1D23"})

    response = client.post("/fleet", json={"model": "VW Saveiro", "plate": "abc1d23"})

    assert response.status_code == 409


def test_fleet_edit_requires_commercial_admin(client, login):
    login(role="admin", sector="Administrativo")
    assert client.get("/fleet").status_code == 200
    assert client.post("/fleet", json={"model": "Fiat Strada", "plate": "ABC1D23"}).status_code == 403


def _vehicle(db, status="available"):
    vehicle = Vehicle(model="Fiat Strada", plate="ABC1D23", status=status)
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return vehicle


def _booking(db, vehicle, status="scheduled"):
    appointment = Appointment(
        title="Visita", city="Areal", date=date(2025, 3, 10), time="09:00", status=status, vehicle_id=vehicle.id
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def test_vehicle_free_slot_is_available(client, login, db):
    vehicle = _vehicle(db)
    login(role="user", sector="Comercial")

    response = client.get(f"/fleet/{vehicle.id}/availability", params={"date": "2025-03-10", "time": "9:00"})

    assert response.status_code == 200
    assert response.json()["available"] is True
    assert response.json()["time"] == "09:00"


def test_vehicle_booked_at_same_time_is_unavailable(client, login, db):
    vehicle = _vehicle(db)
    _booking(db, vehicle)
    login(role="user", sector="Comercial")

    response = client.get(f"/fleet/{vehicle.id}/availability", params={"date": "2025-03-10", "time": "09:00"})

    assert response.json()["available"] is False
    assert response.json()["reason"] == "Veículo já reservado neste horário"


def test_appointment_being_edited_and_cancelled_bookings_do_not_conflict(client, login, db):
    vehicle = _vehicle(db)
    editing = _booking(db, vehicle)
    _booking(db, vehicle, status="cancelled")
    login(role="user", sector="Comercial")

    response = client.get(
        f"/fleet/{vehicle.id}/availability",
        params={"date": "2025-03-10", "time": "09:00", "appointmentId": editing.id},
    )

    assert response.json()["available"] is True


def test_vehicle_in_maintenance_is_unavailable(client, login, db):
    vehicle = _vehicle(db, status="maintenance")
    login(role="dev")

    response = client.get(f"/fleet/{vehicle.id}/availability", params={"date": "2025-03-10", "time": "09:00"})

    assert response.json() == {
        "vehicleId": vehicle.id,
        "date": "2025-03-10",
        "time": "09:00",
        "available": False,
        "reason": "Veículo em manutenção",
    }


def test_availability_rejects_bad_time(client, login, db):
    vehicle = _vehicle(db)
    login(role="dev")
    response = client.get(f"/fleet/{vehicle.id}/availability", params={"date": "2025-03-10", "time": "25:00"})
    assert response.status_code == 400


def test_deleting_vehicle_keeps_its_appointments(client, login, db):
    vehicle = _vehicle(db)
    appointment = _booking(db, vehicle)
    vehicle_id, appointment_id = vehicle.id, appointment.id
    login(role="dev")

    assert client.delete(f"/fleet/{vehicle_id}").status_code == 200

    db.expire_all()
    assert db.get(Appointment, appointment_id).vehicle_id is None


def test_patch_only_touches_sent_fields(client, login, db):
    vehicle = _vehicle(db, status="maintenance")
    login(role="admin", sector="Comercial")

    response = client.patch(f"/fleet/{vehicle.id}", json={"model": "Fiat Toro"})

    assert response.status_code == 200
    assert response.json()["model"] == "Fiat Toro"
    assert response.json()["plate"] == "ABC1D23"
    assert response.json()["status"] == "maintenance"
    assert client.patch(f"/fleet/{vehicle.id}", json={"plate": None}).status_code == 422


def test_availability_rejects_dates_outside_calendar(client, login, db):
    vehicle = _vehicle(db)
    login(role="admin", sector="Comercial")

    response = client.get(
        f"/fleet/{vehicle.id}/availability", params={"date": "9999-12-31", "time": "09:00"}
    )

    assert response.status_code == 422
