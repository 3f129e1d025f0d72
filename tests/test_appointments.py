# tests/test_appointments.py

from datetime import date

import pytest
from conftest import add_agent

from fieldops.models import AppointmentAgent, TimeOff, Vacation, Vehicle


def _payload(**overrides):
    payload = {
        "title": "Instalação",
        "city": "Petrópolis",
        "date": "2025-03-12",
        "time": "9:30",
        "agent_ids": [],
    }
    payload.update(overrides)
    return payload


def test_create_and_fetch_appointment(client, login, db):
    agent = add_agent(db, name="Carlos", color="#112233")
    vehicle = Vehicle(model="Fiat Strada", plate="ABC1D23")
    db.add(vehicle)
    db.commit()
    login(role="user", sector="Comercial", full_name="Maria Souza")

    created = client.post(
        "/appointments", json=_payload(agent_ids=[agent.id, agent.id], vehicle_id=vehicle.id)
    )

    assert created.status_code == 201
    body = created.json()
    assert body["time"] == "09:30"
    assert body["version"] == 1
    assert body["status"] == "scheduled"
    assert body["agents"] == [{"id": agent.id, "name": "Carlos", "color": "#112233"}]
    assert body["vehicle"]["plate"] == "ABC1D23"
    assert body["created_by_name"] == "Maria Souza"
    assert body["last_action"] == "created"

    fetched = client.get(f"/appointments/{body['id']}")
    assert fetched.json()["id"] == body["id"]


def test_required_fields(client, login):
    login(role="dev")
    assert client.post("/appointments", json=_payload(title="  ")).status_code == 422
    assert client.post("/appointments", json=_payload(time="9h")).status_code == 422


def test_month_listing_and_agent_filter(client, login, db):
    carlos = add_agent(db, name="Carlos")
    bruno = add_agent(db, name="Bruno")
    login(role="user", sector="Comercial")
    client.post("/appointments", json=_payload(date="2025-03-03", agent_ids=[carlos.id]))
    client.post("/appointments", json=_payload(date="2025-03-31", agent_ids=[bruno.id]))
    client.post("/appointments", json=_payload(date="2025-04-01", agent_ids=[carlos.id]))

    march = client.get("/appointments", params={"year": 2025, "month": 3}).json()
    only_carlos = client.get(
        "/appointments", params={"year": 2025, "month": 3, "agentId": carlos.id}
    ).json()

    assert [a["date"] for a in march] == ["2025-03-03", "2025-03-31"]
    assert [a["date"] for a in only_carlos] == ["2025-03-03"]


def test_agent_on_vacation_cannot_be_scheduled(client, login, db):
    agent = add_agent(db, name="Carlos")
    db.add(Vacation(agent_id=agent.id, start_date=date(2025, 3, 10), end_date=date(2025, 4, 9), days=30))
    db.commit()
    login(role="user", sector="Comercial")

    response = client.post("/appointments", json=_payload(agent_ids=[agent.id]))

    assert response.status_code == 400
    assert response.json()["detail"] == "Carlos está de férias nesta data"


def test_agent_back_from_vacation_on_return_date(client, login, db):
    agent = add_agent(db, name="Carlos")
    db.add(Vacation(agent_id=agent.id, start_date=date(2025, 2, 10), end_date=date(2025, 3, 12), days=30))
    db.commit()
    login(role="user", sector="Comercial")

    response = client.post("/appointments", json=_payload(agent_ids=[agent.id]))

    assert response.status_code == 201


def test_agent_on_approved_time_off_cannot_be_scheduled(client, login, db):
    agent = add_agent(db, name="Carlos")
    db.add(TimeOff(agent_id=agent.id, date=date(2025, 3, 11), end_date=date(2025, 3, 13), approved=True))
    db.commit()
    login(role="user", sector="Comercial")

    response = client.post("/appointments", json=_payload(agent_ids=[agent.id]))

    assert response.status_code == 400
    assert response.json()["detail"] == "Carlos está de folga nesta data"


def test_unknown_agent_or_vehicle_rejected(client, login):
    login(role="dev")
    assert client.post("/appointments", json=_payload(agent_ids=["nope"])).status_code == 400
    assert client.post("/appointments", json=_payload(vehicle_id="nope")).status_code == 400


def test_update_bumps_version_and_replaces_agents(client, login, db):
    carlos = add_agent(db, name="Carlos")
    bruno = add_agent(db, name="Bruno")
    login(role="user", sector="Comercial", full_name="Maria Souza")
    appointment = client.post("/appointments", json=_payload(agent_ids=[carlos.id])).json()

    response = client.patch(
        f"/appointments/{appointment['id']}",
        json={"expected_version": 1, "title": "Manutenção", "agent_ids": [bruno.id]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["version"] == 2
    assert body["title"] == "Manutenção"
    assert [a["name"] for a in body["agents"]] == ["Bruno"]
    assert body["updated_by_name"] == "Maria Souza"
    assert body["last_action"] == "updated"


@pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
def test_repeated_updates_keep_and_swap_agents(client, login, db):
    carlos = add_agent(db, name="Carlos")
    bruno = add_agent(db, name="Bruno")
    login(role="user", sector="Comercial")
    appointment = client.post("/appointments", json=_payload(agent_ids=[carlos.id])).json()
    url = f"/appointments/{appointment['id']}"

    both = client.patch(url, json={"expected_version": 1, "agent_ids": [carlos.id, bruno.id]})
    only_bruno = client.patch(url, json={"expected_version": 2, "agent_ids": [bruno.id]})

    assert both.status_code == 200
    assert sorted(a["name"] for a in both.json()["agents"]) == ["Bruno", "Carlos"]
    assert only_bruno.status_code == 200
    assert [a["name"] for a in only_bruno.json()["agents"]] == ["Bruno"]
    assert db.query(AppointmentAgent).count() == 1


def test_reschedule_with_stale_version_conflicts(client, login):
    login(role="user", sector="Comercial")
    appointment = client.post("/appointments", json=_payload()).json()

    first = client.patch(
        f"/appointments/{appointment['id']}/date", json={"date": "2025-03-14", "expected_version": 1}
    )
    second = client.patch(
        f"/appointments/{appointment['id']}/date", json={"date": "2025-03-17", "expected_version": 1}
    )

    assert first.status_code == 200
    assert first.json()["date"] == "2025-03-14"
    assert second.status_code == 409
    assert client.get(f"/appointments/{appointment['id']}").json()["date"] == "2025-03-14"


def test_reschedule_onto_vacation_rejected(client, login, db):
    agent = add_agent(db, name="Carlos")
    db.add(Vacation(agent_id=agent.id, start_date=date(2025, 3, 17), end_date=date(2025, 4, 16), days=30))
    db.commit()
    login(role="user", sector="Comercial")
    appointment = client.post("/appointments", json=_payload(agent_ids=[agent.id])).json()

    response = client.patch(
        f"/appointments/{appointment['id']}/date", json={"date": "2025-03-18", "expected_version": 1}
    )

    assert response.status_code == 400


def test_status_change_and_penalty(client, login):
    login(role="user", sector="Comercial")
    appointment = client.post("/appointments", json=_payload()).json()

    response = client.patch(
        f"/appointments/{appointment['id']}/status",
        json={"status": "completed", "is_penalized": True, "expected_version": 1},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["is_penalized"] is True
    assert response.json()["version"] == 2


def test_invalid_status_rejected(client, login):
    login(role="user", sector="Comercial")
    appointment = client.post("/appointments", json=_payload()).json()
    response = client.patch(
        f"/appointments/{appointment['id']}/status", json={"status": "done", "expected_version": 1}
    )
    assert response.status_code == 422


def test_delete_appointment(client, login):
    login(role="user", sector="Comercial")
    appointment = client.post("/appointments", json=_payload()).json()

    assert client.delete(f"/appointments/{appointment['id']}").status_code == 200
    assert client.get(f"/appointments/{appointment['id']}").status_code == 404


def test_administrativo_reads_but_cannot_edit(client, login):
    login(role="admin", sector="Administrativo")
    assert client.get("/appointments", params={"year": 2025, "month": 3}).status_code == 200
    assert client.post("/appointments", json=_payload()).status_code == 403
