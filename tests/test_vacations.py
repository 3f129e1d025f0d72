# tests/test_vacations.py

from datetime import date
from decimal import Decimal

from conftest import add_agent

from fieldops.auth import SessionContext
from fieldops.domain.vacations.service import VacationService
from fieldops.models import TimeBankTransaction, Vacation


def _vacation_payload(agent_id, **overrides):
    payload = {
        "agent_id": agent_id,
        "start_date": "2025-03-10",
        "expiry_date": "2025-03-01",
        "days": 30,
        "period_number": 1,
    }
    payload.update(overrides)
    return payload


# ============================================================================
# VACATIONS
# ============================================================================


def test_create_vacation_derives_return_date_and_deadline(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    response = client.post("/vacations", json=_vacation_payload(agent.id))

    assert response.status_code == 201
    body = response.json()
    assert body["end_date"] == "2025-04-09"
    assert body["deadline"] == "2026-02-01"
    assert body["agent_name"] == "Carlos"
    assert body["version"] == 1


def test_vacation_start_two_days_before_sunday_rejected(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    response = client.post("/vacations", json=_vacation_payload(agent.id, start_date="2025-03-14"))

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "two_days_before_rest_day"


def test_vacation_start_on_holiday_rejected(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    response = client.post("/vacations", json=_vacation_payload(agent.id, start_date="2025-04-21"))

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "rest_day"
    assert "Tiradentes" in response.json()["detail"]["message"]


def test_vacation_start_before_acquisition_expiry_rejected(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    response = client.post(
        "/vacations", json=_vacation_payload(agent.id, expiry_date="2025-06-01")
    )

    assert response.json()["detail"]["code"] == "before_acquisition_expiry"


def test_vacation_respects_local_holidays(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="dev")
    client.post("/calendar/local-holidays", json={"name": "Padroeira", "day": 12, "month": 3})

    response = client.post("/vacations", json=_vacation_payload(agent.id))

    assert response.status_code == 400


def test_vacation_days_limited_to_thirty(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    assert client.post("/vacations", json=_vacation_payload(agent.id, days=31)).status_code == 422


def test_vacation_dates_outside_calendar_rejected(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    far_start = _vacation_payload(agent.id, start_date="9999-12-30", expiry_date="9999-12-01")
    assert client.post("/vacations", json=far_start).status_code == 422
    far_time_off = {"date": "9999-12-30", "end_date": "9999-12-31", "agent_id": agent.id}
    assert client.post("/vacations/time-off", json=far_time_off).status_code == 422
    assert db.query(Vacation).count() == 0


def test_vacation_edit_requires_admin(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="user", sector="Comercial")
    assert client.post("/vacations", json=_vacation_payload(agent.id)).status_code == 403


def test_update_vacation_recomputes_return_date(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    vacation = client.post("/vacations", json=_vacation_payload(agent.id)).json()

    response = client.patch(f"/vacations/{vacation['id']}", json={"expected_version": 1, "days": 20})

    assert response.status_code == 200
    assert response.json()["end_date"] == "2025-03-30"
    assert response.json()["version"] == 2


def test_stale_vacation_update_conflicts(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    vacation = client.post("/vacations", json=_vacation_payload(agent.id)).json()
    client.patch(f"/vacations/{vacation['id']}", json={"expected_version": 1, "notes": "primeira"})

    response = client.patch(f"/vacations/{vacation['id']}", json={"expected_version": 1, "notes": "segunda"})

    assert response.status_code == 409
    assert client.get(f"/vacations/{vacation['id']}").json()["notes"] == "primeira"


def test_update_vacation_validates_new_start(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    vacation = client.post("/vacations", json=_vacation_payload(agent.id)).json()

    response = client.patch(
        f"/vacations/{vacation['id']}", json={"expected_version": 1, "start_date": "2025-03-16"}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "rest_day"


def test_vacation_list_is_scoped_to_sector(client, login, db):
    carlos = add_agent(db, name="Carlos", sector="Comercial")
    sara = add_agent(db, name="Sara", sector="Suporte")
    login(role="dev")
    client.post("/vacations", json=_vacation_payload(carlos.id))
    client.post("/vacations", json=_vacation_payload(sara.id))

    login(role="admin", sector="Suporte")
    assert [v["agent_name"] for v in client.get("/vacations").json()] == ["Sara"]

    login(role="admin", sector="Administrativo")
    assert len(client.get("/vacations").json()) == 2


def test_agent_on_vacation_endpoint(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    client.post("/vacations", json=_vacation_payload(agent.id))

    def on_vacation(day):
        response = client.get(f"/vacations/agents/{agent.id}/on-vacation", params={"date": day})
        return response.json()["onVacation"]

    assert on_vacation("2025-03-09") is False
    assert on_vacation("2025-03-10") is True
    assert on_vacation("2025-04-08") is True
    assert on_vacation("2025-04-09") is False


def test_delete_vacation(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    vacation = client.post("/vacations", json=_vacation_payload(agent.id)).json()

    assert client.delete(f"/vacations/{vacation['id']}").status_code == 200
    assert client.get(f"/vacations/{vacation['id']}").status_code == 404


# ============================================================================
# REMINDERS
# ============================================================================


def test_reminders_fire_exactly_thirty_and_sixty_days_ahead(db):
    carlos = add_agent(db, name="Carlos", sector="Comercial")
    sara = add_agent(db, name="Sara", sector="Suporte")
    for agent, start in [(carlos, date(2025, 2, 8)), (sara, date(2025, 3, 10)), (carlos, date(2025, 2, 23))]:
        db.add(Vacation(agent_id=agent.id, start_date=start, end_date=start, days=30))
    db.commit()
    service = VacationService(db)

    reminders = service.get_upcoming_vacation_reminders(
        SessionContext(user_id="u1", email="dev@fieldops.test", role="dev"), today=date(2025, 1, 9)
    )

    assert [(r.agent_name, r.days_until_start, r.reminder_type) for r in reminders] == [
        ("Carlos", 30, "30_days"),
        ("Sara", 60, "60_days"),
    ]


def test_reminders_are_scoped_to_sector(db):
    carlos = add_agent(db, name="Carlos", sector="Comercial")
    db.add(Vacation(agent_id=carlos.id, start_date=date(2025, 2, 8), end_date=date(2025, 3, 10), days=30))
    db.commit()
    service = VacationService(db)

    support = SessionContext(user_id="u1", email="s@fieldops.test", role="admin", sector="Suporte")
    assert service.get_upcoming_vacation_reminders(support, today=date(2025, 1, 9)) == []


# ============================================================================
# TIME OFF / TIME BANK
# ============================================================================


def _balance(client, agent_id):
    [row] = [b for b in client.get("/vacations/time-bank").json() if b["agent_id"] == agent_id]
    return Decimal(row["accumulated_hours"]), row["bonuses"]


def test_time_off_debits_hours_per_working_day(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    # Friday to Monday: two working days
    response = client.post(
        "/vacations/time-off",
        json={"agent_id": agent.id, "date": "2025-03-14", "end_date": "2025-03-17", "approved": True},
    )

    assert response.status_code == 201
    assert response.json()["working_days"] == 2
    assert _balance(client, agent.id) == (Decimal("-16"), 0)

    [transaction] = client.get(f"/vacations/time-bank/{agent.id}/transactions").json()
    assert transaction["transaction_type"] == "debit_hours"
    assert transaction["related_time_off_id"] == response.json()["id"]


def test_justified_time_off_debits_bonus_days(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    response = client.post(
        "/vacations/time-off",
        json={"agent_id": agent.id, "date": "2025-03-10", "bonus_reason": "TRE/TSE", "leave_days": 3},
    )

    assert response.status_code == 201
    assert response.json()["leave_days"] is None
    assert _balance(client, agent.id) == (Decimal("0"), -1)
    [transaction] = client.get(f"/vacations/time-bank/{agent.id}/transactions").json()
    assert transaction["transaction_type"] == "debit_bonus"


def test_medical_leave_keeps_leave_days(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    response = client.post(
        "/vacations/time-off",
        json={"agent_id": agent.id, "date": "2025-03-10", "bonus_reason": "Licença Médica", "leave_days": 15},
    )

    assert response.json()["leave_days"] == 15


def test_time_off_validation(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    inverted = client.post(
        "/vacations/time-off", json={"agent_id": agent.id, "date": "2025-03-10", "end_date": "2025-03-09"}
    )
    bad_reason = client.post(
        "/vacations/time-off", json={"agent_id": agent.id, "date": "2025-03-10", "bonus_reason": "Praia"}
    )

    assert inverted.status_code == 422
    assert bad_reason.status_code == 422


def test_company_wide_time_off_has_no_deduction_and_is_visible_to_all(client, login, db):
    add_agent(db, name="Sara", sector="Suporte")
    login(role="dev")
    client.post("/vacations/time-off", json={"date": "2025-12-24", "approved": True})

    login(role="admin", sector="Suporte")
    listed = client.get("/vacations/time-off").json()

    assert len(listed) == 1
    assert listed[0]["agent_id"] is None
    assert db.query(TimeBankTransaction).count() == 0


def test_updating_time_off_does_not_debit_again(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    time_off = client.post("/vacations/time-off", json={"agent_id": agent.id, "date": "2025-03-10"}).json()

    response = client.put(
        f"/vacations/time-off/{time_off['id']}",
        json={"agent_id": agent.id, "date": "2025-03-10", "end_date": "2025-03-12", "approved": True},
    )

    assert response.status_code == 200
    assert response.json()["approved"] is True
    assert _balance(client, agent.id) == (Decimal("-8"), 0)


def test_deleting_time_off_keeps_transactions(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    time_off = client.post("/vacations/time-off", json={"agent_id": agent.id, "date": "2025-03-10"}).json()

    assert client.delete(f"/vacations/time-off/{time_off['id']}").status_code == 200

    [transaction] = client.get(f"/vacations/time-bank/{agent.id}/transactions").json()
    assert transaction["related_time_off_id"] is None


def test_manual_time_bank_adjustments(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")

    credit = client.post(f"/vacations/time-bank/{agent.id}/adjust", json={"hours": "4.5", "bonuses": 2})
    correction = client.post(f"/vacations/time-bank/{agent.id}/adjust", json={"hours": "-1"})

    assert credit.status_code == 200
    assert correction.status_code == 200
    assert Decimal(correction.json()["accumulated_hours"]) == Decimal("3.5")
    assert correction.json()["bonuses"] == 2
    types = sorted(t["transaction_type"] for t in client.get(f"/vacations/time-bank/{agent.id}/transactions").json())
    assert types == ["adjustment", "credit"]


def test_empty_adjustment_rejected(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="admin", sector="Comercial")
    response = client.post(f"/vacations/time-bank/{agent.id}/adjust", json={"hours": 0, "bonuses": 0})
    assert response.status_code == 422


def test_time_bank_lists_agents_without_balance(client, login, db):
    agent = add_agent(db, name="Carlos")
    login(role="user", sector="Comercial")
    assert _balance(client, agent.id) == (Decimal("0"), 0)
