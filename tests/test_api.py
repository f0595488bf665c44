"""Test /api/v1 endpoints."""
from datetime import datetime

from clinicslots.core.config import settings
from conftest import OTHER_TENANT

DAY = "2026-03-10"


def book(client, patient, start: str, duration: int = 30, **extra):
    return client.post(
        "/api/v1/appointments",
        json={"patient_id": patient["id"], "date": start, "duration": duration, **extra},
    )


def busy_slots(client, **params) -> dict[str, str]:
    response = client.get("/api/v1/slots/available", params={"date": DAY, **params})
    assert response.status_code == 200
    return {
        datetime.fromisoformat(s["start"]).strftime("%H:%M"): s["appointment_id"]
        for s in response.json()["slots"]
        if not s["available"]
    }


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_tenant_header_is_required(client):
    response = client.get("/api/v1/slots/available", params={"date": DAY}, headers={"X-Tenant-ID": ""})

    assert response.status_code == 400


class TestPatients:
    def test_register_and_read(self, client, patient):
        response = client.get(f"/api/v1/patients/{patient['id']}")

        assert response.status_code == 200
        assert response.json()["record_number"] == "HC-001"
        assert response.json()["status"] == "active"

    def test_duplicate_record_number(self, client, patient):
        response = client.post(
            "/api/v1/patients",
            json={"record_number": "HC-001", "name": "Other", "phone": "555-0199"},
        )

        assert response.status_code == 409

    def test_search_by_name_or_record_number(self, client, patient):
        client.post(
            "/api/v1/patients",
            json={"record_number": "HC-002", "name": "Luis Pardo", "phone": "555-0102"},
        )

        by_name = client.get("/api/v1/patients", params={"search": "torres"}).json()
        by_record = client.get("/api/v1/patients", params={"search": "hc-002"}).json()
        everyone = client.get("/api/v1/patients").json()

        assert [p["name"] for p in by_name] == ["Ana Torres"]
        assert [p["name"] for p in by_record] == ["Luis Pardo"]
        assert [p["name"] for p in everyone] == ["Ana Torres", "Luis Pardo"]

    def test_patients_are_isolated_per_tenant(self, client, patient):
        response = client.get(f"/api/v1/patients/{patient['id']}", headers={"X-Tenant-ID": OTHER_TENANT})
        listing = client.get("/api/v1/patients", headers={"X-Tenant-ID": OTHER_TENANT})

        assert response.status_code == 404
        assert listing.json() == []


class TestSlots:
    def test_empty_day(self, client):
        response = client.get("/api/v1/slots/available", params={"date": DAY})

        data = response.json()
        assert response.status_code == 200
        assert data["date"] == DAY
        assert data["timezone"] == "UTC"
        assert len(data["slots"]) == 20
        assert all(s["available"] for s in data["slots"])

    def test_booked_appointment_occupies_its_slots(self, client, patient):
        created = book(client, patient, f"{DAY}T09:15:00", 60).json()

        assert busy_slots(client) == {
            "09:00": created["id"],
            "09:30": created["id"],
            "10:00": created["id"],
        }

    def test_cancelled_appointment_frees_slot(self, client, patient):
        created = book(client, patient, f"{DAY}T11:00:00").json()

        response = client.post(f"/api/v1/appointments/{created['id']}/cancel")

        assert response.status_code == 204
        assert busy_slots(client) == {}
        assert client.get(f"/api/v1/appointments/{created['id']}").json()["status"] == "cancelled"

    def test_slots_filtered_by_doctor(self, client, patient, doctor):
        other = client.post("/api/v1/doctors", json={"name": "Dr. López", "specialty": "Pediatría"}).json()
        created = book(client, patient, f"{DAY}T09:00:00", doctor_id=doctor["id"]).json()

        assert busy_slots(client, doctor_id=doctor["id"]) == {"09:00": created["id"]}
        assert busy_slots(client, doctor_id=other["id"]) == {}

    def test_overnight_appointment_occupies_morning(self, client, patient):
        overnight = book(client, patient, "2026-03-09T23:00:00", 600).json()

        assert busy_slots(client) == {"08:00": overnight["id"], "08:30": overnight["id"]}
        assert book(client, patient, f"{DAY}T08:00:00").status_code == 409
        assert book(client, patient, f"{DAY}T09:00:00").status_code == 201

    def test_aware_booking_is_stored_as_utc(self, client, patient):
        created = book(client, patient, f"{DAY}T04:00:00-05:00").json()

        assert created["date"].startswith(f"{DAY}T09:00:00")
        assert busy_slots(client) == {"09:00": created["id"]}

    def test_other_tenant_sees_free_grid(self, client, patient):
        book(client, patient, f"{DAY}T09:00:00")

        response = client.get(
            "/api/v1/slots/available", params={"date": DAY}, headers={"X-Tenant-ID": OTHER_TENANT}
        )

        assert all(s["available"] for s in response.json()["slots"])

    def test_unknown_timezone_is_rejected(self, client, monkeypatch):
        monkeypatch.setattr(settings, "clinic_timezone", "Mars/Olympus_Mons")

        response = client.get("/api/v1/slots/available", params={"date": DAY})

        assert response.status_code == 422
        assert response.json()["field"] == "timezone"


class TestSlotSelection:
    def test_free_slot_returns_draft(self, client):
        response = client.get("/api/v1/slots/selection", params={"start": f"{DAY}T14:00:00"})

        data = response.json()
        assert response.status_code == 200
        assert data["action"] == "create"
        assert data["draft"]["duration"] == settings.default_appointment_duration
        assert data["draft"]["appointment_type"] == "initial"
        assert datetime.fromisoformat(data["draft"]["date"]).hour == 14

    def test_occupied_slot_returns_appointment(self, client, patient):
        created = book(client, patient, f"{DAY}T14:10:00", 15).json()

        response = client.get("/api/v1/slots/selection", params={"start": f"{DAY}T14:00:00"})

        data = response.json()
        assert data["action"] == "edit"
        assert data["appointment"]["id"] == created["id"]
        assert data["appointment"]["patient_name"] == "Ana Torres"

    def test_start_off_the_grid(self, client):
        response = client.get("/api/v1/slots/selection", params={"start": f"{DAY}T14:10:00"})

        assert response.status_code == 404

    def test_naive_start_is_utc_like_bookings(self, client, patient, monkeypatch):
        monkeypatch.setattr(settings, "clinic_timezone", "America/Bogota")
        created = book(client, patient, f"{DAY}T14:00:00").json()

        response = client.get("/api/v1/slots/selection", params={"start": f"{DAY}T14:00:00"})

        data = response.json()
        assert response.status_code == 200
        assert data["action"] == "edit"
        assert data["appointment"]["id"] == created["id"]


class TestAppointments:
    def test_create_starts_scheduled(self, client, patient):
        response = book(client, patient, f"{DAY}T09:00:00", appointment_type="followup", notes="Control")

        data = response.json()
        assert response.status_code == 201
        assert data["status"] == "scheduled"
        assert data["appointment_type"] == "followup"
        assert data["patient_name"] == "Ana Torres"
        assert data["reminder_sent"] is False

    def test_unknown_patient(self, client):
        response = book(client, {"id": "missing"}, f"{DAY}T09:00:00")

        assert response.status_code == 409

    def test_overlap_with_same_doctor_conflicts(self, client, patient, doctor):
        other = client.post("/api/v1/doctors", json={"name": "Dr. López", "specialty": "Pediatría"}).json()
        assert book(client, patient, f"{DAY}T09:00:00", 60, doctor_id=doctor["id"]).status_code == 201

        clash = book(client, patient, f"{DAY}T09:30:00", 30, doctor_id=doctor["id"])
        other_doctor = book(client, patient, f"{DAY}T09:30:00", 30, doctor_id=other["id"])
        back_to_back = book(client, patient, f"{DAY}T10:00:00", 30, doctor_id=doctor["id"])

        assert clash.status_code == 409
        assert other_doctor.status_code == 201
        assert back_to_back.status_code == 201

    def test_unknown_doctor(self, client, patient):
        response = book(client, patient, f"{DAY}T09:00:00", doctor_id="dr-nobody")

        assert response.status_code == 409

    def test_cancelled_appointment_does_not_conflict(self, client, patient):
        first = book(client, patient, f"{DAY}T09:00:00").json()
        client.post(f"/api/v1/appointments/{first['id']}/cancel")

        assert book(client, patient, f"{DAY}T09:00:00").status_code == 201

    def test_invalid_duration_is_rejected(self, client, patient):
        assert book(client, patient, f"{DAY}T09:00:00", 0).status_code == 422
        assert book(client, patient, f"{DAY}T09:00:00", -30).status_code == 422

    def test_list_for_day_in_start_order(self, client, patient):
        book(client, patient, f"{DAY}T15:00:00")
        book(client, patient, f"{DAY}T09:00:00")
        book(client, patient, "2026-03-11T09:00:00")

        response = client.get("/api/v1/appointments", params={"date": DAY})

        starts = [datetime.fromisoformat(a["date"]).hour for a in response.json()]
        assert starts == [9, 15]

    def test_reschedule(self, client, patient):
        created = book(client, patient, f"{DAY}T09:00:00").json()

        response = client.patch(
            f"/api/v1/appointments/{created['id']}",
            json={"date": f"{DAY}T16:00:00", "duration": 45},
        )

        assert response.status_code == 200
        assert response.json()["duration"] == 45
        assert busy_slots(client) == {"16:00": created["id"], "16:30": created["id"]}

    def test_reschedule_into_occupied_time(self, client, patient):
        book(client, patient, f"{DAY}T16:00:00")
        created = book(client, patient, f"{DAY}T09:00:00").json()

        response = client.patch(f"/api/v1/appointments/{created['id']}", json={"date": f"{DAY}T16:15:00"})

        assert response.status_code == 409
        assert client.get(f"/api/v1/appointments/{created['id']}").json()["date"].startswith(f"{DAY}T09:00")

    def test_clear_notes(self, client, patient):
        created = book(client, patient, f"{DAY}T09:00:00", notes="Ayuno").json()

        response = client.patch(
            f"/api/v1/appointments/{created['id']}",
            json={"notes": None, "status": None, "duration": None},
        )

        data = response.json()
        assert response.status_code == 200
        assert data["notes"] is None
        assert data["status"] == "scheduled"
        assert data["duration"] == 30

    def test_update_status(self, client, patient):
        created = book(client, patient, f"{DAY}T09:00:00").json()

        response = client.patch(f"/api/v1/appointments/{created['id']}", json={"status": "missed"})

        assert response.json()["status"] == "missed"
        assert busy_slots(client) == {}

    def test_missing_appointment(self, client):
        assert client.get("/api/v1/appointments/nope").status_code == 404
        assert client.patch("/api/v1/appointments/nope", json={"notes": "x"}).status_code == 404
        assert client.post("/api/v1/appointments/nope/cancel").status_code == 404

    def test_appointment_types(self, client):
        response = client.get("/api/v1/appointments/types")

        types = {t["value"]: t for t in response.json()}
        assert len(types) == 8
        assert types["lab_results"]["label"] == "Lab results"
        assert types["urgent"]["color"] == "#F56565"


class TestDoctors:
    def test_register_and_list(self, client, doctor):
        client.post("/api/v1/doctors", json={"name": "Dr. López", "specialty": "Pediatría", "color": "#48BB78"})

        listing = client.get("/api/v1/doctors").json()
        read = client.get(f"/api/v1/doctors/{doctor['id']}").json()

        assert [d["name"] for d in listing] == ["Dr. López", "Dra. García"]
        assert read["color"] == "#4299E1"
        assert read["specialty"] == "Medicina general"

    def test_doctors_are_isolated_per_tenant(self, client, doctor):
        response = client.get(f"/api/v1/doctors/{doctor['id']}", headers={"X-Tenant-ID": OTHER_TENANT})

        assert response.status_code == 404
        assert client.get("/api/v1/doctors", headers={"X-Tenant-ID": OTHER_TENANT}).json() == []

    def test_other_tenants_doctor_cannot_be_booked(self, client, doctor):
        foreign_patient = client.post(
            "/api/v1/patients",
            json={"record_number": "HC-900", "name": "Marta Ruiz", "phone": "555-0900"},
            headers={"X-Tenant-ID": OTHER_TENANT},
        ).json()

        response = client.post(
            "/api/v1/appointments",
            json={"patient_id": foreign_patient["id"], "doctor_id": doctor["id"], "date": f"{DAY}T09:00:00", "duration": 30},
            headers={"X-Tenant-ID": OTHER_TENANT},
        )

        assert response.status_code == 409
