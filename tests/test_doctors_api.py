from datetime import datetime

from clinic.models.appointment import Appointment

from .factories import auth_headers, create_admin, create_appointment, create_doctor, create_patient

new_doctor_data = {
    "email": "lisa.cuddy@example.com",
    "password": "Password123",
    "first_name": "Lisa",
    "last_name": "Cuddy",
    "specialty": "Endocrinology",
    "phone_number": "5552223333",
    "available_times": ["9:00-10:00", "14:00 - 15:00"]
}

class TestDoctorSearch:

    def test_filter_by_time_of_day(self, client, db):
        create_doctor(db, available_times=["09:00 - 10:00"])
        create_doctor(db, first_name="James", last_name="Wilson", specialty="Oncology",
                      available_times=["15:00 - 16:00"])

        response = client.get("/api/v1/doctors", params={"name": "", "specialty": "", "time": "AM"})
        assert response.status_code == 200
        assert [d["last_name"] for d in response.json()] == ["House"]

        response = client.get("/api/v1/doctors", params={"time": "pm"})
        assert [d["last_name"] for d in response.json()] == ["Wilson"]

    def test_invalid_time_of_day(self, client, db):
        response = client.get("/api/v1/doctors", params={"time": "evening"})
        assert response.status_code == 400

    def test_filter_by_specialty(self, client, db):
        create_doctor(db)
        create_doctor(db, first_name="James", last_name="Wilson", specialty="Oncology")

        response = client.get("/api/v1/doctors", params={"specialty": "ONCOLOGY"})
        assert [d["full_name"] for d in response.json()] == ["James Wilson"]

    def test_availability(self, client, db):
        doctor = create_doctor(db, available_times=["09:00 - 10:00", "10:00 - 11:00"])
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2031, 7, 1, 10, 0))

        response = client.get(f"/api/v1/doctors/{doctor.id}/availability", params={"date": "2031-07-01"})
        assert response.status_code == 200
        assert response.json() == {"doctor_id": doctor.id, "date": "2031-07-01", "slots": ["09:00 - 10:00"]}

    def test_availability_of_unknown_doctor_is_empty(self, client, db):
        response = client.get("/api/v1/doctors/999/availability", params={"date": "2031-07-01"})
        assert response.status_code == 200
        assert response.json()["slots"] == []


class TestDoctorAdministration:

    def test_admin_creates_doctor(self, client, db):
        create_admin(db)
        headers = auth_headers(client, "admin@example.com")

        response = client.post("/api/v1/doctors", json=new_doctor_data, headers=headers)
        assert response.status_code == 201

        data = response.json()
        assert data["full_name"] == "Lisa Cuddy"
        assert data["available_times"] == ["09:00 - 10:00", "14:00 - 15:00"]

        # The new doctor can sign in
        auth_headers(client, new_doctor_data["email"])

    def test_malformed_pattern_rejected(self, client, db):
        create_admin(db)
        invalid_data = new_doctor_data.copy()
        invalid_data["available_times"] = ["10:00 - 09:00"]

        response = client.post("/api/v1/doctors", json=invalid_data, headers=auth_headers(client, "admin@example.com"))
        assert response.status_code == 422

    def test_non_admin_cannot_create(self, client, db):
        create_patient(db)

        response = client.post(
            "/api/v1/doctors",
            json=new_doctor_data,
            headers=auth_headers(client, "jane.doe@example.org")
        )
        assert response.status_code == 403

    def test_new_availability_is_used_immediately(self, client, db):
        create_admin(db)
        doctor = create_doctor(db, available_times=["09:00 - 10:00"])

        response = client.put(
            f"/api/v1/doctors/{doctor.id}",
            json={"available_times": ["16:00 - 17:00"]},
            headers=auth_headers(client, "admin@example.com")
        )
        assert response.status_code == 200

        response = client.get(f"/api/v1/doctors/{doctor.id}/availability", params={"date": "2031-07-01"})
        assert response.json()["slots"] == ["16:00 - 17:00"]

    def test_update_unknown_doctor(self, client, db):
        create_admin(db)

        response = client.put(
            "/api/v1/doctors/999",
            json={"specialty": "Surgery"},
            headers=auth_headers(client, "admin@example.com")
        )
        assert response.status_code == 404

    def test_delete_removes_appointments(self, client, db):
        create_admin(db)
        doctor = create_doctor(db)
        patient = create_patient(db)
        create_appointment(db, doctor, patient, datetime(2031, 7, 1, 9, 0))

        response = client.delete(f"/api/v1/doctors/{doctor.id}", headers=auth_headers(client, "admin@example.com"))
        assert response.status_code == 200

        db.expire_all()
        assert db.query(Appointment).count() == 0


class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_info(self, client):
        response = client.get("/api/v1/info")
        assert response.status_code == 200
        endpoints = response.json()["endpoints"]
        assert endpoints["appointments"] == "/api/v1/appointments"
        assert endpoints["prescriptions"] == "/api/v1/prescriptions"
        assert endpoints["openapi"] == "/api/v1/openapi.json"

    def test_root_and_timing_header(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Clinic Scheduling Service"
        assert "X-Process-Time" in response.headers

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nowhere")
        assert response.status_code == 404
        assert response.json()["path"] == "/api/v1/nowhere"
