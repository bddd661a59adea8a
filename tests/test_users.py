from datetime import date, time

from carehub.core.security import UserRole
from carehub.models import Appointment, Doctor, Patient, User, UserRoleAssignment
from tests.conftest import login

new_doctor = {
    "email": "newdoc@example.com",
    "password": "DoctorPass123",
    "first_name": "Meredith",
    "last_name": "Grey",
    "phone": "555-0100",
    "roles": ["doctor"],
    "specialization": "cardiology",
}

class TestUserManagement:

    def test_requires_admin(self, client, patient_headers):
        response = client.get("/api/v1/users", headers=patient_headers)
        assert response.status_code == 403

    def test_list_users_with_display_names(self, client, db, make_user, admin_headers):
        user = make_user("linked@example.com", first_name="Profile", last_name="Name", phone="555-1111")
        db.add(Patient(user_id=user.id, full_name="Patient Record Name", phone="555-2222"))
        db.commit()
        make_user("plain@example.com", first_name="", last_name="")

        response = client.get("/api/v1/users", headers=admin_headers)
        assert response.status_code == 200

        users = {u["email"]: u for u in response.json()}
        assert users["linked@example.com"]["display_name"] == "Patient Record Name"
        assert users["linked@example.com"]["phone"] == "555-2222"
        assert users["plain@example.com"]["display_name"] == "plain@example.com"
        assert users["admin@example.com"]["roles"] == ["admin"]

    def test_search_by_name_or_email(self, client, make_user, admin_headers):
        make_user("jdoe@example.com", first_name="Jane", last_name="Doe")
        make_user("rsmith@example.com", first_name="Rob", last_name="Smith")

        by_name = client.get("/api/v1/users", params={"search": "jane d"}, headers=admin_headers).json()
        assert [u["email"] for u in by_name] == ["jdoe@example.com"]

        by_email = client.get("/api/v1/users", params={"search": "RSMITH"}, headers=admin_headers).json()
        assert [u["email"] for u in by_email] == ["rsmith@example.com"]

    def test_create_doctor_user(self, client, db, admin_headers):
        response = client.post("/api/v1/users", json=new_doctor, headers=admin_headers)
        assert response.status_code == 201

        data = response.json()
        assert data["roles"] == ["doctor"]
        assert data["doctor"]["full_name"] == "Meredith Grey"
        assert data["patient"] is None

        doctor = db.query(Doctor).filter(Doctor.email == "newdoc@example.com").one()
        assert doctor.specialization == "cardiology"
        assert doctor.available_hours == "09:00-17:00"
        assert doctor.consultation_fee == 0

        # The new account can sign in with its role
        headers = login(client, "newdoc@example.com", "DoctorPass123")
        assert client.get("/api/v1/session", headers=headers).json()["role"] == "doctor"

    def test_create_user_with_patient_and_doctor_roles(self, client, db, admin_headers):
        data = dict(new_doctor, roles=["patient", "doctor"])

        response = client.post("/api/v1/users", json=data, headers=admin_headers)
        assert response.status_code == 201
        assert db.query(Patient).filter(Patient.email == "newdoc@example.com").count() == 1
        assert db.query(Doctor).filter(Doctor.email == "newdoc@example.com").count() == 1

    def test_doctor_requires_specialization(self, client, admin_headers):
        data = dict(new_doctor)
        del data["specialization"]

        response = client.post("/api/v1/users", json=data, headers=admin_headers)
        assert response.status_code == 422

    def test_at_least_one_role(self, client, admin_headers):
        response = client.post("/api/v1/users", json=dict(new_doctor, roles=[]), headers=admin_headers)
        assert response.status_code == 422

    def test_duplicate_email(self, client, admin_headers):
        client.post("/api/v1/users", json=new_doctor, headers=admin_headers)

        response = client.post("/api/v1/users", json=new_doctor, headers=admin_headers)
        assert response.status_code == 409

    def test_update_replaces_roles(self, client, db, make_user, admin_headers):
        user = make_user("promote@example.com")

        response = client.patch(
            f"/api/v1/users/{user.id}",
            json={"first_name": "Promoted", "roles": ["admin", "doctor"]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert sorted(response.json()["roles"]) == ["admin", "doctor"]
        assert response.json()["first_name"] == "Promoted"

        roles = db.query(UserRoleAssignment.role).filter(UserRoleAssignment.user_id == user.id).all()
        assert sorted(r.role.value for r in roles) == ["admin", "doctor"]

    def test_update_without_roles_keeps_them(self, client, make_user, admin_headers):
        user = make_user("keep@example.com", roles=[UserRole.DOCTOR])

        response = client.patch(f"/api/v1/users/{user.id}", json={"phone": "555-9999"}, headers=admin_headers)
        assert response.json()["roles"] == ["doctor"]
        assert response.json()["phone"] == "555-9999"

    def test_delete_user_removes_linked_records(self, client, db, make_user, make_doctor, admin_headers):
        doctor = make_doctor()
        patient_user = make_user("leaving@example.com")
        patient = Patient(user_id=patient_user.id, full_name="Leaving Patient")
        db.add(patient)
        db.commit()
        db.add(Appointment(
            patient_id=patient.id, doctor_id=doctor.id,
            appointment_date=date.today(), appointment_time=time(9, 0), symptoms="cough",
        ))
        db.commit()
        user_id = patient_user.id

        response = client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
        assert response.status_code == 200

        db.expire_all()
        assert db.query(User).filter(User.email == "leaving@example.com").first() is None
        assert db.query(UserRoleAssignment).filter(UserRoleAssignment.user_id == user_id).count() == 0
        assert db.query(Patient).count() == 0
        assert db.query(Appointment).count() == 0
        assert db.query(Doctor).count() == 1

    def test_admin_cannot_delete_self(self, client, db, admin_headers):
        admin = db.query(User).filter(User.email == "admin@example.com").one()

        response = client.delete(f"/api/v1/users/{admin.id}", headers=admin_headers)
        assert response.status_code == 400

    def test_delete_unknown_user(self, client, admin_headers):
        assert client.delete("/api/v1/users/999", headers=admin_headers).status_code == 404

    def test_deactivate_user(self, client, make_user, admin_headers):
        user = make_user("inactive@example.com")

        response = client.patch(
            f"/api/v1/users/{user.id}/status", params={"is_active": False}, headers=admin_headers
        )
        assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/login", json={"email": "inactive@example.com", "password": "TestPassword123"}
        )
        assert response.status_code == 401
