import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from carehub.core.security import UserRole, pick_primary_role
from carehub.services.session_service import SessionService, with_retry
from tests.conftest import login

def transient_error():
    return OperationalError("SELECT 1", {}, Exception("connection reset"))

class TestPrimaryRole:

    @pytest.mark.parametrize("roles, expected", [
        (["patient"], UserRole.PATIENT),
        (["doctor", "patient"], UserRole.DOCTOR),
        (["patient", "doctor", "admin"], UserRole.ADMIN),
        ([UserRole.DOCTOR], UserRole.DOCTOR),
        ([], UserRole.PATIENT),
        (["nurse"], UserRole.PATIENT),
    ])
    def test_priority(self, roles, expected):
        assert pick_primary_role(roles) == expected

class TestWithRetry:

    def test_returns_first_success(self):
        assert with_retry(lambda: 42, attempts=3, sleep=lambda s: None) == 42

    def test_retries_transient_errors_with_growing_pause(self):
        calls = []
        pauses = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise transient_error()
            return "ok"

        assert with_retry(flaky, attempts=3, backoff=1.0, sleep=pauses.append) == "ok"
        assert len(calls) == 3
        assert pauses == [1.0, 2.0]

    def test_gives_up_after_last_attempt(self):
        calls = []

        def always_down():
            calls.append(1)
            raise transient_error()

        with pytest.raises(OperationalError):
            with_retry(always_down, attempts=3, sleep=lambda s: None)
        assert len(calls) == 3

    def test_other_errors_are_not_retried(self):
        calls = []

        def broken():
            calls.append(1)
            raise IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(IntegrityError):
            with_retry(broken, attempts=3, sleep=lambda s: None)
        assert len(calls) == 1

    def test_zero_attempts_rejected(self):
        calls = []

        with pytest.raises(ValueError):
            with_retry(lambda: calls.append(1), attempts=0, sleep=lambda s: None)
        assert calls == []

class TestSessionService:

    def test_load_resolves_highest_role(self, db, make_user):
        user = make_user("multi@example.com", roles=[UserRole.PATIENT, UserRole.DOCTOR])

        session = SessionService(db).load(user)
        assert session.role == UserRole.DOCTOR
        assert sorted(session.roles) == ["doctor", "patient"]
        assert session.profile.id == user.id

    def test_user_without_roles_is_patient(self, db, make_user):
        user = make_user("norole@example.com", roles=[])

        session = SessionService(db).load(user)
        assert session.roles == []
        assert session.role == UserRole.PATIENT

    def test_load_survives_transient_error(self, db, make_user, monkeypatch):
        user = make_user("flaky@example.com", roles=[UserRole.ADMIN])
        real_query = db.query
        real_rollback = db.rollback
        failures = []
        rollbacks = []

        def query_once_down(*entities, **kwargs):
            if not failures:
                failures.append(1)
                raise transient_error()
            return real_query(*entities, **kwargs)

        def spy_rollback():
            rollbacks.append(1)
            real_rollback()

        monkeypatch.setattr(db, "query", query_once_down)
        monkeypatch.setattr(db, "rollback", spy_rollback)
        pauses = []

        session = SessionService(db, sleep=pauses.append).load(user)
        assert session.role == UserRole.ADMIN
        assert session.profile.email == "flaky@example.com"
        assert pauses == [1.0]
        assert len(rollbacks) == 1

class TestSessionEndpoint:

    def test_session_for_admin(self, client, make_user):
        make_user("boss@example.com", roles=[UserRole.PATIENT, UserRole.ADMIN], first_name="Ada", last_name="Lovelace")
        headers = login(client, "boss@example.com")

        response = client.get("/api/v1/session", headers=headers)
        assert response.status_code == 200

        data = response.json()
        assert data["role"] == "admin"
        assert sorted(data["roles"]) == ["admin", "patient"]
        assert data["display_name"] == "Ada Lovelace"
        assert [item["name"] for item in data["navigation"]] == [
            "Admin Dashboard", "User Management", "All Appointments", "Patient Records",
        ]

    def test_session_for_patient(self, client, patient_headers):
        data = client.get("/api/v1/session", headers=patient_headers).json()
        assert data["role"] == "patient"
        assert data["navigation"][0] == {"name": "Patient Dashboard", "href": "/patient-dashboard"}

    def test_session_requires_token(self, client):
        response = client.get("/api/v1/session")
        assert response.status_code in (401, 403)
