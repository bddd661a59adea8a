import os

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

import pytest
from fastapi.testclient import TestClient

from carehub.main import app
from carehub.core.database import Base, SessionLocal, engine, get_redis
from carehub.core.security import UserRole
from carehub.models import Doctor
from carehub.services.user_service import create_account

class RedisDouble:
    """Dict backed stand-in for the few Redis commands the app uses."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, "0")) + 1)
        return int(self.data[key])

@pytest.fixture
def redis_double():
    double = RedisDouble()
    app.dependency_overrides[get_redis] = lambda: double
    yield double
    app.dependency_overrides.pop(get_redis, None)

@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client(test_db, redis_double):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

PASSWORD = "TestPassword123"

def login(client, email, password=PASSWORD):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}

@pytest.fixture
def make_user(db):
    """Insert a user with the given roles straight into the database."""
    def _make_user(email, roles=(UserRole.PATIENT,), first_name="Test", last_name="User", **kwargs):
        user = create_account(
            db,
            email=email,
            password=PASSWORD,
            roles=list(roles),
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )
        db.commit()
        db.refresh(user)
        return user
    return _make_user

@pytest.fixture
def make_doctor(db, make_user):
    def _make_doctor(
        email="doctor@example.com",
        full_name="Dr Gregory House",
        specialization="neurology",
        is_active=True,
        with_account=True,
        **kwargs,
    ):
        user_id = None
        if with_account:
            user_id = make_user(email, roles=[UserRole.DOCTOR], first_name="Gregory", last_name="House").id
        doctor = Doctor(
            user_id=user_id,
            full_name=full_name,
            email=email,
            specialization=specialization,
            qualifications=kwargs.pop("qualifications", "MD"),
            consultation_fee=kwargs.pop("consultation_fee", 120),
            symptoms=kwargs.pop("symptoms", ["headache"]),
            available_days=kwargs.pop("available_days", ["monday"]),
            is_active=is_active,
            **kwargs,
        )
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor
    return _make_doctor

@pytest.fixture
def admin_headers(client, make_user):
    make_user("admin@example.com", roles=[UserRole.ADMIN], first_name="Ada", last_name="Admin")
    return login(client, "admin@example.com")

@pytest.fixture
def patient_headers(client, make_user):
    make_user("patient@example.com", roles=[UserRole.PATIENT], first_name="Pat", last_name="Smith")
    return login(client, "patient@example.com")
