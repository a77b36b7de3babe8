import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENABLE_RATE_LIMITING", "false")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from payroll_app.main import app
from payroll_app.core.database import Base, get_db
from payroll_app.core.otp_store import InMemoryOTPStore, get_otp_store
from payroll_app.notifications.email import get_email_sender
from payroll_app.payrolls.documents import ExtractedPayrollData, PayrollDocumentProcessor
from payroll_app.payrolls.routes import get_document_processor

MINIMAL_PDF = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF"


class FakeEmailSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, text):
        self.sent.append({"to": to, "subject": subject, "text": text})
        return True


class FakeExtractor:
    def __init__(self, basic_salary="5000", allowances="0"):
        self.data = ExtractedPayrollData(
            basic_salary=Decimal(basic_salary),
            allowances=Decimal(allowances)
        )
        self.calls = []

    def extract(self, file_name, content):
        self.calls.append(file_name)
        return self.data


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def otp_store():
    return InMemoryOTPStore()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def client(db_session, email_sender, otp_store, extractor):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_document_processor] = lambda: PayrollDocumentProcessor(extractor=extractor)

    yield TestClient(app)

    app.dependency_overrides.clear()


def register(client, name, email, employee_id, password="secret123"):
    response = client.post("/api/v1/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "employee_id": employee_id,
    })
    assert response.status_code == 201, response.text
    return response.json()


def login_headers(client, email, password="secret123"):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_user(client):
    return register(client, "Ama Mensah", "ama@twinhill.com", "ADMIN001")


@pytest.fixture
def employee_user(client):
    return register(client, "Kofi Boateng", "kofi@twinhill.com", "EMP-042")


@pytest.fixture
def admin_headers(client, admin_user):
    return login_headers(client, "ama@twinhill.com")


@pytest.fixture
def employee_headers(client, employee_user):
    return login_headers(client, "kofi@twinhill.com")
