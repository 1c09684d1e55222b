import os

# Settings and the engine are built at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from parkpass.auth.schemas import Actor
from parkpass.auth.utils import create_access_token, get_password_hash
from parkpass.bookings.booking_service import BookingService
from parkpass.bookings.schemas import BookingCreateRequest
from parkpass.bookings.ticket_service import TicketService
from parkpass.database import Base, get_db
from parkpass.main import app
from parkpass.models import AdminUser, District, Park

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2030, 6, 1)

@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

@pytest.fixture
def district(db):
    district = District(name="Thiruvananthapuram", description="Capital district")
    db.add(district)
    db.commit()
    db.refresh(district)
    return district

def make_park(db, district, **overrides):
    values = {
        "name": "Napier Zoological Park",
        "district_id": district.id,
        "adult_price": Decimal("120.00"),
        "child_price": Decimal("50.00"),
        "capacity": 10,
        "is_active": True,
        "features": ["Zoo"],
        "opening_hours": "09:00 - 17:00",
    }
    values.update(overrides)
    park = Park(**values)
    db.add(park)
    db.commit()
    db.refresh(park)
    return park

@pytest.fixture
def park(db, district):
    return make_park(db, district)

@pytest.fixture
def other_park(db, district):
    return make_park(db, district, name="Veli Tourist Village", adult_price=Decimal("40.00"), child_price=Decimal("20.00"))

@pytest.fixture
def booking_service(db):
    return BookingService(db)

@pytest.fixture
def ticket_service(db):
    return TicketService(db)

def booking_request(park, **overrides):
    values = {
        "park_id": park.id,
        "visit_date": TODAY + timedelta(days=1),
        "visitor_name": "Anu Thomas",
        "visitor_email": "anu@example.com",
        "visitor_phone": "9876543210",
        "adults": 2,
        "children": 1,
    }
    values.update(overrides)
    return BookingCreateRequest(**values)

@pytest.fixture
def make_booking(booking_service, park):
    def _make(target_park=None, **overrides):
        result = booking_service.create_booking(booking_request(target_park or park, **overrides), today=TODAY)
        assert not hasattr(result, "code"), result
        return result
    return _make

@pytest.fixture
def super_admin():
    return Actor(user_id=1, role="super-admin")

@pytest.fixture
def checker(park):
    return Actor(user_id=3, role="ticket-checker", assigned_parks=frozenset({park.id}))

@pytest.fixture
def park_admin(park):
    return Actor(user_id=2, role="park-admin", assigned_parks=frozenset({park.id}))

def create_staff(db, email, role, parks=(), password="Secret123!"):
    user = AdminUser(
        name=email.split("@")[0],
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        is_active=True,
        assigned_parks=list(parks),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}
