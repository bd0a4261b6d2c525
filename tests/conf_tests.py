import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from rentmyride.main import app
from rentmyride.db import Base, get_db, init_database, make_engine
from rentmyride.models.business import Business
from rentmyride.models.user import User, UserRole
from rentmyride.models.vehicle import Vehicle
from rentmyride.utils.auth import create_access_token, get_password_hash

# Test database setup
if not os.path.exists("./out"):
    os.makedirs("./out")

SQLALCHEMY_DATABASE_URL = "sqlite:///./out/tests.db"
engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create test tables
init_database(engine)


# Dependency override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

client = TestClient(app)

TEST_PASSWORD = "testpassword"


def future_dt(days, hour=10):
    """Naive UTC datetime ``days`` from today at ``hour``:00, the form stored in the database."""
    base = datetime.now(timezone.utc).replace(tzinfo=None, hour=hour, minute=0, second=0, microsecond=0)
    return base + timedelta(days=days)


def future(days, hour=10):
    return future_dt(days, hour).isoformat()


def headers_for(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def request_booking(headers, vehicle_id, start_days, end_days, **extra):
    payload = {"vehicle_id": vehicle_id, "start_date": future(start_days), "end_date": future(end_days)}
    payload.update(extra)
    return client.post("/api/bookings/request", json=payload, headers=headers)


# Fixtures
@pytest.fixture(autouse=True)
def clear_db():
    """Clear all data from all tables before each test"""
    with engine.connect() as conn:
        trans = conn.begin()
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        trans.commit()


@pytest.fixture
def test_db():
    """Provide a database session for testing"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_next_user():
    """Helper function to generate unique emails"""
    if not hasattr(get_next_user, "user_count"):
        get_next_user.user_count = 0
    get_next_user.user_count += 1
    return get_next_user.user_count


def make_user(db, role=UserRole.CUSTOMER, password=TEST_PASSWORD):
    n = get_next_user()
    user = User(
        name=f"User {n}",
        email=f"user_{n}@rentmyride.com",
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user_data():
    """Fixture for signup data with a unique email"""
    n = get_next_user()
    return {
        "name": f"User {n}",
        "email": f"user_{n}@rentmyride.com",
        "password": TEST_PASSWORD,
    }


@pytest.fixture
def customer(test_db):
    return make_user(test_db)


@pytest.fixture
def owner(test_db):
    return make_user(test_db, role=UserRole.OWNER)


@pytest.fixture
def other_user(test_db):
    return make_user(test_db)


@pytest.fixture
def auth_headers(customer):
    """Fixture to get authentication headers for the customer through the login endpoint"""
    login_response = client.post(
        "/api/auth/login",
        json={"email": customer.email, "password": TEST_PASSWORD},
    )
    token = login_response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner):
    return headers_for(owner)


@pytest.fixture
def business(test_db, owner):
    db_business = Business(name="OwnerRentals", city="Springfield", owner_id=owner.id)
    test_db.add(db_business)
    test_db.commit()
    test_db.refresh(db_business)
    return db_business


@pytest.fixture
def vehicle(test_db, business):
    db_vehicle = Vehicle(
        business_id=business.id,
        make="Toyota",
        model="Yaris",
        year=2023,
        price_per_day=Decimal("15.00"),
    )
    test_db.add(db_vehicle)
    test_db.commit()
    test_db.refresh(db_vehicle)
    return db_vehicle
