import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["FRONTEND_URL"] = "http://localhost:5173"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import Base, get_db
from app.core.auth.service import AuthService
from app.main import app
from app.shared.database.models import Driver, Shipment, User, Vehicle
from app.shared.utils.helpers import utcnow

PASSWORD = "Secret@123"
PASSWORD_HASH = AuthService.get_password_hash(PASSWORD)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        try:
            yield db
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email, role="user", first_name="Test", last_name="User", **fields):
    user = User(
        email=email,
        password_hash=PASSWORD_HASH,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
        **fields
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = AuthService.create_access_token({
        "user_id": str(user.id),
        "email": user.email,
        "role": user.role
    })
    return {"Authorization": f"Bearer {token}"}


def make_shipment(db, sender, **fields):
    values = {
        "tracking_number": f"BLY-20260101-{db.query(Shipment).count() + 1:05d}",
        "sender_id": sender.id,
        "origin": "Lagos",
        "destination": "Ibadan",
        "receiver_name": "Tunde Bello",
        "weight": 100,
        "service_type": "5 tons",
        "package_type": "parcel",
        "status": "pending",
        "payment_status": "unpaid",
        "shipping_fee": 50000,
        "created_at": utcnow(),
    }
    values.update(fields)
    shipment = Shipment(**values)
    db.add(shipment)
    db.commit()
    db.refresh(shipment)
    return shipment


@pytest.fixture
def admin(db):
    return make_user(db, "admin@blynelogistics.com", role="admin", first_name="Ada", last_name="Admin")


@pytest.fixture
def customer(db):
    return make_user(db, "customer@blynelogistics.com", first_name="Chidi", last_name="Okafor")


@pytest.fixture
def other_customer(db):
    return make_user(db, "other@blynelogistics.com", first_name="Bisi", last_name="Adeyemi")


@pytest.fixture
def driver_user(db):
    return make_user(db, "driver@blynelogistics.com", role="driver", first_name="Emeka", last_name="Driver")


@pytest.fixture
def driver(db, driver_user):
    profile = Driver(user_id=driver_user.id, license_number="LAG-DRV-001", status="active")
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def vehicle(db):
    truck = Vehicle(make="Isuzu", model="NPR", plate_number="LAG-452-KJ", type="truck", capacity_kg=5000)
    db.add(truck)
    db.commit()
    db.refresh(truck)
    return truck


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def driver_headers(driver, driver_user):
    return auth_headers(driver_user)
