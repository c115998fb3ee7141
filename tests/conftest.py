import os

# Settings are read once at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-chemist-pos")
os.environ.setdefault("DATABASE_URL", "sqlite:///./chemist_test.db")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("AFRICAS_TALKING_API_KEY", None)
os.environ.pop("SALE_ALERT_PHONE", None)

from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.orm import sessionmaker

import chemist.models.registry  # noqa: F401
from chemist.core.config import settings
from chemist.database import Base, build_engine
from chemist.services import notifications
from chemist.services.accounts import create_user
from chemist.services.inventory import create_medicine
from chemist.services.settings import update_admin_settings


ADMIN_PHONE = "+254711000111"
OPERATOR_PHONE = "+254742048000"


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several sessions (and threads) share one database."""
    engine = build_engine(f"sqlite:///{tmp_path / 'chemist.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


# =============================================================================
# NOTIFICATIONS
# =============================================================================

@pytest.fixture(autouse=True)
def sms_outbox(monkeypatch):
    """Every test gets a recording gateway instead of the real SMS API."""
    sent = []
    monkeypatch.setattr(
        notifications.dispatcher,
        "gateway",
        lambda to_phone, message: sent.append((to_phone, message)),
    )
    return sent


@pytest.fixture
def operator_phone(monkeypatch):
    monkeypatch.setattr(settings, "SALE_ALERT_PHONE", OPERATOR_PHONE)
    return OPERATOR_PHONE


# =============================================================================
# ACCOUNTS & STOCK
# =============================================================================

@pytest.fixture
def admin(db):
    return create_user(db, "admin@pharmacy.co.ke", "Str0ng-admin-pass", "Grace Admin", "admin")


@pytest.fixture
def cashier(db):
    return create_user(db, "cashier@pharmacy.co.ke", "Str0ng-cashier-pass", "Tom Cashier", "cashier")


@pytest.fixture
def admin_phone(db):
    update_admin_settings(db, admin_phone=ADMIN_PHONE, low_stock_threshold=10)
    return ADMIN_PHONE


@pytest.fixture
def stock(db):
    """Medicine name -> Medicine for the standard test shelf."""

    def add(name, quantity, unit_cost):
        return create_medicine(db, name=name, unit_cost=Decimal(unit_cost), quantity=quantity).medicine

    return {
        "Paracetamol": add("Paracetamol", 50, "10.00"),
        "Amoxicillin": add("Amoxicillin", 30, "25.00"),
        "Cetirizine": add("Cetirizine", 3, "8.50"),
    }


def snapshot(user):
    """Detached stand-in for a user, safe to share across threads."""
    return SimpleNamespace(
        id=user.id,
        role=user.role,
        is_active=user.is_active,
        display_name=user.display_name,
    )
