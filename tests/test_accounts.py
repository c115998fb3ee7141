import pytest

from chemist.core.exceptions import NotFoundError, ValidationError
from chemist.core.hashing import verify_password
from chemist.models.users import User
from chemist.services.accounts import authenticate, create_user, list_users, update_credentials


def test_create_user_hashes_password(db):
    user = create_user(db, "  Nurse@Pharmacy.co.ke ", "Str0ng-nurse-pass", "Amina", "cashier")

    assert user.email == "nurse@pharmacy.co.ke"
    assert user.role == "cashier"
    assert user.is_active
    assert user.password_hash != "Str0ng-nurse-pass"
    assert verify_password("Str0ng-nurse-pass", user.password_hash)


def test_duplicate_email_rejected(db, cashier):
    with pytest.raises(ValidationError) as exc_info:
        create_user(db, "CASHIER@pharmacy.co.ke", "An0ther-pass", "Copy")

    assert exc_info.value.field == "email"


@pytest.mark.parametrize("password", ["password123", "12345678901"])
def test_weak_password_rejected(db, password):
    with pytest.raises(ValidationError) as exc_info:
        create_user(db, "weak@pharmacy.co.ke", password)

    assert exc_info.value.field == "password"
    assert db.query(User).count() == 0


def test_unknown_role_rejected(db):
    with pytest.raises(ValidationError) as exc_info:
        create_user(db, "ops@pharmacy.co.ke", "Str0ng-ops-pass", role="superuser")

    assert exc_info.value.field == "role"


def test_authenticate(db, cashier):
    assert authenticate(db, "cashier@pharmacy.co.ke", "Str0ng-cashier-pass").id == cashier.id
    assert authenticate(db, "cashier@pharmacy.co.ke", "wrong-pass") is None
    assert authenticate(db, "nobody@pharmacy.co.ke", "Str0ng-cashier-pass") is None


def test_inactive_user_cannot_log_in(db, cashier):
    cashier.is_active = False
    db.commit()

    assert authenticate(db, "cashier@pharmacy.co.ke", "Str0ng-cashier-pass") is None


def test_update_credentials(db, admin):
    updated = update_credentials(db, "admin@pharmacy.co.ke", "owner@pharmacy.co.ke", "N3w-owner-pass")

    assert updated.id == admin.id
    assert authenticate(db, "owner@pharmacy.co.ke", "N3w-owner-pass").id == admin.id
    assert authenticate(db, "admin@pharmacy.co.ke", "Str0ng-admin-pass") is None


def test_update_credentials_keeps_email(db, admin):
    update_credentials(db, "admin@pharmacy.co.ke", "admin@pharmacy.co.ke", "N3w-admin-pass")

    assert authenticate(db, "admin@pharmacy.co.ke", "N3w-admin-pass").id == admin.id


def test_update_credentials_unknown_account(db):
    with pytest.raises(NotFoundError):
        update_credentials(db, "ghost@pharmacy.co.ke", "new@pharmacy.co.ke", "N3w-ghost-pass")


def test_update_credentials_email_taken(db, admin, cashier):
    with pytest.raises(ValidationError) as exc_info:
        update_credentials(db, "admin@pharmacy.co.ke", "cashier@pharmacy.co.ke", "N3w-admin-pass")

    assert exc_info.value.field == "new_email"
    assert authenticate(db, "admin@pharmacy.co.ke", "Str0ng-admin-pass").id == admin.id


def test_list_users(db, admin, cashier):
    assert [u.email for u in list_users(db)] == ["admin@pharmacy.co.ke", "cashier@pharmacy.co.ke"]
