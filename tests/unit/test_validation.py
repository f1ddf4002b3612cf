"""
Unit tests for registration and login validation.
"""

import pytest
from market_auth.domain.principal import Role
from market_auth.errors import ValidationError
from market_auth.services.validation import parse_role, validate_login, validate_registration


def test_valid_customer():
    """A valid customer is trimmed and normalized."""
    fields = validate_registration(
        Role.CUSTOMER,
        {"name": " Ann Lee ", "email": " Ann@X.com", "password": "password1", "phone": "0711234567"},
    )

    assert fields["name"] == "Ann Lee"
    assert fields["email"] == "ann@x.com"
    assert "password" not in fields


def test_all_errors_are_reported():
    """Every violated rule is listed, not just the first."""
    with pytest.raises(ValidationError) as exc:
        validate_registration(Role.SELLER, {"name": "A", "email": "nope", "password": "short"})

    errors = exc.value.errors
    assert "Name must be at least 2 characters long" in errors
    assert "Please provide a valid email address" in errors
    assert "Password must be at least 8 characters long" in errors
    assert "Shop name is required for sellers" in errors
    assert "Phone number is required for sellers" in errors
    assert "Address is required for sellers" in errors
    assert exc.value.status_code == 400


def test_phone_format():
    """Phones must be 10-15 digits."""
    with pytest.raises(ValidationError) as exc:
        validate_registration(
            Role.DELIVERER,
            {"name": "Dan Driver", "email": "dan@x.com", "password": "password1", "phone": "07-11"},
        )
    assert exc.value.errors == ["Please provide a valid phone number (10-15 digits)"]


def test_deliverer_vehicle_fields_kept():
    """Deliverer vehicle fields pass through."""
    fields = validate_registration(
        Role.DELIVERER,
        {
            "name": "Dan Driver",
            "email": "dan@x.com",
            "password": "password1",
            "phone": "0711234567",
            "vehicle_no": "KA-01",
            "vehicle_type": "bike",
        },
    )
    assert fields["vehicle_no"] == "KA-01"
    assert fields["vehicle_type"] == "bike"


def test_admin_registration_refused():
    """Admins cannot self-register."""
    with pytest.raises(ValidationError) as exc:
        validate_registration(Role.ADMIN, {"name": "Root", "email": "r@x.com", "password": "password1"})
    assert "Admin registration is not allowed" in exc.value.message


def test_parse_role():
    """Roles are required and must be known."""
    assert parse_role("Customer") == Role.CUSTOMER

    with pytest.raises(ValidationError):
        parse_role(None)
    with pytest.raises(ValidationError):
        parse_role("wizard")
    with pytest.raises(ValidationError):
        parse_role("admin", allowed={Role.SELLER, Role.DELIVERER})


def test_validate_login():
    """Login needs a valid email and a password."""
    assert validate_login(" Ann@X.com ", "x") == "ann@x.com"

    with pytest.raises(ValidationError) as exc:
        validate_login("", "")
    assert exc.value.errors == ["Email is required", "Password is required"]
