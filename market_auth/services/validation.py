"""
Registration and login input validation.

Every rule is checked and all violations are reported together, in the
order below, as one ValidationError.
"""

import re
from typing import Any, Dict, List, Mapping, Optional

from market_auth.domain.principal import Role, SELF_REGISTERING_ROLES
from market_auth.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9]{10,15}$")

NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
SHOP_NAME_MIN_LEN = 2
SHOP_NAME_MAX_LEN = 100
PASSWORD_MIN_LEN = 8


def parse_role(value: Any, allowed=None) -> Role:
    """
    Parse a role, optionally restricted to a subset.

    Raises:
        ValidationError: Missing, unknown or disallowed role
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(["Role is required"])
    try:
        role = Role.parse(value)
    except ValueError:
        role = None
    if role is None or (allowed is not None and role not in allowed):
        names = ", ".join(r.value for r in Role if allowed is None or r in allowed)
        raise ValidationError([f"Invalid role. Must be one of: {names}"])
    return role


def _text(fields: Mapping[str, Any], key: str) -> str:
    value = fields.get(key)
    return value.strip() if isinstance(value, str) else ""


def _check_phone(errors: List[str], phone: str, role: Role):
    if not phone:
        errors.append(f"Phone number is required for {role.value}s")
    elif not PHONE_RE.match(phone):
        errors.append("Please provide a valid phone number (10-15 digits)")


def validate_email(email: Optional[str], errors: List[str]):
    if not email:
        errors.append("Email is required")
    elif not EMAIL_RE.match(email):
        errors.append("Please provide a valid email address")


def validate_registration(role: Role, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate registration input and return the normalized record fields.

    Args:
        role: Target role (must be self-registering)
        fields: Raw request fields

    Returns:
        Trimmed fields for the record (without password)

    Raises:
        ValidationError: One or more rules violated (all listed)
    """
    if role not in SELF_REGISTERING_ROLES:
        raise ValidationError([
            "Invalid role. Must be one of: customer, seller, deliverer. "
            "Admin registration is not allowed."
        ])

    errors: List[str] = []

    name = _text(fields, "name")
    if not name:
        errors.append("Name is required")
    elif len(name) < NAME_MIN_LEN:
        errors.append(f"Name must be at least {NAME_MIN_LEN} characters long")
    elif len(name) > NAME_MAX_LEN:
        errors.append(f"Name cannot exceed {NAME_MAX_LEN} characters")

    email = _text(fields, "email").lower()
    validate_email(email, errors)

    password = fields.get("password")
    if not password:
        errors.append("Password is required")
    elif not isinstance(password, str) or len(password) < PASSWORD_MIN_LEN:
        errors.append(f"Password must be at least {PASSWORD_MIN_LEN} characters long")

    phone = _text(fields, "phone")
    address = _text(fields, "address")
    record: Dict[str, Any] = {"name": name, "email": email, "phone": phone, "address": address}

    if role == Role.SELLER:
        shop_name = _text(fields, "shop_name")
        if not shop_name:
            errors.append("Shop name is required for sellers")
        elif len(shop_name) < SHOP_NAME_MIN_LEN:
            errors.append(f"Shop name must be at least {SHOP_NAME_MIN_LEN} characters long")
        elif len(shop_name) > SHOP_NAME_MAX_LEN:
            errors.append(f"Shop name cannot exceed {SHOP_NAME_MAX_LEN} characters")
        _check_phone(errors, phone, role)
        if not address:
            errors.append("Address is required for sellers")
        record["shop_name"] = shop_name
    else:
        _check_phone(errors, phone, role)

    if role == Role.DELIVERER:
        record["vehicle_no"] = _text(fields, "vehicle_no")
        record["vehicle_type"] = _text(fields, "vehicle_type")

    if errors:
        raise ValidationError(errors)
    return record


def validate_admin(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate admin provisioning input (name, email, password)."""
    errors: List[str] = []
    name = _text(fields, "name")
    if not (NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN):
        errors.append(f"Name must be between {NAME_MIN_LEN} and {NAME_MAX_LEN} characters")
    email = _text(fields, "email").lower()
    validate_email(email, errors)
    password = fields.get("password") or ""
    if len(password) < PASSWORD_MIN_LEN:
        errors.append(f"Password must be at least {PASSWORD_MIN_LEN} characters long")
    if errors:
        raise ValidationError(errors)
    return {"name": name, "email": email}


def validate_login(email: Optional[str], password: Optional[str]) -> str:
    """
    Validate login input.

    Returns:
        Normalized email
    """
    errors: List[str] = []
    email = (email or "").strip().lower()
    validate_email(email, errors)
    if not password:
        errors.append("Password is required")
    if errors:
        raise ValidationError(errors)
    return email
