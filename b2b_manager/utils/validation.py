"""Input sanitization and validation for merchant and storefront data."""

import re
from typing import Any

import email_validator

from b2b_manager.utils.errors import ValidationError

MAX_STRING_LENGTH = 1000

SHOP_DOMAIN_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9]\.myshopify\.com$")
TAG_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
ID_RE = re.compile(r"^[a-zA-Z0-9]+$")

# Upper bound on a rule threshold, keyed by criteria type
CRITERIA_LIMITS: dict[str, tuple[float, str]] = {
    "total_spend": (1_000_000, "Total spend threshold cannot exceed $1,000,000"),
    "order_count": (10_000, "Order count threshold cannot exceed 10,000"),
    "days_since_first_order": (3_650, "Days threshold cannot exceed 3,650"),
    "average_order_value": (100_000, "Average order value threshold cannot exceed $100,000"),
}


def sanitize_string(value: Any) -> str:
    """Strip markup characters and clamp length; non-strings become empty."""
    if not isinstance(value, str):
        return ""
    return re.sub(r"[<>]", "", value.strip())[:MAX_STRING_LENGTH]


def validate_shop_domain(shop: Any) -> str:
    """Normalize and validate a ``name.myshopify.com`` domain."""
    if not shop or not isinstance(shop, str):
        raise ValidationError("Shop domain is required")

    clean = re.sub(r"^https?://", "", shop.strip()).rstrip("/")
    if not SHOP_DOMAIN_RE.match(clean):
        raise ValidationError("Invalid shop domain format")
    return clean.lower()


def _to_number(value: Any, message: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message) from None
    if number != number:  # NaN
        raise ValidationError(message)
    return number


def validate_rule_name(name: Any) -> str:
    name_str = sanitize_string(name)
    if not name_str:
        raise ValidationError("Rule name is required")
    if len(name_str) < 2:
        raise ValidationError("Rule name must be at least 2 characters")
    if len(name_str) > 50:
        raise ValidationError("Rule name is too long")
    return name_str


def validate_criteria_value(value: Any, criteria_type: str) -> float:
    """Validate a rule threshold against the bounds of its criteria type."""
    number = _to_number(value, "Criteria value must be a number")
    if number < 0:
        raise ValidationError("Criteria value must be positive")

    limit = CRITERIA_LIMITS.get(criteria_type)
    if limit and number > limit[0]:
        raise ValidationError(limit[1])

    return round(number, 2)


def validate_target_tag(tag: Any) -> str:
    tag_str = sanitize_string(tag)
    if not tag_str:
        raise ValidationError("Target tag is required")
    if len(tag_str) < 2:
        raise ValidationError("Target tag must be at least 2 characters")
    if len(tag_str) > 30:
        raise ValidationError("Target tag is too long")
    if not TAG_RE.match(tag_str):
        raise ValidationError(
            "Target tag can only contain letters, numbers, hyphens, and underscores"
        )
    return tag_str.lower()


def validate_customer_tags(tags: Any) -> list[str]:
    """Sanitize, lower-case and de-duplicate pricing rule customer tags."""
    if not isinstance(tags, list):
        raise ValidationError("Customer tags must be an array")
    if not tags:
        raise ValidationError("At least one customer tag is required")
    if len(tags) > 10:
        raise ValidationError("Maximum 10 customer tags allowed")

    unique: list[str] = []
    for tag in tags:
        clean = sanitize_string(tag).lower()
        if clean and clean not in unique:
            unique.append(clean)

    if not unique:
        raise ValidationError("No valid customer tags provided")
    return unique


def validate_ids(ids: Any, max_count: int = 100) -> list[str]:
    """Keep alphanumeric product or collection IDs; anything else is dropped."""
    if not isinstance(ids, list):
        return []
    if len(ids) > max_count:
        raise ValidationError(f"Maximum {max_count} IDs allowed")

    sanitized = (sanitize_string(str(i) if isinstance(i, int) else i) for i in ids)
    return [i for i in sanitized if i and ID_RE.match(i)]


def validate_discount_value(value: Any, discount_type: str) -> float:
    number = _to_number(value, "Discount value must be a number")

    if discount_type == "percentage":
        if number < 0 or number > 100:
            raise ValidationError("Percentage discount must be between 0 and 100")
    else:
        if number < 0:
            raise ValidationError("Fixed discount must be positive")
        if number > 10_000:
            raise ValidationError("Fixed discount cannot exceed $10,000")

    return round(number, 2)


def validate_priority(priority: Any) -> int:
    try:
        number = int(priority)
    except (TypeError, ValueError):
        raise ValidationError("Priority must be a number") from None
    if number < 0 or number > 1000:
        raise ValidationError("Priority must be between 0 and 1000")
    return number


def validate_email(email: Any) -> str:
    email_str = sanitize_string(email)
    if not email_str:
        raise ValidationError("Email is required")
    if len(email_str) > 254:
        raise ValidationError("Email is too long")
    try:
        result = email_validator.validate_email(email_str, check_deliverability=False)
    except email_validator.EmailNotValidError:
        raise ValidationError("Invalid email format") from None
    return result.normalized.lower()


def validate_business_name(name: Any) -> str:
    name_str = sanitize_string(name)
    if not name_str:
        raise ValidationError("Business name is required")
    if len(name_str) < 2:
        raise ValidationError("Business name must be at least 2 characters")
    if len(name_str) > 100:
        raise ValidationError("Business name is too long")
    return name_str
