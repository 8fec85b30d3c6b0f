"""
Field helpers shared by the request validators and model @validates hooks
"""
import re
from decimal import Decimal, InvalidOperation

import phonenumbers
from flask import current_app, has_app_context

PINCODE_PATTERN = re.compile(r'^[1-9][0-9]{5}$')
SLUG_STRIP_PATTERN = re.compile(r'[^a-z0-9]+')


def normalize_phone(number):
    """
    Parse a phone number and return it in E.164 format

    Numbers without a country code are parsed in DEFAULT_PHONE_REGION.
    Raises ValueError when the number is not valid.
    """
    region = 'IN'
    if has_app_context():
        region = current_app.config.get('DEFAULT_PHONE_REGION', 'IN')

    try:
        parsed = phonenumbers.parse(str(number).strip(), region)
    except phonenumbers.NumberParseException as e:
        raise ValueError(f"Enter a valid phone number ({e})")

    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Enter a valid phone number")

    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def parse_money(value, field, errors, allow_zero=False):
    """Parse a positive decimal amount; records an error and returns None on failure"""
    try:
        amount = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        errors[field] = f'{field} must be a valid amount'
        return None

    if amount < 0 or (amount == 0 and not allow_zero):
        errors[field] = f'{field} must be greater than 0'
        return None
    return amount


def parse_int(value, field, errors, minimum=None, maximum=None):
    if isinstance(value, bool):
        errors[field] = f'{field} must be a whole number'
        return None
    try:
        number = int(value)
    except (ValueError, TypeError):
        errors[field] = f'{field} must be a whole number'
        return None

    if minimum is not None and number < minimum:
        errors[field] = f'{field} must be at least {minimum}'
        return None
    if maximum is not None and number > maximum:
        errors[field] = f'{field} cannot exceed {maximum}'
        return None
    return number


def clean_text(data, field, errors, required=False, min_length=1, max_length=255):
    value = data.get(field)
    value = str(value).strip() if value is not None else ''

    if not value:
        if required:
            errors[field] = f'{field} is required'
        return None

    if len(value) < min_length:
        errors[field] = f'{field} must be at least {min_length} characters'
    elif len(value) > max_length:
        errors[field] = f'{field} must be less than {max_length} characters'
    return value


def clean_phone(data, field, errors, required=False):
    value = (data.get(field) or '')
    value = str(value).strip()
    if not value:
        if required:
            errors[field] = f'{field} is required'
        return None
    try:
        return normalize_phone(value)
    except ValueError as e:
        errors[field] = str(e)
        return None


def clean_pincode(data, field, errors, required=False):
    value = str(data.get(field) or '').strip()
    if not value:
        if required:
            errors[field] = f'{field} is required'
        return None
    if not PINCODE_PATTERN.match(value):
        errors[field] = 'Pincode must be a 6 digit number'
        return None
    return value


def clean_bool(data, field, errors, default=False):
    if field not in data or data[field] is None:
        return default
    if not isinstance(data[field], (bool, int)):
        errors[field] = f'{field} must be true or false'
        return default
    return bool(data[field])


def slugify(text):
    return SLUG_STRIP_PATTERN.sub('-', str(text).lower()).strip('-')


__all__ = [
    'normalize_phone', 'parse_money', 'parse_int', 'clean_text', 'clean_phone',
    'clean_pincode', 'clean_bool', 'slugify',
]
