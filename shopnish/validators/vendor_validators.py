"""
Vendor Validators
Validates food vendor, food item, service provider, booking and delivery agent payloads
"""
import re
from abc import ABC
from datetime import datetime, timedelta

from shopnish.validators.common import (
    clean_text, clean_phone, clean_pincode, clean_bool, parse_money, parse_int,
)

TIME_PATTERN = re.compile(r'^([01][0-9]|2[0-3]):[0-5][0-9]$')


class VendorValidator(ABC):
    """Validator for the food, services and delivery sign-up flows"""

    VEHICLE_TYPES = ('bicycle', 'scooter', 'motorcycle', 'car', 'van')
    MAX_BOOKING_HOURS = 12
    MAX_BOOKING_DAYS_AHEAD = 60

    @staticmethod
    def _start(data, partial):
        if not isinstance(data, dict) or (not data and not partial):
            return {'body': 'Request body is required'}
        return None

    @staticmethod
    def validate_food_vendor(data: dict, partial: bool = False) -> tuple:
        """
        Validate food vendor registration/update data

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        body_error = VendorValidator._start(data, partial)
        if body_error:
            return (False, {}, body_error)

        errors = {}
        validated_data = {}

        def wants(field):
            return not partial or field in data

        if wants('restaurant_name'):
            validated_data['restaurant_name'] = clean_text(data, 'restaurant_name', errors, required=True,
                                                           min_length=2, max_length=150)
        if wants('address'):
            validated_data['address'] = clean_text(data, 'address', errors, required=True,
                                                   min_length=5, max_length=500)
        if wants('city'):
            validated_data['city'] = clean_text(data, 'city', errors, required=True, max_length=80)
        if wants('phone'):
            validated_data['phone'] = clean_phone(data, 'phone', errors, required=True)

        if 'pincode' in data:
            validated_data['pincode'] = clean_pincode(data, 'pincode', errors)
        for field, max_length in (('cuisine', 100), ('description', 2000), ('image_url', 500)):
            if field in data:
                validated_data[field] = clean_text(data, field, errors, max_length=max_length)
        for field in ('opening_time', 'closing_time'):
            if field in data and data[field]:
                value = str(data[field]).strip()
                if not TIME_PATTERN.match(value):
                    errors[field] = f'{field} must be in HH:MM format'
                else:
                    validated_data[field] = value
        if 'is_open' in data:
            validated_data['is_open'] = clean_bool(data, 'is_open', errors, default=True)

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_food_item(data: dict, partial: bool = False) -> tuple:
        body_error = VendorValidator._start(data, partial)
        if body_error:
            return (False, {}, body_error)

        errors = {}
        validated_data = {}

        if not partial or 'name' in data:
            validated_data['name'] = clean_text(data, 'name', errors, required=True, min_length=2, max_length=150)
        if not partial or 'price' in data:
            if data.get('price') in (None, ''):
                errors['price'] = 'price is required'
            else:
                validated_data['price'] = parse_money(data['price'], 'price', errors)

        for field, max_length in (('description', 2000), ('image_url', 500)):
            if field in data:
                validated_data[field] = clean_text(data, field, errors, max_length=max_length)
        if not partial or 'is_veg' in data:
            validated_data['is_veg'] = clean_bool(data, 'is_veg', errors, default=True)
        if 'is_available' in data:
            validated_data['is_available'] = clean_bool(data, 'is_available', errors, default=True)

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_service_provider(data: dict, partial: bool = False) -> tuple:
        body_error = VendorValidator._start(data, partial)
        if body_error:
            return (False, {}, body_error)

        errors = {}
        validated_data = {}

        def wants(field):
            return not partial or field in data

        if wants('business_name'):
            validated_data['business_name'] = clean_text(data, 'business_name', errors, required=True,
                                                         min_length=2, max_length=150)
        if wants('service_type'):
            validated_data['service_type'] = clean_text(data, 'service_type', errors, required=True,
                                                        min_length=3, max_length=80)
        if wants('city'):
            validated_data['city'] = clean_text(data, 'city', errors, required=True, max_length=80)
        if wants('phone'):
            validated_data['phone'] = clean_phone(data, 'phone', errors, required=True)
        if wants('hourly_rate'):
            if data.get('hourly_rate') in (None, ''):
                errors['hourly_rate'] = 'hourly_rate is required'
            else:
                validated_data['hourly_rate'] = parse_money(data['hourly_rate'], 'hourly_rate', errors)

        if 'pincode' in data:
            validated_data['pincode'] = clean_pincode(data, 'pincode', errors)
        if 'description' in data:
            validated_data['description'] = clean_text(data, 'description', errors, max_length=2000)
        if 'experience_years' in data:
            validated_data['experience_years'] = parse_int(data['experience_years'], 'experience_years',
                                                           errors, minimum=0, maximum=60)
        if 'is_available' in data:
            validated_data['is_available'] = clean_bool(data, 'is_available', errors, default=True)

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_booking(data: dict, now=None) -> tuple:
        """
        Validate a service booking request

        scheduled_at must be an ISO 8601 datetime in the future
        """
        body_error = VendorValidator._start(data, False)
        if body_error:
            return (False, {}, body_error)

        errors = {}
        now = now or datetime.utcnow()

        provider_id = None
        if data.get('provider_id') in (None, ''):
            errors['provider_id'] = 'provider_id is required'
        else:
            provider_id = parse_int(data['provider_id'], 'provider_id', errors, minimum=1)

        scheduled_at = None
        raw = data.get('scheduled_at')
        if not raw:
            errors['scheduled_at'] = 'scheduled_at is required'
        else:
            try:
                scheduled_at = datetime.fromisoformat(str(raw).replace('Z', '+00:00'))
                if scheduled_at.tzinfo is not None:
                    scheduled_at = scheduled_at.replace(tzinfo=None) - scheduled_at.utcoffset()
            except ValueError:
                errors['scheduled_at'] = 'scheduled_at must be an ISO 8601 datetime'
            else:
                if scheduled_at <= now:
                    errors['scheduled_at'] = 'scheduled_at must be in the future'
                elif scheduled_at > now + timedelta(days=VendorValidator.MAX_BOOKING_DAYS_AHEAD):
                    errors['scheduled_at'] = (f'Bookings can be made at most '
                                              f'{VendorValidator.MAX_BOOKING_DAYS_AHEAD} days ahead')

        validated_data = {
            'provider_id': provider_id,
            'scheduled_at': scheduled_at,
            'hours': parse_int(data.get('hours', 1), 'hours', errors, minimum=1,
                               maximum=VendorValidator.MAX_BOOKING_HOURS),
            'address': clean_text(data, 'address', errors, required=True, min_length=5, max_length=500),
            'notes': clean_text(data, 'notes', errors, max_length=1000),
        }

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_delivery_boy(data: dict) -> tuple:
        body_error = VendorValidator._start(data, False)
        if body_error:
            return (False, {}, body_error)

        errors = {}
        vehicle_type = (clean_text(data, 'vehicle_type', errors, required=True, max_length=50) or '').lower()
        if vehicle_type and vehicle_type not in VendorValidator.VEHICLE_TYPES:
            errors['vehicle_type'] = f'vehicle_type must be one of {list(VendorValidator.VEHICLE_TYPES)}'

        vehicle_number = (clean_text(data, 'vehicle_number', errors, required=True,
                                     min_length=6, max_length=20) or '').upper()
        if vehicle_number and not re.match(r'^[A-Z0-9 -]{6,20}$', vehicle_number):
            errors['vehicle_number'] = 'Invalid vehicle number format'

        validated_data = {
            'vehicle_type': vehicle_type,
            'vehicle_number': vehicle_number,
            'city': clean_text(data, 'city', errors, required=True, max_length=80),
        }

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})


__all__ = ['VendorValidator']
