"""
Seller Validators
Validates seller registration and profile updates
"""
import re
from abc import ABC

from shopnish.validators.common import clean_text, clean_phone, clean_pincode

GST_PATTERN = re.compile(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$')
PAN_PATTERN = re.compile(r'^[A-Z]{5}[0-9]{4}[A-Z]$')
IFSC_PATTERN = re.compile(r'^[A-Z]{4}0[A-Z0-9]{6}$')
ACCOUNT_PATTERN = re.compile(r'^[0-9]{9,18}$')


class SellerValidator(ABC):
    """Validator for seller registration and profile edits"""

    @staticmethod
    def validate_seller(data: dict, partial: bool = False) -> tuple:
        """
        Validate seller profile data

        Args:
            data: Request body
            partial: Only validate the fields present (profile update)

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        if not isinstance(data, dict) or (not data and not partial):
            return (False, {}, {'body': 'Request body is required'})

        errors = {}
        validated_data = {}

        def wants(field):
            return not partial or field in data

        # 1. REQUIRED BUSINESS DETAILS
        if wants('business_name'):
            validated_data['business_name'] = clean_text(data, 'business_name', errors,
                                                         required=True, min_length=2, max_length=150)
        if wants('business_address'):
            validated_data['business_address'] = clean_text(data, 'business_address', errors,
                                                            required=True, min_length=5, max_length=500)
        if wants('city'):
            validated_data['city'] = clean_text(data, 'city', errors, required=True, max_length=80)
        if wants('pincode'):
            validated_data['pincode'] = clean_pincode(data, 'pincode', errors, required=True)
        if wants('business_phone'):
            validated_data['business_phone'] = clean_phone(data, 'business_phone', errors, required=True)

        # 2. OPTIONAL DETAILS
        for field, max_length in (('business_type', 80), ('description', 2000), ('logo_url', 500)):
            if field in data:
                validated_data[field] = clean_text(data, field, errors, max_length=max_length)

        # 3. TAX AND PAYOUT IDENTIFIERS
        identifiers = {
            'gst_number': (GST_PATTERN, 'GST number must be a valid 15 character GSTIN'),
            'pan_number': (PAN_PATTERN, 'PAN must look like ABCDE1234F'),
            'ifsc_code': (IFSC_PATTERN, 'IFSC code must look like HDFC0001234'),
            'bank_account_number': (ACCOUNT_PATTERN, 'Bank account number must be 9 to 18 digits'),
        }
        for field, (pattern, message) in identifiers.items():
            if field not in data:
                continue
            value = str(data.get(field) or '').strip().upper()
            if not value:
                validated_data[field] = None
            elif not pattern.match(value):
                errors[field] = message
            else:
                validated_data[field] = value

        if errors:
            return (False, {}, errors)

        return (True, validated_data, {})


__all__ = ['SellerValidator']
