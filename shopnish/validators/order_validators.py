"""
Order Validators
Validates cart, checkout and food order data before creation
"""
from abc import ABC

from shopnish.models.order import PaymentMethod
from shopnish.validators.common import clean_text, clean_phone, clean_pincode, parse_int


class OrderValidator(ABC):
    """Validator for cart lines, checkout and food orders"""

    # Validation constants
    MIN_QUANTITY = 1
    MAX_QUANTITY = 50
    MAX_FOOD_LINES = 30

    @staticmethod
    def validate_cart_item(data: dict, require_product: bool = True) -> tuple:
        """
        Validate add-to-cart / update-quantity data

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        if not isinstance(data, dict):
            return (False, {}, {'body': 'Request body is required'})

        errors = {}
        validated_data = {}

        if require_product:
            product_id = data.get('product_id', data.get('productId'))
            if product_id in (None, ''):
                errors['product_id'] = 'product_id is required'
            else:
                validated_data['product_id'] = parse_int(product_id, 'product_id', errors, minimum=1)
            quantity = data.get('quantity', 1)
        else:
            quantity = data.get('quantity')
            if quantity is None:
                errors['quantity'] = 'quantity is required'
                return (False, {}, errors)

        validated_data['quantity'] = parse_int(quantity, 'quantity', errors,
                                               minimum=OrderValidator.MIN_QUANTITY,
                                               maximum=OrderValidator.MAX_QUANTITY)

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_address(address, errors, field='shipping_address'):
        """
        Validate a delivery address object

        Required: full_name, phone, address_line, city, pincode
        Optional: state, landmark
        """
        if not isinstance(address, dict) or not address:
            errors[field] = f'{field} is required'
            return None

        address_errors = {}
        validated = {
            'full_name': clean_text(address, 'full_name', address_errors, required=True, min_length=2, max_length=100),
            'phone': clean_phone(address, 'phone', address_errors, required=True),
            'address_line': clean_text(address, 'address_line', address_errors, required=True,
                                       min_length=5, max_length=500),
            'city': clean_text(address, 'city', address_errors, required=True, max_length=80),
            'pincode': clean_pincode(address, 'pincode', address_errors, required=True),
            'state': clean_text(address, 'state', address_errors, max_length=80),
            'landmark': clean_text(address, 'landmark', address_errors, max_length=200),
        }

        if address_errors:
            errors[field] = address_errors
            return None
        return validated

    @staticmethod
    def validate_payment_method(data, errors, default=PaymentMethod.COD):
        raw = data.get('payment_method', data.get('paymentMethod'))
        if raw in (None, ''):
            return default
        try:
            return PaymentMethod(str(raw).strip().lower())
        except ValueError:
            errors['payment_method'] = f'Invalid payment method. Valid options: {[m.value for m in PaymentMethod]}'
            return None

    @staticmethod
    def validate_checkout(data: dict) -> tuple:
        """
        Validate checkout request data

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        if not isinstance(data, dict) or not data:
            return (False, {}, {'body': 'Request body is required'})

        errors = {}
        address = data.get('shipping_address', data.get('shippingAddress'))
        validated_data = {
            'shipping_address': OrderValidator.validate_address(address, errors),
            'payment_method': OrderValidator.validate_payment_method(data, errors),
            'notes': clean_text(data, 'notes', errors, max_length=1000),
        }

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_food_order(data: dict) -> tuple:
        """
        Validate food order data

        Expected: vendor_id, items [{food_item_id, quantity}], delivery_address,
        optional payment_method and notes

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        if not isinstance(data, dict) or not data:
            return (False, {}, {'body': 'Request body is required'})

        errors = {}
        vendor_id = None
        if data.get('vendor_id') in (None, ''):
            errors['vendor_id'] = 'vendor_id is required'
        else:
            vendor_id = parse_int(data['vendor_id'], 'vendor_id', errors, minimum=1)

        lines = []
        items = data.get('items')
        if not isinstance(items, list) or not items:
            errors['items'] = 'items must be a non-empty list'
        elif len(items) > OrderValidator.MAX_FOOD_LINES:
            errors['items'] = f'An order can have at most {OrderValidator.MAX_FOOD_LINES} items'
        else:
            merged = {}
            for index, item in enumerate(items):
                line_errors = {}
                if not isinstance(item, dict):
                    errors[f'items[{index}]'] = 'Each item must be an object'
                    continue
                food_item_id = parse_int(item.get('food_item_id'), 'food_item_id', line_errors, minimum=1)
                quantity = parse_int(item.get('quantity', 1), 'quantity', line_errors,
                                     minimum=OrderValidator.MIN_QUANTITY,
                                     maximum=OrderValidator.MAX_QUANTITY)
                if line_errors:
                    errors[f'items[{index}]'] = line_errors
                    continue
                merged[food_item_id] = merged.get(food_item_id, 0) + quantity
            lines = [{'food_item_id': k, 'quantity': v} for k, v in merged.items()]

        validated_data = {
            'vendor_id': vendor_id,
            'items': lines,
            'delivery_address': OrderValidator.validate_address(
                data.get('delivery_address'), errors, field='delivery_address'),
            'payment_method': OrderValidator.validate_payment_method(data, errors),
            'notes': clean_text(data, 'notes', errors, max_length=1000),
        }

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})


__all__ = ['OrderValidator']
