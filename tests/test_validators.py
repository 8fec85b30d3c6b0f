from datetime import datetime
from decimal import Decimal

import pytest

from shopnish.models.order import PaymentMethod
from shopnish.validators.catalog_validators import CatalogValidator
from shopnish.validators.common import normalize_phone, slugify
from shopnish.validators.order_validators import OrderValidator
from shopnish.validators.seller_validators import SellerValidator
from shopnish.validators.vendor_validators import VendorValidator

ADDRESS = {
    'full_name': 'Asha Rao',
    'phone': '8123456789',
    'address_line': 'Flat 4B, Lake View Apartments',
    'city': 'Bengaluru',
    'pincode': '560001',
}


class TestCommon:
    @pytest.mark.parametrize('raw', ['8123456789', '08123456789', '+91 81234 56789'])
    def test_phone_is_normalized_to_e164(self, raw):
        assert normalize_phone(raw) == '+918123456789'

    def test_invalid_phone(self):
        with pytest.raises(ValueError):
            normalize_phone('12345')

    def test_slugify(self):
        assert slugify('Home & Kitchen') == 'home-kitchen'
        assert slugify('  Books / Stationery!  ') == 'books-stationery'


class TestCatalogValidator:
    def test_accepts_camel_case_keys(self):
        is_valid, data, errors = CatalogValidator.validate_product({
            'name': 'Steel Bottle',
            'categoryId': '3',
            'price': '499',
            'originalPrice': 699,
        })

        assert is_valid, errors
        assert data['category_id'] == 3
        assert data['price'] == Decimal('499.00')
        assert data['original_price'] == Decimal('699.00')
        assert data['stock'] == 0

    def test_original_price_below_price(self):
        is_valid, _, errors = CatalogValidator.validate_product({
            'name': 'Steel Bottle', 'category_id': 1, 'price': 499, 'original_price': 399,
        })

        assert not is_valid
        assert 'original_price' in errors

    def test_required_fields(self):
        is_valid, _, errors = CatalogValidator.validate_product({'description': 'No name'})

        assert not is_valid
        assert set(errors) >= {'name', 'category_id', 'price'}

    def test_partial_update_only_checks_sent_fields(self):
        is_valid, data, _ = CatalogValidator.validate_product({'stock': 5}, partial=True)

        assert is_valid
        assert data == {'stock': 5}

    def test_negative_stock_and_bad_images(self):
        is_valid, _, errors = CatalogValidator.validate_product(
            {'stock': -1, 'images': 'not-a-list'}, partial=True)

        assert not is_valid
        assert set(errors) == {'stock', 'images'}

    def test_category_slug_is_derived(self):
        is_valid, data, _ = CatalogValidator.validate_category({'name': 'Home & Kitchen'})

        assert is_valid
        assert data['slug'] == 'home-kitchen'


class TestOrderValidator:
    def test_checkout_defaults_to_cod(self):
        is_valid, data, errors = OrderValidator.validate_checkout({'shipping_address': ADDRESS})

        assert is_valid, errors
        assert data['payment_method'] == PaymentMethod.COD
        assert data['shipping_address']['phone'] == '+918123456789'

    def test_checkout_reports_address_fields(self):
        is_valid, _, errors = OrderValidator.validate_checkout({
            'shipping_address': dict(ADDRESS, pincode='0123', full_name=''),
        })

        assert not is_valid
        assert set(errors['shipping_address']) == {'pincode', 'full_name'}

    def test_unknown_payment_method(self):
        is_valid, _, errors = OrderValidator.validate_checkout({
            'shipping_address': ADDRESS, 'payment_method': 'bitcoin',
        })

        assert not is_valid
        assert 'payment_method' in errors

    def test_cart_quantity_bounds(self):
        assert not OrderValidator.validate_cart_item({'product_id': 1, 'quantity': 0})[0]
        assert not OrderValidator.validate_cart_item({'product_id': 1, 'quantity': 51})[0]
        assert OrderValidator.validate_cart_item({'productId': 1})[1] == {'product_id': 1, 'quantity': 1}

    def test_food_order_merges_repeated_items(self):
        is_valid, data, errors = OrderValidator.validate_food_order({
            'vendor_id': 2,
            'items': [{'food_item_id': 5, 'quantity': 1}, {'food_item_id': 5, 'quantity': 2}],
            'delivery_address': ADDRESS,
        })

        assert is_valid, errors
        assert data['items'] == [{'food_item_id': 5, 'quantity': 3}]


class TestSellerValidator:
    def test_tax_identifiers_are_checked(self):
        is_valid, _, errors = SellerValidator.validate_seller({
            'business_name': 'Sharma Kitchenware',
            'business_address': '12 MG Road',
            'city': 'Pune',
            'pincode': '411001',
            'business_phone': '8123456789',
            'pan_number': 'abcde1234f',
            'ifsc_code': 'HDFC1234',
        })

        assert not is_valid
        assert set(errors) == {'ifsc_code'}

    def test_partial_update(self):
        is_valid, data, _ = SellerValidator.validate_seller({'city': 'Mumbai'}, partial=True)

        assert is_valid
        assert data == {'city': 'Mumbai'}


class TestVendorValidator:
    NOW = datetime(2026, 1, 1, 9, 0)

    def test_booking_in_the_past(self):
        is_valid, _, errors = VendorValidator.validate_booking({
            'provider_id': 1, 'scheduled_at': '2025-12-31T10:00:00', 'address': '12 MG Road, Pune',
        }, now=self.NOW)

        assert not is_valid
        assert errors['scheduled_at'] == 'scheduled_at must be in the future'

    def test_booking_with_utc_suffix(self):
        is_valid, data, errors = VendorValidator.validate_booking({
            'provider_id': 1, 'scheduled_at': '2026-01-02T10:00:00Z', 'hours': 2,
            'address': '12 MG Road, Pune',
        }, now=self.NOW)

        assert is_valid, errors
        assert data['scheduled_at'] == datetime(2026, 1, 2, 10, 0)
        assert data['hours'] == 2

    def test_booking_too_far_ahead(self):
        is_valid, _, errors = VendorValidator.validate_booking({
            'provider_id': 1, 'scheduled_at': '2026-06-01T10:00:00', 'address': '12 MG Road, Pune',
        }, now=self.NOW)

        assert not is_valid
        assert 'scheduled_at' in errors

    def test_delivery_agent_vehicle(self):
        is_valid, data, _ = VendorValidator.validate_delivery_boy({
            'vehicle_type': 'Scooter', 'vehicle_number': 'ka01ab1234', 'city': 'Bengaluru',
        })

        assert is_valid
        assert data == {'vehicle_type': 'scooter', 'vehicle_number': 'KA01AB1234', 'city': 'Bengaluru'}

        is_valid, _, errors = VendorValidator.validate_delivery_boy({
            'vehicle_type': 'rocket', 'vehicle_number': 'KA01AB1234', 'city': 'Bengaluru',
        })
        assert not is_valid
        assert 'vehicle_type' in errors

    def test_food_vendor_opening_time(self):
        is_valid, _, errors = VendorValidator.validate_food_vendor({
            'restaurant_name': 'Annapurna Mess',
            'address': '3rd Cross, Jayanagar',
            'city': 'Bengaluru',
            'phone': '8123456789',
            'opening_time': '25:00',
        })

        assert not is_valid
        assert set(errors) == {'opening_time'}
