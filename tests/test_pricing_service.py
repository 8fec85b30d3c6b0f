from decimal import Decimal

from shopnish.services.pricing_service import PricingService


class TestOrderTotals:
    def test_free_shipping_above_threshold(self):
        totals = PricingService.calculate_order_totals([(Decimal('500.00'), 2)])

        assert totals == {
            'subtotal': Decimal('1000.00'),
            'tax': Decimal('180.00'),
            'shipping': Decimal('0.00'),
            'total': Decimal('1180.00'),
        }

    def test_shipping_charged_at_threshold(self):
        totals = PricingService.calculate_order_totals([(Decimal('999.00'), 1)])

        assert totals['shipping'] == Decimal('50.00')
        assert totals['tax'] == Decimal('179.82')
        assert totals['total'] == Decimal('1228.82')

    def test_tax_is_rounded_half_up(self):
        totals = PricingService.calculate_order_totals([('10.25', 1)])

        # 18% of 10.25 is 1.845
        assert totals['tax'] == Decimal('1.85')

    def test_subtotal_sums_every_line(self):
        lines = [(Decimal('120.50'), 2), ('99.99', 3)]

        assert PricingService.calculate_subtotal(lines) == Decimal('540.97')


class TestFoodTotals:
    def test_delivery_fee_below_threshold(self):
        totals = PricingService.calculate_food_totals([(200.0, 2)])

        assert totals == {
            'subtotal': Decimal('400.00'),
            'tax': Decimal('20.00'),
            'delivery_fee': Decimal('30.00'),
            'total': Decimal('450.00'),
        }

    def test_free_delivery_at_threshold(self):
        totals = PricingService.calculate_food_totals([(Decimal('499'), 1)])

        assert totals['delivery_fee'] == Decimal('0.00')
        assert totals['total'] == Decimal('523.95')


class TestDeliveryEarning:
    def test_base_plus_per_km(self):
        assert PricingService.calculate_delivery_earning(3.5) == Decimal('37.50')

    def test_unknown_distance_pays_base(self):
        assert PricingService.calculate_delivery_earning(None) == Decimal('20.00')
        assert PricingService.calculate_delivery_earning(0) == Decimal('20.00')

    def test_negative_distance_is_ignored(self):
        assert PricingService.calculate_delivery_earning(-4) == Decimal('20.00')
