"""
Pricing Service
Handles checkout totals for marketplace and food orders and delivery agent earnings
"""
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal('0.01')


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class PricingService:
    """Service for calculating order totals and estimates"""

    # Marketplace pricing constants (in INR)
    TAX_RATE = Decimal('0.18')  # 18% GST
    FREE_SHIPPING_THRESHOLD = Decimal('999')  # Free shipping strictly above this subtotal
    SHIPPING_FEE = Decimal('50')

    # Food ordering
    FOOD_TAX_RATE = Decimal('0.05')  # 5% GST on restaurant food
    FOOD_FREE_DELIVERY_THRESHOLD = Decimal('499')
    FOOD_DELIVERY_FEE = Decimal('30')

    # Delivery agent payout per assignment
    DELIVERY_BASE_EARNING = Decimal('20')
    DELIVERY_PER_KM_EARNING = Decimal('5')

    @staticmethod
    def calculate_subtotal(lines) -> Decimal:
        """
        Sum of price * quantity

        Args:
            lines: iterable of (unit_price, quantity) pairs
        """
        subtotal = Decimal('0')
        for price, quantity in lines:
            subtotal += Decimal(str(price)) * int(quantity)
        return to_money(subtotal)

    @staticmethod
    def calculate_order_totals(lines) -> dict:
        """
        Calculate checkout totals for marketplace cart lines

        Args:
            lines: iterable of (unit_price, quantity) pairs

        Returns:
            dict: {subtotal, tax, shipping, total} as Decimals
        """
        subtotal = PricingService.calculate_subtotal(lines)
        tax = to_money(subtotal * PricingService.TAX_RATE)
        shipping = Decimal('0.00') if subtotal > PricingService.FREE_SHIPPING_THRESHOLD \
            else to_money(PricingService.SHIPPING_FEE)
        total = to_money(subtotal + tax + shipping)

        return {
            'subtotal': subtotal,
            'tax': tax,
            'shipping': shipping,
            'total': total,
        }

    @staticmethod
    def calculate_food_totals(lines) -> dict:
        """
        Calculate totals for a food order

        Returns:
            dict: {subtotal, tax, delivery_fee, total} as Decimals
        """
        subtotal = PricingService.calculate_subtotal(lines)
        tax = to_money(subtotal * PricingService.FOOD_TAX_RATE)
        delivery_fee = Decimal('0.00') if subtotal >= PricingService.FOOD_FREE_DELIVERY_THRESHOLD \
            else to_money(PricingService.FOOD_DELIVERY_FEE)
        total = to_money(subtotal + tax + delivery_fee)

        return {
            'subtotal': subtotal,
            'tax': tax,
            'delivery_fee': delivery_fee,
            'total': total,
        }

    @staticmethod
    def calculate_delivery_earning(distance_km) -> Decimal:
        """Flat base plus a per-km rate; unknown distance pays the base only"""
        distance = Decimal(str(distance_km or 0))
        if distance < 0:
            distance = Decimal('0')
        return to_money(PricingService.DELIVERY_BASE_EARNING
                        + distance * PricingService.DELIVERY_PER_KM_EARNING)


__all__ = ['PricingService', 'to_money']
