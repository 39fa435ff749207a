"""Stay pricing

Amounts are whole currency units (IDR has no minor unit in practice) and are
kept as ``int`` throughout. The only fractional step, the percentage service
fee, goes through ``Decimal`` and is rounded half up back to an ``int``.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from domain.dates import DateLike, days_between
from domain.entities import Villa
from domain.value_objects import BookingPolicy, PriceQuote


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PriceCalculator:
    """nights x nightly rate + cleaning fee + service fee"""

    def __init__(self, policy: Optional[BookingPolicy] = None):
        self.policy = policy or BookingPolicy()

    @staticmethod
    def nights(check_in: Optional[DateLike], check_out: Optional[DateLike]) -> int:
        if check_in is None or check_out is None:
            return 0
        return max(0, days_between(check_in, check_out))

    @staticmethod
    def subtotal(nightly_rate: int, nights: int) -> int:
        return nightly_rate * nights

    def service_fee(self, villa: Villa, subtotal: int) -> int:
        """Fixed amount when the villa sets one, otherwise a rounded percentage"""
        if villa.service_fee_amount is not None:
            return villa.service_fee_amount
        rate = Decimal(str(villa.effective_service_fee_rate(self.policy)))
        return round_half_up(Decimal(subtotal) * rate)

    def quote(
        self,
        villa: Villa,
        check_in: Optional[DateLike],
        check_out: Optional[DateLike]
    ) -> PriceQuote:
        """Itemised price; zero nights when dates are missing or inverted"""
        nights = self.nights(check_in, check_out)
        subtotal = self.subtotal(villa.price_per_night, nights)
        service_fee = self.service_fee(villa, subtotal)
        total = subtotal + villa.cleaning_fee + service_fee
        return PriceQuote(
            nightly_rate=villa.price_per_night,
            nights=nights,
            subtotal=subtotal,
            cleaning_fee=villa.cleaning_fee,
            service_fee=service_fee,
            total=total,
            currency=self.policy.currency
        )
