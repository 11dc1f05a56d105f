"""Integer arithmetic for native-value amounts.

All prices, fees and balances are int in the smallest native unit. No float, no Decimal.
"""

BPS_DENOMINATOR = 10_000
MAX_FEE_BPS = 1_000  # 10%


def calc_fee(price: int, fee_bps: int) -> int:
    """Floor division fee: price x fee_bps // 10000 (the seller keeps the remainder)."""
    return price * fee_bps // BPS_DENOMINATOR


def split_payment(price: int, fee_bps: int) -> tuple[int, int]:
    """Return (fee, seller_amount); the two always sum to price."""
    fee = calc_fee(price, fee_bps)
    return fee, price - fee
