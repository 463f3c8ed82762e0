"""Order business constants."""
from decimal import Decimal

PLATFORM_COMMISSION_RATE = Decimal("0.10")  # 10%
DEFAULT_DELIVERY_DAYS = 7
DEFAULT_CURRENCY = "KES"

DEFAULT_CANCELLATION_REASON = "Cancelled by buyer"
DEFAULT_REFUND_NOTE = "Refund processed by admin"

ORDER_NUMBER_PREFIX = "ORD"
