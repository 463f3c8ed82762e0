"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..constants import DEFAULT_CURRENCY
from ..enums import ActorRole
from ..exceptions import ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary value with currency.

    CRITICAL: Always use Decimal, never float!
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        # Convert to Decimal if needed
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        # Validate currency code (3 letters)
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> 'Money':
        return cls(amount=Decimal("0.00"), currency=currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __add__(self, other: 'Money') -> 'Money':
        """Add two Money objects (must have same currency)."""
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add different currencies: {self.currency} vs {other.currency}"
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two Money objects (must have same currency)."""
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot subtract different currencies: {self.currency} vs {other.currency}"
            )
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __mul__(self, quantity: int) -> 'Money':
        """Multiply by an integer quantity."""
        return Money(amount=self.amount * quantity, currency=self.currency)

    def quantize(self) -> 'Money':
        """Round half-up to cents."""
        return Money(
            amount=self.amount.quantize(CENT, rounding=ROUND_HALF_UP),
            currency=self.currency,
        )

    def is_negative(self) -> bool:
        """Check if amount is negative."""
        return self.amount < 0

    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == 0


@dataclass(frozen=True)
class ShippingAddress:
    """Structured delivery address. Immutable once attached to an order."""

    full_name: str
    phone: str
    address: str
    city: str
    country: str
    postal_code: Optional[str] = None

    REQUIRED_FIELDS = ("full_name", "phone", "address", "city", "country")

    def __post_init__(self):
        for name in self.REQUIRED_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(
                    f"Shipping address {name} is required",
                    field=f"shipping_address.{name}",
                )


@dataclass(frozen=True)
class Actor:
    """Authenticated account performing an operation."""

    id: str
    role: ActorRole

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Actor id is required", field="actor.id")
        if not isinstance(self.role, ActorRole):
            object.__setattr__(self, 'role', ActorRole(self.role))

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    def __str__(self) -> str:
        return f"{self.role.value}:{self.id}"
