"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the money types used by every cost computation: Currency and
    Money. These replace primitive types (Decimal, float, str) wherever a
    cost appears in domain or engine logic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except sitecost_kernel.domain.currency and the
    kernel exception hierarchy.

Invariants enforced:
    - Money pairs a Decimal amount with its Currency; floats are converted
      through ``str`` at the boundary and never used in arithmetic.
    - Currency codes are validated against CurrencyRegistry on construction.
    - Arithmetic across currencies raises
      CurrencyMismatchError instead of silently mixing amounts.
    - No auto-rounding: sums are carried at full precision and rounded only
      when a caller asks for display (``Money.round``).

Failure modes:
    - ValueError on construction with invalid amounts or currency codes.
    - CurrencyMismatchError when operations mix currencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sitecost_kernel.domain.currency import CurrencyRegistry
from sitecost_kernel.exceptions import CurrencyMismatchError


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - Immutable and hashable
        - code is always uppercase and stripped of whitespace
        - code is always registered in CurrencyRegistry
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        """One minor unit of this currency."""
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    @property
    def symbol(self) -> str:
        return CurrencyRegistry.get_symbol(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are NEVER separated.

    Guarantees:
        - Immutable and hashable
        - amount is always a finite Decimal
        - Arithmetic operations enforce the same-currency constraint

    Non-goals:
        - Does NOT perform currency conversion
        - Does NOT auto-round -- callers must explicitly call .round()
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e
        if not self.amount.is_finite():
            raise ValueError(f"Invalid amount: {self.amount}")

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """
        Factory method for creating Money.

        Raises:
            ValueError: If amount cannot be converted or currency is invalid.
        """
        if isinstance(amount, (str, int)):
            amount = Decimal(str(amount))
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def total(cls, amounts: Iterable[Money], currency: str | Currency) -> Money:
        """
        Sum an iterable of Money at full precision.

        An empty iterable sums to zero in ``currency``. Every element must be
        in ``currency``.
        """
        result = cls.zero(currency)
        for amount in amounts:
            result = result + amount
        return result

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_negative(self) -> bool:
        return self.amount < Decimal("0")

    def round(
        self,
        places: int | None = None,
        rounding: str = ROUND_HALF_UP,
    ) -> Money:
        """
        Round to ``places`` decimals, by default the currency's minor unit.

        Returns a new Money; the original is unchanged.
        """
        if places is None:
            info = CurrencyRegistry.get_info(self.currency.code)
            quantum = Decimal(info.quantize_string if info else "0.01")
        else:
            quantum = Decimal(1).scaleb(-places)
        rounded = self.amount.quantize(quantum, rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        """Multiply by a scalar."""
        if isinstance(factor, (int, str)) and not isinstance(factor, bool):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        """Divide by a non-zero scalar."""
        if isinstance(divisor, (int, str)) and not isinstance(divisor, bool):
            divisor = Decimal(str(divisor))
        if not isinstance(divisor, Decimal):
            return NotImplemented
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide Money by zero")
        return Money(amount=self.amount / divisor, currency=self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"
