"""Currency -- ISO 4217 registry, display symbols and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str
    symbol: str = ""

    @property
    def rounding_tolerance(self) -> Decimal:
        """Maximum rounding tolerance: one minor unit of the currency."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")

    @property
    def quantize_string(self) -> str:
        """String for Decimal.quantize() to round to this currency's precision."""
        if self.decimal_places == 0:
            return "1"
        return "0." + "0" * self.decimal_places


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies the site reports are issued in."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "INR": CurrencyInfo("INR", 2, "Indian Rupee", "₹"),
        "USD": CurrencyInfo("USD", 2, "US Dollar", "$"),
        "EUR": CurrencyInfo("EUR", 2, "Euro", "€"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling", "£"),
        "AED": CurrencyInfo("AED", 2, "UAE Dirham", "AED "),
        "SAR": CurrencyInfo("SAR", 2, "Saudi Riyal", "SAR "),
        "NPR": CurrencyInfo("NPR", 2, "Nepalese Rupee", "Rs "),
        "LKR": CurrencyInfo("LKR", 2, "Sri Lankan Rupee", "Rs "),
        "BDT": CurrencyInfo("BDT", 2, "Bangladeshi Taka", "৳"),
        "PKR": CurrencyInfo("PKR", 2, "Pakistani Rupee", "Rs "),
        "SGD": CurrencyInfo("SGD", 2, "Singapore Dollar", "S$"),
        "AUD": CurrencyInfo("AUD", 2, "Australian Dollar", "A$"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar", "C$"),
        # Zero decimal
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen", "¥"),
        "KRW": CurrencyInfo("KRW", 0, "South Korean Won", "₩"),
        # Three decimal
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar", "KWD "),
        "OMR": CurrencyInfo("OMR", 3, "Omani Rial", "OMR "),
        "BHD": CurrencyInfo("BHD", 3, "Bahraini Dinar", "BHD "),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is registered."""
        return code.upper() in cls._CURRENCIES if code else False

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information, or None for unknown codes."""
        return cls._CURRENCIES.get(code.upper()) if code else None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for a currency (2 for unknown codes)."""
        info = cls.get_info(code)
        return info.decimal_places if info else 2

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        """Rounding tolerance for a currency (0.01 for unknown codes)."""
        info = cls.get_info(code)
        return info.rounding_tolerance if info else Decimal("0.01")

    @classmethod
    def get_symbol(cls, code: str) -> str:
        """Display symbol; falls back to the code followed by a space."""
        info = cls.get_info(code)
        if info and info.symbol:
            return info.symbol
        return f"{code.upper()} "

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        """Get all registered currency codes."""
        return frozenset(cls._CURRENCIES.keys())
