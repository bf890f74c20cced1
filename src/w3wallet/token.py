"""
Currency and amount handling for w3wallet.

Transaction values travel to wallet providers as integers in the smallest unit
(wei for ETH). This module converts human-readable amounts into that form
without floating point loss and formats them back for display.

Example:
    >>> eth = Currency("Ether", "ETH")
    >>> amount = eth(0.001)
    >>> amount.amount
    1000000000000000
    >>> str(amount)
    '0.001 ETH'
"""
from decimal import Decimal
from typing import Optional, Union

__all__ = ['Currency', 'CurrencyAmount']


UNIT_MULTIPLIERS = {
    'wei': 1,
    'kwei': 10 ** 3,
    'mwei': 10 ** 6,
    'gwei': 10 ** 9,
    'szabo': 10 ** 12,
    'finney': 10 ** 15,
    'ether': 10 ** 18,
}


def _from_unit(amount: Union[int, float, str, Decimal], unit: str) -> int:
    """Convert amount in given ether-denominated unit to wei."""
    if unit not in UNIT_MULTIPLIERS:
        valid_units = ', '.join(UNIT_MULTIPLIERS.keys())
        raise ValueError(f"Unknown unit '{unit}'. Valid units: {valid_units}")
    # str() first so 0.001 becomes Decimal('0.001') rather than its binary approximation
    return int(Decimal(str(amount)) * UNIT_MULTIPLIERS[unit])


class Currency:
    """
    Native currency of a network.

    Attributes:
        name (str): Full name of the currency (e.g., "Ether")
        symbol (str): Symbol of the currency (e.g., "ETH")
        decimals (int): Number of decimal places (default: 18)
    """

    def __init__(self, name: str, symbol: Optional[str] = None, decimals: int = 18) -> None:
        self.name = name
        self.symbol = symbol or name
        self.decimals = decimals

    def to_amount(self, amount: Union[int, str]) -> 'CurrencyAmount':
        """Create a CurrencyAmount from a raw amount in the smallest unit."""
        return CurrencyAmount(self, amount)

    def parse_amount(
        self,
        amount: Union[int, float, str, Decimal],
        unit: Optional[str] = None
    ) -> 'CurrencyAmount':
        """
        Convert human-readable amount to CurrencyAmount.

        Args:
            amount: Human-readable amount (e.g., 0.001 for 0.001 ETH)
            unit: Ether-denominated unit ('wei', 'gwei', 'ether', ...). When omitted
                the amount is in whole currency units, scaled by ``decimals``

        Example:
            >>> eth = Currency("Ether", "ETH")
            >>> eth.parse_amount(1, 'gwei').amount
            1000000000
            >>> Currency("USD Coin", "USDC", 6).parse_amount(1.5).amount
            1500000
        """
        if unit is None:
            return CurrencyAmount(self, int(Decimal(str(amount)) * 10 ** self.decimals))
        return CurrencyAmount(self, _from_unit(amount, unit))
    __call__ = parse_amount

    def __str__(self) -> str:
        return self.symbol or self.name

    def __repr__(self) -> str:
        return f"Currency({self.name!r}, {self.symbol!r}, {self.decimals})"

    def __hash__(self) -> int:
        return hash((self.name, self.symbol, self.decimals))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return (self.name, self.symbol, self.decimals) == (other.name, other.symbol, other.decimals)


class CurrencyAmount:
    """
    An amount of a currency, stored as an integer in the smallest unit.

    Hex strings (starting with '0x') are accepted and parsed.
    """
    currency: Currency
    amount: int

    def __init__(self, currency: Currency, amount: Union[int, str]) -> None:
        self.currency = currency
        if isinstance(amount, str):
            amount = int(amount, 16 if amount.startswith('0x') else 10)
        if amount < 0:
            raise ValueError("Amount can't be negative")
        self.amount = int(amount)

    def to_decimal(self) -> Decimal:
        return Decimal(self.amount) / (Decimal(10) ** self.currency.decimals)

    def to_fixed(self, decimals: int = 6) -> str:
        return f"{self.to_decimal():.{decimals}f}"

    def __int__(self) -> int:
        return self.amount

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CurrencyAmount):
            return self.currency == other.currency and self.amount == other.amount
        if isinstance(other, int):
            return self.amount == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.currency, self.amount))

    def __str__(self) -> str:
        return f"{self.to_decimal().normalize():f} {self.currency}"

    def __repr__(self) -> str:
        return f"CurrencyAmount({self.currency!r}, {self.amount})"
