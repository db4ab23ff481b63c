from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext

from .cumulative import DECIMAL_PRECISION

# Price ratio between adjacent ticks in a concentrated-liquidity pool.
TICK_BASE = Decimal("1.0001")


@dataclass(frozen=True)
class PriceConvention:
    decimals_shift: int
    invert: bool

    @classmethod
    def raw(cls) -> PriceConvention:
        return cls(decimals_shift=0, invert=False)

    @classmethod
    def scaled(cls, decimals_shift: int) -> PriceConvention:
        return cls(decimals_shift=decimals_shift, invert=False)

    @classmethod
    def inverted(cls, decimals_shift: int = 0) -> PriceConvention:
        return cls(decimals_shift=decimals_shift, invert=True)

    def describe(self) -> str:
        parts = []
        if self.decimals_shift:
            parts.append(f"/1e{self.decimals_shift}")
        if self.invert:
            parts.append("inverted")
        return " ".join(parts) or "raw"


def tick_to_price(twap: Decimal, convention: PriceConvention) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        price = TICK_BASE ** Decimal(twap)
        if convention.decimals_shift:
            price = price.scaleb(-convention.decimals_shift)
        if convention.invert:
            price = Decimal(1) / price
        return +price
