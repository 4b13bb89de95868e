"""Import tax pipeline for a single device purchase.

All amounts are USD. The pipeline is plain binary floating point on purpose:
results must match the browser calculator exactly, so nothing is rounded or
converted to Decimal here (rounding is a display concern, see ``money``).

Steps, each depending only on earlier ones::

    price_after_relief = max(price - relief, 0)
    pph_amount         = price_after_relief * PPH_RATE
    import_price       = price_after_relief + pph_amount
    custom_import_tax  = price_after_relief * CUSTOMS_IMPORT_TAX_RATE
    ppn_amount         = import_price * PPN_RATE
    pph22_amount       = import_price * PPH22_RATE
    total_tax          = custom_import_tax + ppn_amount + pph22_amount
    total_with_buffer  = price + total_tax + buffer

``pph_amount`` and ``custom_import_tax`` share a formula but are separate
line items; both are reported.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Callable, Dict

PPH_RATE = 0.1
PPN_RATE = 0.11
PPH22_RATE = 0.1
CUSTOMS_IMPORT_TAX_RATE = 0.1

DEFAULT_TAX_RELIEF = 500.0


@dataclass(frozen=True)
class TaxBreakdown:
    price_after_relief: float
    pph_amount: float
    import_price: float
    custom_import_tax: float
    ppn_amount: float
    pph22_amount: float
    total_tax: float
    total_with_buffer: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def map(self, fn: Callable[[float], float]) -> "TaxBreakdown":
        """Apply ``fn`` to every line item (used for currency projection)."""
        return TaxBreakdown(**{f.name: fn(getattr(self, f.name)) for f in fields(self)})


def compute_tax(
    price_usd: float, tax_relief: float = DEFAULT_TAX_RELIEF, buffer_usd: float = 0.0
) -> TaxBreakdown:
    # max() keeps a NaN base as NaN because NaN is the first argument
    price_after_relief = max(price_usd - tax_relief, 0.0)
    pph_amount = price_after_relief * PPH_RATE
    import_price = price_after_relief + pph_amount
    custom_import_tax = price_after_relief * CUSTOMS_IMPORT_TAX_RATE
    ppn_amount = import_price * PPN_RATE
    pph22_amount = import_price * PPH22_RATE
    total_tax = custom_import_tax + ppn_amount + pph22_amount
    total_with_buffer = price_usd + total_tax + buffer_usd
    return TaxBreakdown(
        price_after_relief=price_after_relief,
        pph_amount=pph_amount,
        import_price=import_price,
        custom_import_tax=custom_import_tax,
        ppn_amount=ppn_amount,
        pph22_amount=pph22_amount,
        total_tax=total_tax,
        total_with_buffer=total_with_buffer,
    )
