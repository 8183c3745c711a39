from decimal import Decimal
from typing import Optional


def result_status(value: Optional[Decimal], ref_min: Optional[Decimal], ref_max: Optional[Decimal]) -> str:
    """Classify a lab value against its reference range.

    Missing bounds never flag; a missing value is reported as normal.
    """
    if value is None:
        return 'normal'
    if ref_min is not None and value < ref_min:
        return 'low'
    if ref_max is not None and value > ref_max:
        return 'high'
    return 'normal'
