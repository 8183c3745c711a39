"""
Weight-based paediatric/adult dosage calculator.

The drug table is a fixed reference; it is not a drug-safety engine and
the result is always shown to the prescriber as guidance only.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional


class DrugInfo(NamedTuple):
    dose_per_kg: Decimal
    max_dose: int
    frequency: str
    note: str
    unit: str = 'mg'


DRUG_TABLE: dict[str, DrugInfo] = {
    'paracetamol': DrugInfo(Decimal('15'), 1000, 'every 4-6 hours', 'Max 4 doses in 24 hours'),
    'ibuprofen': DrugInfo(Decimal('10'), 400, 'every 6-8 hours', 'Take with food'),
    'amoxicillin': DrugInfo(Decimal('25'), 500, 'every 8 hours', 'Complete full course'),
    'azithromycin': DrugInfo(Decimal('10'), 500, 'once daily', 'Day 1: double dose'),
    'cetirizine': DrugInfo(Decimal('0.25'), 10, 'once daily', 'May cause drowsiness'),
    'metformin': DrugInfo(Decimal('0'), 2000, 'twice daily', 'Adult dosing: 500-1000mg twice daily'),
}

UNKNOWN_NOTE = 'Drug not in database. Please consult reference materials.'
INFANT_NOTE = ' | Consult pediatric specialist for infants'


def doses_per_day(frequency: str) -> int:
    if 'once daily' in frequency:
        return 1
    if 'twice' in frequency:
        return 2
    if '4-6' in frequency:
        return 4
    return 3


def _round(value: Decimal) -> Decimal:
    return value.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def calculate(drug: str, weight_kg: Decimal, age_years: Optional[Decimal] = None) -> dict:
    """Return the single dose, frequency, daily total and notes for ``drug``.

    Weight-based doses are capped at the drug's maximum single dose.
    Drugs without a per-kg dose (metformin) report the fixed adult range.
    """
    info = DRUG_TABLE.get((drug or '').strip().lower())
    if info is None:
        return {'dose': 'N/A', 'frequency': 'N/A', 'totalDaily': 'N/A', 'notes': UNKNOWN_NOTE, 'capped': False}

    if info.dose_per_kg == 0:
        half = info.max_dose // 2
        return {
            'dose': f'{half}-{info.max_dose} {info.unit}',
            'frequency': info.frequency,
            'totalDaily': f'{info.max_dose}-{info.max_dose * 2} {info.unit}',
            'notes': info.note,
            'capped': False,
        }

    raw = Decimal(weight_kg) * info.dose_per_kg
    dose = min(raw, Decimal(info.max_dose))
    notes = info.note
    # no age given counts as an infant
    if age_years is None or age_years < 2:
        notes += INFANT_NOTE
    return {
        'dose': f'{_round(dose)} {info.unit}',
        'frequency': info.frequency,
        'totalDaily': f'{_round(dose * doses_per_day(info.frequency))} {info.unit}/day',
        'notes': notes,
        'capped': raw > info.max_dose,
    }
