from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic.services import dosage
from clinic.services.analytics import age_groups, daily_registrations, gender_distribution
from clinic.services.billing import compute_totals, new_invoice_number
from clinic.services.inventory import days_until, inventory_stats, is_expiring
from clinic.services.labs import result_status
from clinic.services.llm import parse_json, strip_fences
from clinic.services.notifications import critical_vitals
from clinic.services.prescriptions import add_months, clean_medications
from clinic.services.reminders import format_reminder
from clinic.services.timeline import merge_events


# ----------------------------------------------------------------------
# dosage
# ----------------------------------------------------------------------
def test_paracetamol_weight_based_dose():
    r = dosage.calculate('Paracetamol', Decimal('20'))
    assert r['dose'] == '300 mg'
    assert r['frequency'] == 'every 4-6 hours'
    assert r['totalDaily'] == '1200 mg/day'
    assert r['capped'] is False


def test_dose_is_capped_at_max_single_dose():
    r = dosage.calculate('ibuprofen', Decimal('80'))
    assert r['dose'] == '400 mg'
    assert r['totalDaily'] == '1200 mg/day'
    assert r['capped'] is True


def test_metformin_reports_fixed_adult_range():
    r = dosage.calculate('metformin', Decimal('70'))
    assert r['dose'] == '1000-2000 mg'
    assert r['totalDaily'] == '2000-4000 mg'


def test_unknown_drug():
    r = dosage.calculate('unobtainium', Decimal('10'))
    assert r['dose'] == 'N/A'
    assert r['notes'] == dosage.UNKNOWN_NOTE


def test_infant_note_appended_under_two_years():
    r = dosage.calculate('amoxicillin', Decimal('8'), Decimal('1'))
    assert r['dose'] == '200 mg'
    assert r['notes'].endswith('Consult pediatric specialist for infants')
    assert 'infants' not in dosage.calculate('amoxicillin', Decimal('8'), Decimal('3'))['notes']


def test_missing_age_gets_infant_note():
    assert dosage.calculate('amoxicillin', Decimal('8'))['notes'].endswith(dosage.INFANT_NOTE)


@pytest.mark.parametrize('frequency,expected', [
    ('once daily', 1),
    ('twice daily', 2),
    ('every 4-6 hours', 4),
    ('every 8 hours', 3),
])
def test_doses_per_day(frequency, expected):
    assert dosage.doses_per_day(frequency) == expected


# ----------------------------------------------------------------------
# billing
# ----------------------------------------------------------------------
def test_compute_totals_example_invoice():
    totals = compute_totals(
        [{'description': 'Consultation', 'quantity': 2, 'unit_price': '50'},
         {'description': 'Dressing', 'quantity': 1, 'unit_price': '20'}],
        tax_rate=Decimal('10'),
        discount=Decimal('5'),
    )
    assert totals['subtotal'] == Decimal('120.00')
    assert totals['tax_amount'] == Decimal('12.00')
    assert totals['discount_amount'] == Decimal('5.00')
    assert totals['total_amount'] == Decimal('127.00')
    assert [line['total'] for line in totals['items']] == [Decimal('100.00'), Decimal('20.00')]


def test_compute_totals_rounds_half_up():
    totals = compute_totals([{'description': 'x', 'quantity': 1, 'unit_price': '0.05'}], tax_rate=Decimal('50'))
    assert totals['tax_amount'] == Decimal('0.03')


def test_invoice_number_format():
    number = new_invoice_number(datetime(2024, 3, 9, 10, 0))
    assert number.startswith('INV-20240309-')
    assert len(number.split('-')[-1]) == 6


# ----------------------------------------------------------------------
# prescriptions
# ----------------------------------------------------------------------
@pytest.mark.parametrize('start,months,expected', [
    (date(2024, 1, 15), 1, date(2024, 2, 15)),
    (date(2024, 1, 31), 1, date(2024, 2, 29)),
    (date(2023, 1, 31), 1, date(2023, 2, 28)),
    (date(2024, 11, 30), 3, date(2025, 2, 28)),
    (date(2024, 5, 10), 12, date(2025, 5, 10)),
])
def test_add_months_clamps_to_month_end(start, months, expected):
    assert add_months(start, months) == expected


def test_clean_medications_drops_unnamed_rows():
    meds = clean_medications([{'name': ' Amoxicillin ', 'dosage': '500mg'}, {'name': ''}, {'dosage': '1'}])
    assert meds == [{'name': 'Amoxicillin', 'dosage': '500mg', 'frequency': '', 'duration': ''}]
    with pytest.raises(ValidationError):
        clean_medications([{'name': '   '}])


# ----------------------------------------------------------------------
# labs & inventory
# ----------------------------------------------------------------------
@pytest.mark.parametrize('value,lo,hi,expected', [
    (Decimal('5'), Decimal('10'), Decimal('20'), 'low'),
    (Decimal('25'), Decimal('10'), Decimal('20'), 'high'),
    (Decimal('10'), Decimal('10'), Decimal('20'), 'normal'),
    (Decimal('25'), None, None, 'normal'),
    (None, Decimal('10'), Decimal('20'), 'normal'),
])
def test_result_status(value, lo, hi, expected):
    assert result_status(value, lo, hi) == expected


def test_inventory_expiry_window():
    today = date(2024, 6, 1)
    item = SimpleNamespace(expiry_date=date(2024, 7, 1), quantity=1, min_stock_level=0, cost_per_unit=None)
    assert days_until(item.expiry_date, today) == 30
    assert is_expiring(item, today)
    item.expiry_date = date(2024, 7, 2)
    assert not is_expiring(item, today)
    item.expiry_date = today
    assert not is_expiring(item, today)


def test_inventory_stats_totals():
    today = date(2024, 6, 1)
    items = [
        SimpleNamespace(quantity=4, min_stock_level=5, cost_per_unit=Decimal('1.25'), expiry_date=date(2024, 6, 10)),
        SimpleNamespace(quantity=50, min_stock_level=5, cost_per_unit=None, expiry_date=None),
    ]
    assert inventory_stats(items, today) == {
        'total': 2, 'lowStock': 1, 'expiring': 1, 'totalValue': Decimal('5.00'),
    }


# ----------------------------------------------------------------------
# AI gateway helpers
# ----------------------------------------------------------------------
def test_strip_fences():
    assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_fences('```\n[1]\n```') == '[1]'
    assert strip_fences('  {"a": 1}  ') == '{"a": 1}'


def test_parse_json_falls_back_to_default():
    assert parse_json('```json\n{"interactions": []}\n```', None) == {'interactions': []}
    assert parse_json('Sorry, I cannot help with that.', {'fallback': True}) == {'fallback': True}
    assert parse_json('', 'empty') == 'empty'


# ----------------------------------------------------------------------
# vitals alerts
# ----------------------------------------------------------------------
def _vitals(**kw):
    base = dict(heart_rate=None, spo2=None, blood_pressure_systolic=None, blood_pressure_diastolic=None)
    base.update(kw)
    return SimpleNamespace(**base)


def test_critical_vitals_thresholds():
    assert critical_vitals(_vitals(heart_rate=80, spo2=98, blood_pressure_systolic=120,
                                   blood_pressure_diastolic=80)) == []
    assert critical_vitals(_vitals(heart_rate=130)) == ['HR 130 bpm']
    assert critical_vitals(_vitals(heart_rate=45, spo2=85)) == ['HR 45 bpm', 'SpO2 85%']
    assert critical_vitals(_vitals(blood_pressure_systolic=190, blood_pressure_diastolic=110)) == ['BP 190/110']
    assert critical_vitals(_vitals(heart_rate=120, spo2=90, blood_pressure_systolic=180)) == []


# ----------------------------------------------------------------------
# timeline
# ----------------------------------------------------------------------
def test_merge_events_sorts_newest_first():
    now = timezone.now()
    apt = SimpleNamespace(id=1, reason='', status='scheduled', duration_minutes=30, scheduled_at=now - timedelta(days=2))
    rx = SimpleNamespace(id=2, diagnosis='Flu', medications=[{'name': 'A'}, {'name': 'B'}], status='active',
                         created_at=now - timedelta(days=1))
    vit = SimpleNamespace(id=3, heart_rate=70, blood_pressure_systolic=None, blood_pressure_diastolic=None, spo2=97,
                          recorded_at=now)
    events = merge_events(appointments=[apt], prescriptions=[rx], vitals=[vit])
    assert [e['id'] for e in events] == ['vital-3', 'rx-2', 'apt-1']
    assert events[0]['description'] == 'HR: 70 | SpO2: 97%'
    assert events[1]['description'] == '2 medication(s) | Status: active'
    assert events[2]['title'] == 'General Consultation'


# ----------------------------------------------------------------------
# analytics & reminders
# ----------------------------------------------------------------------
def test_gender_distribution_is_case_insensitive():
    patients = [SimpleNamespace(gender=g) for g in ('Male', 'female', 'FEMALE', 'non-binary', '')]
    assert gender_distribution(patients) == {'male': 1, 'female': 2, 'other': 2}


def test_age_groups_boundaries():
    today = date(2024, 6, 1)
    patients = [SimpleNamespace(date_of_birth=date(2024 - age, 1, 1)) for age in (10, 18, 19, 50, 66, 90)]
    counts = {g['label']: g['count'] for g in age_groups(patients, today)}
    assert counts == {'0-18': 2, '19-35': 1, '36-50': 1, '51-65': 0, '65+': 2}


def test_daily_registrations_covers_fourteen_days():
    today = timezone.localdate()
    created = timezone.make_aware(datetime.combine(today, datetime.min.time())) + timedelta(hours=12)
    series = daily_registrations([SimpleNamespace(created_at=created)], today)
    assert len(series) == 14
    assert series[-1]['count'] == 1
    assert sum(day['count'] for day in series) == 1


def test_reminder_text():
    when = timezone.make_aware(datetime(2024, 3, 5, 14, 7))
    apt = SimpleNamespace(scheduled_at=when, reason='', patient=SimpleNamespace(full_name='Priya Sharma'))
    text = format_reminder(apt)
    assert text.startswith('Hello Priya Sharma,')
    assert 'Date: Tuesday, March 5, 2024' in text
    assert 'Time: 2:07 PM' in text
    assert 'Reason: General Consultation' in text
