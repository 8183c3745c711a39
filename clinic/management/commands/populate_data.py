"""
Management command to populate the database with demo clinic data.
"""
import random
from datetime import date, timedelta
from decimal import Decimal

from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import (
    Appointment,
    Clinic,
    EmergencyRecord,
    InventoryItem,
    LabResult,
    MedicalRecord,
    Patient,
    Prescription,
    PrescriptionTemplate,
    StaffSchedule,
    User,
    Vitals,
)
from clinic.services.billing import create_invoice
from clinic.services.patients import next_caretag_id
from clinic.services.prescriptions import valid_until_for

FIRST_NAMES = ["Priya", "Arjun", "Meera", "Vikram", "Sara", "Kabir", "Anita", "Rohan", "Leela", "Dev"]
LAST_NAMES = ["Sharma", "Patel", "Iyer", "Khan", "Das", "Reddy", "Nair", "Singh"]
CONDITIONS = ["Hypertension", "Type 2 Diabetes", "Asthma", "Hypothyroidism", "Migraine", "Arthritis"]
ALLERGIES = ["Penicillin", "Peanuts", "Sulfa drugs", "Latex", "Dust"]
BLOOD_GROUPS = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
MEDICATIONS = [
    {"name": "Paracetamol", "dosage": "500mg", "frequency": "Every 6 hours", "duration": "5 days"},
    {"name": "Amoxicillin", "dosage": "500mg", "frequency": "Three times daily", "duration": "7 days"},
    {"name": "Metformin", "dosage": "500mg", "frequency": "Twice daily", "duration": "30 days"},
    {"name": "Cetirizine", "dosage": "10mg", "frequency": "Once daily", "duration": "10 days"},
]
INVENTORY = [
    ("Paracetamol 500mg", "Medications", "tablets", 500, 100, "0.05"),
    ("Amoxicillin 500mg", "Medications", "capsules", 40, 50, "0.30"),
    ("Disposable Syringes", "Medical Supplies", "pieces", 300, 100, "0.12"),
    ("Nitrile Gloves", "PPE", "boxes", 8, 10, "6.50"),
    ("Glucose Test Strips", "Lab Supplies", "strips", 200, 50, "0.40"),
    ("Digital Thermometer", "Equipment", "units", 6, 2, "12.00"),
]


class Command(BaseCommand):
    help = 'Populate database with demo data'

    def add_arguments(self, parser):
        parser.add_argument('--patients', type=int, default=20)
        parser.add_argument('--seed', type=int, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])
        call_command('ensure_test_users', stdout=self.stdout)
        doctors = list(User.objects.filter(role=User.ROLE_DOCTOR))

        self.stdout.write('creating patients...')
        patients = self.create_patients(doctors, options['patients'])
        self.stdout.write('creating clinical records...')
        self.create_appointments(patients)
        self.create_prescriptions(patients)
        self.create_vitals_and_labs(patients)
        self.create_emergencies(patients)
        self.stdout.write('creating operations data...')
        self.create_inventory()
        self.create_clinics()
        self.create_schedules(doctors)
        self.create_templates(doctors)
        self.create_invoices(patients)
        self.stdout.write(self.style.SUCCESS(f'Demo data ready: {len(patients)} patients'))

    def create_patients(self, doctors, count):
        patients = []
        today = date.today()
        for _ in range(count):
            dob = today - timedelta(days=random.randint(365, 85 * 365))
            patients.append(Patient.objects.create(
                caretag_id=next_caretag_id(),
                full_name=f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
                date_of_birth=dob,
                gender=random.choice(['male', 'female', 'other']),
                blood_group=random.choice(BLOOD_GROUPS),
                allergies=random.sample(ALLERGIES, k=random.randint(0, 2)),
                chronic_conditions=random.sample(CONDITIONS, k=random.randint(0, 2)),
                phone=f"+91 9{random.randint(100000000, 999999999)}",
                primary_doctor=random.choice(doctors),
            ))
        return patients

    def create_appointments(self, patients):
        now = timezone.now()
        for p in patients:
            for _ in range(random.randint(1, 3)):
                offset = timedelta(hours=random.randint(-240, 240))
                status = Appointment.STATUS_SCHEDULED if offset > timedelta(0) else random.choice(
                    [Appointment.STATUS_COMPLETED, Appointment.STATUS_CANCELLED, Appointment.STATUS_NO_SHOW])
                Appointment.objects.create(
                    patient=p, doctor=p.primary_doctor, scheduled_at=now + offset,
                    reason=random.choice(['Follow-up', 'General checkup', 'Fever', 'Lab review']),
                    status=status,
                )

    def create_prescriptions(self, patients):
        for p in random.sample(patients, k=len(patients) // 2):
            Prescription.objects.create(
                patient=p, doctor=p.primary_doctor,
                diagnosis=random.choice(p.chronic_conditions or ['Viral fever']),
                medications=random.sample(MEDICATIONS, k=random.randint(1, 2)),
                valid_until=valid_until_for(random.choice([1, 3, 6])),
                max_refills=random.randint(0, 3),
            )

    def create_vitals_and_labs(self, patients):
        now = timezone.now()
        for p in patients:
            for i in range(3):
                Vitals.objects.create(
                    patient=p,
                    heart_rate=random.randint(58, 110),
                    blood_pressure_systolic=random.randint(100, 160),
                    blood_pressure_diastolic=random.randint(60, 100),
                    spo2=random.randint(92, 100),
                    temperature=Decimal(f"{random.uniform(36.2, 38.4):.1f}"),
                    source='manual',
                    recorded_at=now - timedelta(days=i * 7),
                )
            MedicalRecord.objects.create(
                patient=p, doctor=p.primary_doctor, record_type='consultation',
                diagnosis=random.choice(p.chronic_conditions or ['Routine visit']),
                symptoms=random.sample(['fatigue', 'headache', 'cough', 'dizziness'], k=2),
            )
            LabResult.objects.create(
                patient=p, doctor=p.primary_doctor, test_name='Fasting Glucose', test_category='Biochemistry',
                result_value=Decimal(random.randint(70, 180)), result_unit='mg/dL',
                reference_min=Decimal('70'), reference_max=Decimal('100'), tested_at=now,
            )

    def create_emergencies(self, patients):
        for p in random.sample(patients, k=min(3, len(patients))):
            EmergencyRecord.objects.create(
                patient=p, doctor=p.primary_doctor,
                severity=random.choice(['medium', 'high', 'critical']),
                description='Acute chest discomfort reported at reception',
                actions_taken=['ECG ordered', 'Oxygen administered'],
            )

    def create_inventory(self):
        for name, category, unit, qty, min_level, cost in INVENTORY:
            InventoryItem.objects.get_or_create(name=name, defaults={
                'category': category, 'unit': unit, 'quantity': qty, 'min_stock_level': min_level,
                'cost_per_unit': Decimal(cost), 'expiry_date': date.today() + timedelta(days=random.randint(10, 400)),
            })

    def create_clinics(self):
        for name, city in [('CareTag Central Clinic', 'Bengaluru'), ('CareTag Eastside', 'Pune')]:
            Clinic.objects.get_or_create(name=name, defaults={'address': '12 MG Road', 'city': city})

    def create_schedules(self, doctors):
        for d in doctors:
            for day in range(1, 6):
                StaffSchedule.objects.get_or_create(doctor=d, day_of_week=day, defaults={
                    'start_time': '09:00', 'end_time': '17:00', 'break_start': '13:00', 'break_end': '14:00',
                })

    def create_templates(self, doctors):
        for d in doctors:
            PrescriptionTemplate.objects.get_or_create(doctor=d, name='Common cold', defaults={
                'diagnosis': 'Upper respiratory infection',
                'medications': [MEDICATIONS[0], MEDICATIONS[3]],
                'is_favorite': True,
            })

    def create_invoices(self, patients):
        for p in random.sample(patients, k=min(5, len(patients))):
            create_invoice(
                p.primary_doctor, patient=p,
                items=[{'description': 'Consultation', 'quantity': 1, 'unit_price': '50.00'},
                       {'description': 'Lab test', 'quantity': 1, 'unit_price': '20.00'}],
                tax_rate=Decimal('10'),
            )
