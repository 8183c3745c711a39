"""
Database models for the CareTag clinic backend.

These models capture the clinical and administrative records of the
system: staff users and their profiles, patients and everything charted
against them (appointments, prescriptions, vitals, records, lab results,
emergencies), plus the supporting tables for inventory, billing,
referrals, messaging, scheduling and auditing.  Column names follow the
row shapes the front-end already consumes so that serialisation stays a
straight field mapping.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Staff account with an application role.

    Roles mirror the front-end roles: 'doctor' and 'admin'.  The role
    only decides which dashboard and menus render on the client; every
    endpoint still checks access on its own.
    """
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_DOCTOR, db_index=True)

    @property
    def is_admin_role(self) -> bool:
        return self.role == self.ROLE_ADMIN

    @property
    def display_name(self) -> str:
        profile = getattr(self, 'profile', None)
        if profile and profile.full_name:
            return profile.full_name
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Profile(models.Model):
    """Professional details collected during doctor sign-up."""
    VERIFICATION_CHOICES = [
        ('pending', 'Pending'),
        ('verified', 'Verified'),
        ('rejected', 'Rejected'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    specialization = models.CharField(max_length=128, blank=True)
    department = models.CharField(max_length=128, blank=True)
    license_number = models.CharField(max_length=64, blank=True)
    primary_qualification = models.CharField(max_length=128, blank=True)
    years_of_experience = models.PositiveIntegerField(null=True, blank=True)
    languages_spoken = models.JSONField(default=list, blank=True)
    clinic_name = models.CharField(max_length=255, blank=True)
    clinic_address = models.TextField(blank=True)
    city = models.CharField(max_length=128, blank=True)
    state = models.CharField(max_length=128, blank=True)
    verification_status = models.CharField(max_length=16, choices=VERIFICATION_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.specialization or 'general'})"


class Patient(models.Model):
    """Demographic and clinical summary record.

    ``caretag_id`` is the identifier printed on the patient's tag/QR
    code.  It is stored upper-case and is unique across the clinic.
    """
    caretag_id = models.CharField(max_length=32, unique=True)
    full_name = models.CharField(max_length=255, db_index=True)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=16)
    blood_group = models.CharField(max_length=4, blank=True)
    allergies = models.JSONField(default=list, blank=True)
    chronic_conditions = models.JSONField(default=list, blank=True)
    current_medications = models.JSONField(default=list, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    emergency_contact_name = models.CharField(max_length=255, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True)
    insurance_provider = models.CharField(max_length=255, blank=True)
    insurance_id = models.CharField(max_length=64, blank=True)
    primary_doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='primary_patients'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if self.caretag_id:
            self.caretag_id = self.caretag_id.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.caretag_id})"


class Appointment(models.Model):
    STATUS_SCHEDULED = 'scheduled'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no_show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')
    scheduled_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=30)
    reason = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'scheduled_at'], name='clinic_appo_doctor__1a3f2e_idx'),
            models.Index(fields=['patient', 'scheduled_at'], name='clinic_appo_patient_5c8d41_idx'),
        ]

    def __str__(self) -> str:
        return f"Appointment({self.patient_id} with {self.doctor_id} @ {self.scheduled_at:%F %H:%M})"


class Prescription(models.Model):
    """A medication list issued to a patient.

    ``medications`` is a JSON array of ``{name, dosage, frequency,
    duration}`` objects; the values are free-form text.
    """
    STATUS_ACTIVE = 'active'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='prescriptions')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescriptions')
    diagnosis = models.CharField(max_length=255, blank=True)
    medications = models.JSONField(default=list)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    valid_until = models.DateField(null=True, blank=True)
    refill_count = models.PositiveIntegerField(default=0)
    max_refills = models.PositiveIntegerField(default=0)
    last_refill_date = models.DateField(null=True, blank=True)
    next_refill_reminder = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Rx #{self.id} for {self.patient_id} ({self.status})"


class PrescriptionTemplate(models.Model):
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prescription_templates')
    name = models.CharField(max_length=255)
    diagnosis = models.CharField(max_length=255, blank=True)
    medications = models.JSONField(default=list)
    notes = models.TextField(blank=True)
    is_favorite = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class EmergencyRecord(models.Model):
    SEVERITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='emergencies')
    doctor = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='emergencies')
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, db_index=True)
    description = models.TextField()
    vitals_snapshot = models.JSONField(null=True, blank=True)
    actions_taken = models.JSONField(default=list, blank=True)
    outcome = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Emergency({self.severity}) for {self.patient_id}"


class Vitals(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='vitals')
    heart_rate = models.PositiveIntegerField(null=True, blank=True)
    blood_pressure_systolic = models.PositiveIntegerField(null=True, blank=True)
    blood_pressure_diastolic = models.PositiveIntegerField(null=True, blank=True)
    spo2 = models.PositiveIntegerField(null=True, blank=True)
    temperature = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    respiratory_rate = models.PositiveIntegerField(null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    height = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    source = models.CharField(max_length=32, blank=True)
    recorded_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = 'vitals'

    def __str__(self) -> str:
        return f"Vitals({self.patient_id} @ {self.recorded_at:%F %T})"


class MedicalRecord(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medical_records')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='medical_records')
    record_type = models.CharField(max_length=64)
    diagnosis = models.CharField(max_length=255, blank=True)
    symptoms = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.record_type} for {self.patient_id}"


class LabResult(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='lab_results')
    doctor = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='lab_results')
    test_name = models.CharField(max_length=128)
    test_category = models.CharField(max_length=64, blank=True)
    result_value = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    result_unit = models.CharField(max_length=32, blank=True)
    reference_min = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    reference_max = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    status = models.CharField(max_length=16, default='completed')
    notes = models.TextField(blank=True)
    tested_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self) -> str:
        return f"{self.test_name}={self.result_value} ({self.patient_id})"


class InventoryItem(models.Model):
    CATEGORY_CHOICES = [
        ('Medications', 'Medications'),
        ('Medical Supplies', 'Medical Supplies'),
        ('Equipment', 'Equipment'),
        ('Lab Supplies', 'Lab Supplies'),
        ('PPE', 'PPE'),
        ('Consumables', 'Consumables'),
        ('Other', 'Other'),
    ]
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES)
    sku = models.CharField(max_length=64, blank=True)
    quantity = models.IntegerField(default=0)
    unit = models.CharField(max_length=32)
    min_stock_level = models.IntegerField(default=10)
    cost_per_unit = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    supplier = models.CharField(max_length=255, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    location = models.CharField(max_length=128, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} x{self.quantity}"


class Invoice(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='invoices')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='invoices')
    invoice_number = models.CharField(max_length=32, unique=True)
    items = models.JSONField(default=list)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending', db_index=True)
    due_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.status})"


class Referral(models.Model):
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('normal', 'Normal'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('completed', 'Completed'),
        ('declined', 'Declined'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='referrals')
    referring_doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='referrals')
    specialist_name = models.CharField(max_length=255)
    specialist_type = models.CharField(max_length=128)
    reason = models.TextField()
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal')
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default='pending', db_index=True)
    notes = models.TextField(blank=True)
    appointment_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Referral {self.patient_id} -> {self.specialist_name}"


class Message(models.Model):
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sent_messages')
    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='received_messages')
    subject = models.CharField(max_length=255, blank=True)
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='clinic_mess_recipie_7b2c90_idx'),
            models.Index(fields=['sender', 'created_at'], name='clinic_mess_sender__e41d6a_idx'),
        ]

    def __str__(self) -> str:
        return f"msg {self.id} {self.sender_id}->{self.recipient_id}"


class StaffSchedule(models.Model):
    DAY_CHOICES = [
        (0, 'Sunday'),
        (1, 'Monday'),
        (2, 'Tuesday'),
        (3, 'Wednesday'),
        (4, 'Thursday'),
        (5, 'Friday'),
        (6, 'Saturday'),
    ]
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='schedules')
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)
    break_start = models.TimeField(null=True, blank=True)
    break_end = models.TimeField(null=True, blank=True)
    max_appointments = models.PositiveIntegerField(default=20)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Schedule(d={self.doctor_id}, day={self.day_of_week} {self.start_time}-{self.end_time})"


class Clinic(models.Model):
    name = models.CharField(max_length=255)
    address = models.TextField()
    city = models.CharField(max_length=128)
    state = models.CharField(max_length=128, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class WaitlistEntry(models.Model):
    STATUS_CHOICES = [
        ('waiting', 'Waiting'),
        ('scheduled', 'Scheduled'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='waitlist_entries')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='waitlist_entries')
    preferred_date = models.DateField(null=True, blank=True)
    preferred_time_slot = models.CharField(max_length=32, blank=True)
    reason = models.CharField(max_length=255, blank=True)
    priority = models.IntegerField(default=0)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default='waiting', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Waitlist({self.patient_id}, p={self.priority})"


class Feedback(models.Model):
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='feedback')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='feedback')
    rating = models.PositiveSmallIntegerField()
    comment = models.TextField(blank=True)
    is_anonymous = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Feedback({self.doctor_id}, {self.rating})"


class AuditLog(models.Model):
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_logs')
    action = models.CharField(max_length=64)
    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64, blank=True, null=True)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audi_action_3f9e27_idx'),
            models.Index(fields=['entity_type', 'entity_id', 'created_at'], name='clinic_audi_entity__b8a514_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.entity_type}:{self.entity_id}"


class UserPreference(models.Model):
    """UI preferences that the client previously kept in local storage."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='preferences')
    dashboard_layout = models.JSONField(default=list, blank=True)
    reminder_settings = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Preferences({self.user_id})"
