"""
Django admin registrations for the clinic models.

Superusers can inspect and correct data at ``/admin/``; the API remains
the only path the front-end uses.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AuditLog,
    Clinic,
    EmergencyRecord,
    Feedback,
    InventoryItem,
    Invoice,
    LabResult,
    MedicalRecord,
    Message,
    Patient,
    Prescription,
    PrescriptionTemplate,
    Profile,
    Referral,
    StaffSchedule,
    User,
    UserPreference,
    Vitals,
    WaitlistEntry,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'email', 'is_active', 'is_superuser')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'email')


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'user', 'specialization', 'verification_status')
    list_filter = ('verification_status',)
    search_fields = ('full_name', 'license_number', 'user__username')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('caretag_id', 'full_name', 'gender', 'date_of_birth', 'blood_group', 'primary_doctor')
    list_filter = ('gender', 'blood_group')
    search_fields = ('caretag_id', 'full_name', 'phone', 'email')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'scheduled_at', 'status')
    list_filter = ('status',)
    search_fields = ('patient__full_name', 'patient__caretag_id', 'reason')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'diagnosis', 'status', 'refill_count', 'max_refills', 'valid_until')
    list_filter = ('status',)
    search_fields = ('patient__full_name', 'diagnosis')


@admin.register(EmergencyRecord)
class EmergencyRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'severity', 'created_at', 'resolved_at')
    list_filter = ('severity',)


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'quantity', 'min_stock_level', 'expiry_date')
    list_filter = ('category',)
    search_fields = ('name', 'sku')


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'patient', 'total_amount', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('invoice_number', 'patient__full_name')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'action', 'entity_type', 'entity_id', 'ip_address')
    list_filter = ('action', 'entity_type')
    search_fields = ('entity_id', 'user__username')
    readonly_fields = ('user', 'action', 'entity_type', 'entity_id', 'details', 'ip_address', 'created_at')


for model in (
    PrescriptionTemplate,
    Vitals,
    MedicalRecord,
    LabResult,
    Referral,
    Message,
    StaffSchedule,
    Clinic,
    WaitlistEntry,
    Feedback,
    UserPreference,
):
    admin.site.register(model)
