from decimal import Decimal

from rest_framework import serializers

from clinic.models import Appointment, EmergencyRecord, Prescription, PrescriptionTemplate
from clinic.serializers.fields import CleanCharField, CleanModelSerializer
from clinic.services.prescriptions import clean_medications


class MedicationSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255, required=False, allow_blank=True)
    dosage = CleanCharField(max_length=128, required=False, allow_blank=True)
    frequency = CleanCharField(max_length=128, required=False, allow_blank=True)
    duration = CleanCharField(max_length=128, required=False, allow_blank=True)


class AppointmentSerializer(CleanModelSerializer):
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)
    caretag_id = serializers.CharField(source='patient.caretag_id', read_only=True)

    class Meta:
        model = Appointment
        fields = (
            'id', 'patient', 'patient_name', 'caretag_id', 'doctor', 'scheduled_at', 'duration_minutes',
            'reason', 'notes', 'status', 'created_at', 'updated_at',
        )
        read_only_fields = ('doctor', 'created_at', 'updated_at')
        extra_kwargs = {'duration_minutes': {'min_value': 5, 'max_value': 480}}


class AppointmentListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Appointment.STATUS_CHOICES] + ['all'], required=False)
    date = serializers.DateField(required=False)
    patient = serializers.IntegerField(required=False, min_value=1)


class PrescriptionSerializer(CleanModelSerializer):
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)
    caretag_id = serializers.CharField(source='patient.caretag_id', read_only=True)
    medications = serializers.ListField(child=MedicationSerializer())
    valid_months = serializers.IntegerField(write_only=True, required=False, min_value=1, max_value=24)

    class Meta:
        model = Prescription
        fields = (
            'id', 'patient', 'patient_name', 'caretag_id', 'doctor', 'diagnosis', 'medications', 'notes',
            'status', 'valid_until', 'valid_months', 'refill_count', 'max_refills', 'last_refill_date',
            'next_refill_reminder', 'created_at', 'updated_at',
        )
        read_only_fields = ('doctor', 'refill_count', 'last_refill_date', 'created_at', 'updated_at')
        extra_kwargs = {'max_refills': {'max_value': 12}}

    def validate_medications(self, v):
        return clean_medications(v)


class PrescriptionListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=128)
    status = serializers.ChoiceField(choices=[c[0] for c in Prescription.STATUS_CHOICES] + ['all'], required=False)
    range = serializers.ChoiceField(choices=['today', 'week', 'month', 'quarter', 'all'], required=False)


class PrescriptionTemplateSerializer(CleanModelSerializer):
    medications = serializers.ListField(child=MedicationSerializer())

    class Meta:
        model = PrescriptionTemplate
        fields = ('id', 'name', 'diagnosis', 'medications', 'notes', 'is_favorite', 'created_at', 'updated_at')
        read_only_fields = ('created_at', 'updated_at')

    def validate_medications(self, v):
        return clean_medications(v)


class EmergencySerializer(CleanModelSerializer):
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)
    caretag_id = serializers.CharField(source='patient.caretag_id', read_only=True)
    blood_group = serializers.CharField(source='patient.blood_group', read_only=True)
    allergies = serializers.JSONField(source='patient.allergies', read_only=True)
    actions_taken = serializers.ListField(child=CleanCharField(max_length=500), required=False)

    class Meta:
        model = EmergencyRecord
        fields = (
            'id', 'patient', 'patient_name', 'caretag_id', 'blood_group', 'allergies', 'doctor',
            'severity', 'description', 'vitals_snapshot', 'actions_taken', 'outcome', 'resolved_at',
            'created_at', 'updated_at',
        )
        read_only_fields = ('doctor', 'resolved_at', 'created_at', 'updated_at')


class EmergencyResolveSerializer(serializers.Serializer):
    outcome = CleanCharField(required=False, allow_blank=True)


class RefillSerializer(serializers.Serializer):
    next_refill_reminder = serializers.DateField(required=False, allow_null=True)


class DosageRequestSerializer(serializers.Serializer):
    drug = serializers.CharField(max_length=64)
    weight = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal('0.1'))
    age = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, required=False, allow_null=True)
    age_unit = serializers.ChoiceField(choices=['years', 'months'], default='years')

    def validate_drug(self, v):
        return v.strip().lower()

    def validate(self, attrs):
        age = attrs.get('age')
        if age is not None and attrs.get('age_unit') == 'months':
            attrs['age'] = age / 12
        return attrs
