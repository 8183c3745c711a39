from rest_framework import serializers

from clinic.models import LabResult, MedicalRecord, Patient, Referral, User, Vitals
from clinic.serializers.fields import CleanCharField, CleanModelSerializer, StringListField, UpperCaseCharField
from clinic.services.labs import result_status

BLOOD_GROUPS = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')


class PatientSerializer(CleanModelSerializer):
    caretag_id = UpperCaseCharField(max_length=32, required=False)
    full_name = CleanCharField(max_length=255)
    allergies = StringListField(required=False)
    chronic_conditions = StringListField(required=False)
    current_medications = StringListField(required=False)
    primary_doctor = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role=User.ROLE_DOCTOR), required=False, allow_null=True
    )

    class Meta:
        model = Patient
        fields = (
            'id', 'caretag_id', 'full_name', 'date_of_birth', 'gender', 'blood_group',
            'allergies', 'chronic_conditions', 'current_medications',
            'phone', 'email', 'address', 'emergency_contact_name', 'emergency_contact_phone',
            'insurance_provider', 'insurance_id', 'primary_doctor', 'created_at', 'updated_at',
        )
        read_only_fields = ('created_at', 'updated_at')

    def validate_caretag_id(self, v):
        qs = Patient.objects.filter(caretag_id=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('A patient with this CareTag ID already exists')
        return v

    def validate_blood_group(self, v):
        v = (v or '').strip().upper()
        if v and v not in BLOOD_GROUPS:
            raise serializers.ValidationError(f'Blood group must be one of {", ".join(BLOOD_GROUPS)}')
        return v


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=128)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)


class VitalsSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vitals
        fields = (
            'id', 'patient', 'heart_rate', 'blood_pressure_systolic', 'blood_pressure_diastolic',
            'spo2', 'temperature', 'respiratory_rate', 'weight', 'height', 'source',
            'recorded_at', 'created_at',
        )
        read_only_fields = ('patient', 'created_at')
        extra_kwargs = {
            'spo2': {'max_value': 100},
            'recorded_at': {'required': False},
        }


class MedicalRecordSerializer(CleanModelSerializer):
    symptoms = StringListField(required=False)
    attachments = serializers.ListField(child=serializers.URLField(), required=False)
    doctor_name = serializers.SerializerMethodField()

    class Meta:
        model = MedicalRecord
        fields = (
            'id', 'patient', 'doctor', 'doctor_name', 'record_type', 'diagnosis', 'symptoms',
            'notes', 'attachments', 'created_at', 'updated_at',
        )
        read_only_fields = ('patient', 'doctor', 'created_at', 'updated_at')

    def get_doctor_name(self, obj):
        return obj.doctor.display_name


class LabResultSerializer(CleanModelSerializer):
    result_status = serializers.SerializerMethodField()

    class Meta:
        model = LabResult
        fields = (
            'id', 'patient', 'doctor', 'test_name', 'test_category', 'result_value', 'result_unit',
            'reference_min', 'reference_max', 'status', 'result_status', 'notes', 'tested_at', 'created_at',
        )
        read_only_fields = ('patient', 'doctor', 'created_at')

    def get_result_status(self, obj):
        return result_status(obj.result_value, obj.reference_min, obj.reference_max)

    def validate(self, attrs):
        lo = attrs.get('reference_min', getattr(self.instance, 'reference_min', None))
        hi = attrs.get('reference_max', getattr(self.instance, 'reference_max', None))
        if lo is not None and hi is not None and lo > hi:
            raise serializers.ValidationError({'reference_max': 'Reference max must not be below reference min'})
        return attrs


class ReferralSerializer(CleanModelSerializer):
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)

    class Meta:
        model = Referral
        fields = (
            'id', 'patient', 'patient_name', 'referring_doctor', 'specialist_name', 'specialist_type',
            'reason', 'priority', 'status', 'notes', 'appointment_date', 'created_at', 'updated_at',
        )
        read_only_fields = ('referring_doctor', 'status', 'created_at', 'updated_at')


class ReferralStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Referral.STATUS_CHOICES])
    appointment_date = serializers.DateField(required=False, allow_null=True)
