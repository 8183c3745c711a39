from rest_framework import serializers

from clinic.models import (
    AuditLog,
    Clinic,
    Feedback,
    InventoryItem,
    Invoice,
    Message,
    StaffSchedule,
    WaitlistEntry,
)
from clinic.serializers.fields import CleanCharField, CleanModelSerializer
from clinic.services.inventory import days_until, is_expiring, is_low_stock
from clinic.services.preferences import AVAILABLE_WIDGETS, DEFAULT_REMINDER_SETTINGS


class InventoryItemSerializer(CleanModelSerializer):
    low_stock = serializers.SerializerMethodField()
    expiring_soon = serializers.SerializerMethodField()
    days_until_expiry = serializers.SerializerMethodField()

    class Meta:
        model = InventoryItem
        fields = (
            'id', 'name', 'category', 'sku', 'quantity', 'unit', 'min_stock_level', 'cost_per_unit',
            'supplier', 'expiry_date', 'location', 'notes', 'low_stock', 'expiring_soon',
            'days_until_expiry', 'created_at', 'updated_at',
        )
        read_only_fields = ('created_at', 'updated_at')
        extra_kwargs = {
            'quantity': {'min_value': 0},
            'min_stock_level': {'min_value': 0},
            'cost_per_unit': {'min_value': 0},
        }

    def get_low_stock(self, obj):
        return is_low_stock(obj)

    def get_expiring_soon(self, obj):
        return is_expiring(obj)

    def get_days_until_expiry(self, obj):
        return days_until(obj.expiry_date)


class InvoiceItemSerializer(serializers.Serializer):
    description = CleanCharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class InvoiceCreateSerializer(serializers.Serializer):
    patient = serializers.IntegerField(min_value=1)
    items = InvoiceItemSerializer(many=True, allow_empty=False)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = CleanCharField(required=False, allow_blank=True, default='')


class InvoiceSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)

    class Meta:
        model = Invoice
        fields = (
            'id', 'invoice_number', 'patient', 'patient_name', 'doctor', 'items', 'subtotal', 'tax_amount',
            'discount_amount', 'total_amount', 'status', 'due_date', 'paid_at', 'notes', 'created_at', 'updated_at',
        )
        read_only_fields = fields


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Invoice.STATUS_CHOICES])


class ClinicSerializer(CleanModelSerializer):
    class Meta:
        model = Clinic
        fields = ('id', 'name', 'address', 'city', 'state', 'phone', 'email', 'is_active', 'created_at', 'updated_at')
        read_only_fields = ('created_at', 'updated_at')


class StaffScheduleSerializer(serializers.ModelSerializer):
    doctor_name = serializers.CharField(source='doctor.display_name', read_only=True)

    class Meta:
        model = StaffSchedule
        fields = (
            'id', 'doctor', 'doctor_name', 'day_of_week', 'start_time', 'end_time', 'is_available',
            'break_start', 'break_end', 'max_appointments', 'created_at', 'updated_at',
        )
        read_only_fields = ('created_at', 'updated_at')
        extra_kwargs = {'doctor': {'required': False}, 'max_appointments': {'min_value': 1}}

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and start >= end:
            raise serializers.ValidationError({'end_time': 'End time must be after start time'})
        b_start = attrs.get('break_start', getattr(self.instance, 'break_start', None))
        b_end = attrs.get('break_end', getattr(self.instance, 'break_end', None))
        if (b_start is None) != (b_end is None):
            raise serializers.ValidationError({'break_end': 'Break start and end must be given together'})
        if b_start and b_end and not (start <= b_start < b_end <= end):
            raise serializers.ValidationError({'break_start': 'Break must fall within working hours'})
        return attrs


class StaffScheduleQuerySerializer(serializers.Serializer):
    doctor = serializers.IntegerField(required=False, min_value=1)


class WaitlistEntrySerializer(CleanModelSerializer):
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)

    class Meta:
        model = WaitlistEntry
        fields = (
            'id', 'patient', 'patient_name', 'doctor', 'preferred_date', 'preferred_time_slot', 'reason',
            'priority', 'status', 'created_at',
        )
        read_only_fields = ('status', 'created_at')
        extra_kwargs = {'doctor': {'required': False}, 'priority': {'min_value': 0, 'max_value': 10}}


class WaitlistStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in WaitlistEntry.STATUS_CHOICES])


class FeedbackSerializer(CleanModelSerializer):
    class Meta:
        model = Feedback
        fields = ('id', 'patient', 'doctor', 'rating', 'comment', 'is_anonymous', 'created_at')
        read_only_fields = ('created_at',)
        extra_kwargs = {'rating': {'min_value': 1, 'max_value': 5}, 'doctor': {'required': False}}

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.is_anonymous:
            data['patient'] = None
        return data


class MessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.display_name', read_only=True)
    recipient_name = serializers.CharField(source='recipient.display_name', read_only=True)

    class Meta:
        model = Message
        fields = ('id', 'sender', 'sender_name', 'recipient', 'recipient_name', 'subject', 'content', 'is_read', 'created_at')
        read_only_fields = fields


class MessageSendSerializer(serializers.Serializer):
    recipient = serializers.IntegerField(min_value=1)
    subject = CleanCharField(max_length=255, required=False, allow_blank=True)
    content = CleanCharField(max_length=5000)


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ('id', 'user', 'username', 'action', 'entity_type', 'entity_id', 'details', 'ip_address', 'created_at')
        read_only_fields = fields


class AuditLogQuerySerializer(serializers.Serializer):
    entity = serializers.CharField(required=False, allow_blank=True, max_length=64)
    action = serializers.CharField(required=False, allow_blank=True, max_length=64)
    q = serializers.CharField(required=False, allow_blank=True, max_length=128)


class PreferencesSerializer(serializers.Serializer):
    dashboardLayout = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    reminderSettings = serializers.DictField(child=serializers.BooleanField(), required=False)

    def validate_dashboardLayout(self, v):
        unknown = [w for w in v if w not in AVAILABLE_WIDGETS]
        if unknown:
            raise serializers.ValidationError(f'Unknown widget(s): {", ".join(unknown)}')
        if len(set(v)) != len(v):
            raise serializers.ValidationError('Widgets must not repeat')
        return v

    def validate_reminderSettings(self, v):
        unknown = [k for k in v if k not in DEFAULT_REMINDER_SETTINGS]
        if unknown:
            raise serializers.ValidationError(f'Unknown setting(s): {", ".join(unknown)}')
        return v
