from rest_framework import serializers

from clinic.serializers.fields import CleanCharField


class HealthInsightsRequestSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)


class SmartDiagnosisRequestSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    symptoms = serializers.ListField(child=CleanCharField(max_length=255), required=False, default=list)
    chiefComplaint = CleanCharField(max_length=1000, required=False, allow_blank=True)
    duration = CleanCharField(max_length=128, required=False, allow_blank=True)
    severity = CleanCharField(max_length=64, required=False, allow_blank=True)


class ReminderRequestSerializer(serializers.Serializer):
    appointmentId = serializers.IntegerField(min_value=1)
    reminderType = serializers.ChoiceField(choices=['sms', 'email'], default='sms')


class DrugInteractionsRequestSerializer(serializers.Serializer):
    drugs = serializers.ListField(child=serializers.CharField(max_length=128, allow_blank=True), required=False, default=list)
