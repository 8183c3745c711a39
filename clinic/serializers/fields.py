import bleach
from django.db import models
from rest_framework import serializers


def clean_text(value: str) -> str:
    return bleach.clean((value or '').strip(), strip=True)


class CleanCharField(serializers.CharField):
    """CharField that strips any markup from the submitted text."""

    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))


class StringListField(serializers.ListField):
    """List of short strings; a comma separated string is accepted too."""
    child = CleanCharField(max_length=255)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = [part.strip() for part in data.split(',') if part.strip()]
        return super().to_internal_value(data)


class UpperCaseCharField(serializers.CharField):
    def to_internal_value(self, data):
        return super().to_internal_value(data).upper()


class CleanModelSerializer(serializers.ModelSerializer):
    """ModelSerializer whose TextField columns are cleaned of markup on input."""
    serializer_field_mapping = {
        **serializers.ModelSerializer.serializer_field_mapping,
        models.TextField: CleanCharField,
    }
