from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import serializers

from clinic.models import Profile, User
from clinic.serializers.fields import CleanCharField, CleanModelSerializer, StringListField
from clinic.services.passwords import user_from_uid


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class SignupSerializer(serializers.Serializer):
    """Doctor self-registration.

    The account always gets the ``doctor`` role; any ``role`` sent by the
    client is ignored.  Professional details land on the Profile row.
    """
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    email = serializers.EmailField()
    full_name = CleanCharField(max_length=255)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    specialization = CleanCharField(max_length=128, required=False, allow_blank=True)
    department = CleanCharField(max_length=128, required=False, allow_blank=True)
    license_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    primary_qualification = CleanCharField(max_length=128, required=False, allow_blank=True)
    years_of_experience = serializers.IntegerField(min_value=0, max_value=80, required=False, allow_null=True)
    languages_spoken = StringListField(required=False)
    clinic_name = CleanCharField(max_length=255, required=False, allow_blank=True)
    clinic_address = CleanCharField(required=False, allow_blank=True)
    city = CleanCharField(max_length=128, required=False, allow_blank=True)
    state = CleanCharField(max_length=128, required=False, allow_blank=True)

    def validate_username(self, v):
        v = v.strip()
        if User.objects.filter(username__iexact=v).exists():
            raise serializers.ValidationError('This username is already taken')
        return v

    def validate_password(self, v):
        validate_password(v)
        return v

    @transaction.atomic
    def create(self, validated_data):
        username = validated_data.pop('username')
        password = validated_data.pop('password')
        full_name = validated_data['full_name']
        first, _, last = full_name.partition(' ')
        user = User.objects.create_user(
            username=username,
            password=password,
            email=validated_data.get('email', ''),
            first_name=first[:150],
            last_name=last[:150],
            role=User.ROLE_DOCTOR,
        )
        Profile.objects.create(user=user, **validated_data)
        return user


class ProfileSerializer(CleanModelSerializer):
    languages_spoken = StringListField(required=False)

    class Meta:
        model = Profile
        exclude = ('user',)
        read_only_fields = ('verification_status', 'created_at', 'updated_at')


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'name', 'role')


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class _NewPasswordMixin(serializers.Serializer):
    new_password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    confirm_password = serializers.CharField(write_only=True, required=False, style={'input_type': 'password'})

    def check_new_password(self, attrs, user):
        confirm = attrs.get('confirm_password')
        if confirm is not None and confirm != attrs['new_password']:
            raise serializers.ValidationError({'confirm_password': 'Passwords do not match'})
        try:
            validate_password(attrs['new_password'], user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'new_password': list(e.messages)})


class PasswordResetConfirmSerializer(_NewPasswordMixin):
    uid = serializers.CharField()
    token = serializers.CharField()

    def validate(self, attrs):
        user = user_from_uid(attrs['uid'])
        if user is None or not default_token_generator.check_token(user, attrs['token']):
            raise serializers.ValidationError({'token': 'Reset link is invalid or has expired'})
        self.check_new_password(attrs, user)
        attrs['user'] = user
        return attrs


class PasswordChangeSerializer(_NewPasswordMixin):
    current_password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        user = self.context['request'].user
        if not user.check_password(attrs['current_password']):
            raise serializers.ValidationError({'current_password': 'Current password is incorrect'})
        self.check_new_password(attrs, user)
        return attrs
