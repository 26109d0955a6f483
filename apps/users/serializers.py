from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'email_verified',
            'subscription_tier',
            'trial_end_date',
            'created_at',
            'last_login',
            'preferences',
        ]
        read_only_fields = [
            'id',
            'email',
            'email_verified',
            'subscription_tier',
            'trial_end_date',
            'created_at',
            'last_login',
        ]


class UserRegistrationSerializer(serializers.Serializer):
    """Validate registration input; the service creates the user."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)


class PasswordResetConfirmSerializer(serializers.Serializer):
    """Serializer for password reset confirmation."""

    token = serializers.CharField(required=True)
    new_password = serializers.CharField(
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs


class TrialStatusSerializer(serializers.Serializer):
    is_pro = serializers.BooleanField()
    is_trial_expired = serializers.BooleanField()
    days_remaining = serializers.IntegerField(allow_null=True)
    trial_end_date = serializers.DateTimeField(allow_null=True)
