from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Public view of a user. The password hash is never included."""

    class Meta:
        model = User
        fields = ["id", "username", "role"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Serializer for user registration"""
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=[User.PASSENGER, User.DRIVER])


class LoginSerializer(serializers.Serializer):
    """Serializer for login (username/password)"""
    username = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
