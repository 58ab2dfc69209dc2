"""
Serializers for admin authentication.
"""
from rest_framework import serializers
from django.contrib.auth import get_user_model


class AdminUserSerializer(serializers.ModelSerializer):

    class Meta:
        model = get_user_model()
        fields = ('id', 'username', 'is_staff', 'last_login')
        read_only_fields = fields


class AdminLoginSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, style={'input_type': 'password'}, trim_whitespace=False)
