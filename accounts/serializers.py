"""
Accounts Serializers
"""

from rest_framework import serializers


class AdminLoginSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField()
