"""
Awards Serializers
"""

from django.conf import settings
from rest_framework import serializers

from awards.models import PrizeAward
from competitions.services import get_competition


class CompetitionFieldMixin:
    def validate_competition_id(self, value):
        if value is not None and get_competition(value) is None:
            raise serializers.ValidationError('Competition not found.')
        return value


class AwardPrizeSerializer(CompetitionFieldMixin, serializers.Serializer):
    prize_id = serializers.IntegerField(min_value=1)
    phone = serializers.CharField(max_length=20)
    competition_id = serializers.IntegerField(required=False, allow_null=True)
    notification_channel = serializers.ChoiceField(choices=PrizeAward.CHANNEL_CHOICES, default='sms')
    send_notification = serializers.BooleanField(default=True)
    expiry_days = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    external_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class BulkAwardSerializer(CompetitionFieldMixin, serializers.Serializer):
    pool_id = serializers.IntegerField(min_value=1)
    prize_type_id = serializers.IntegerField(required=False, allow_null=True)
    phones = serializers.ListField(
        child=serializers.CharField(max_length=20),
        allow_empty=False,
        max_length=settings.BULK_AWARD_MAX_PHONES,
    )
    competition_id = serializers.IntegerField(required=False, allow_null=True)
    notification_channel = serializers.ChoiceField(choices=PrizeAward.CHANNEL_CHOICES, default='sms')
    send_notification = serializers.BooleanField(default=True)
    expiry_days = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class CancelAwardSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class ResendNotificationSerializer(serializers.Serializer):
    channel = serializers.ChoiceField(choices=PrizeAward.CHANNEL_CHOICES, required=False, allow_null=True)


class PrizeAwardSerializer(serializers.ModelSerializer):
    prize_name = serializers.CharField(source='prize.name', read_only=True)
    prize_type = serializers.CharField(source='prize.prize_type.name', read_only=True)
    monetary_value = serializers.DecimalField(source='prize.monetary_value', max_digits=12,
                                              decimal_places=2, read_only=True, allow_null=True)

    class Meta:
        model = PrizeAward
        fields = [
            'id', 'prize', 'prize_name', 'prize_type', 'monetary_value', 'phone', 'competition',
            'awarded_at', 'awarded_by', 'method', 'notification_channel', 'notification_status',
            'status', 'expiry_date', 'external_reference', 'cancelled_at', 'cancel_reason',
        ]
        read_only_fields = fields


class BulkAwardItemSerializer(serializers.Serializer):
    phone = serializers.CharField()
    success = serializers.BooleanField()
    award_id = serializers.IntegerField(allow_null=True)
    error = serializers.CharField(allow_null=True)


class BulkAwardResultSerializer(serializers.Serializer):
    total_requested = serializers.IntegerField()
    success_count = serializers.IntegerField()
    fail_count = serializers.IntegerField()
    results = BulkAwardItemSerializer(many=True)
