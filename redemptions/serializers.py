"""
Redemption Serializers
"""

from rest_framework import serializers

from redemptions.models import PrizeRedemption


class PhoneOnlySerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=20)


class InitiateRedemptionSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=20)
    award_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class CompleteRedemptionSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=20)
    otp_code = serializers.CharField(max_length=10)
    award_id = serializers.IntegerField(min_value=1)
    channel = serializers.ChoiceField(choices=PrizeRedemption.CHANNEL_CHOICES, default='web_portal')
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class RedeemablePrizeSerializer(serializers.Serializer):
    prize_award_id = serializers.IntegerField()
    prize_name = serializers.CharField()
    prize_type = serializers.CharField()
    monetary_value = serializers.CharField(allow_null=True)
    awarded_at = serializers.DateTimeField()
    expiry_date = serializers.DateTimeField(allow_null=True)


class InitiateRedemptionResultSerializer(serializers.Serializer):
    requires_otp = serializers.BooleanField()
    message = serializers.CharField()
    redeemable_prizes = RedeemablePrizeSerializer(many=True)
    expires_in_seconds = serializers.IntegerField(required=False)


class RedemptionConfirmationSerializer(serializers.Serializer):
    prize_name = serializers.CharField()
    monetary_value = serializers.CharField(allow_null=True)
    redeemed_at = serializers.DateTimeField()
    external_reference = serializers.CharField(allow_blank=True)


class CompleteRedemptionResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    redemption_id = serializers.IntegerField(required=False)
    redemption_code = serializers.CharField(required=False)
    confirmation = RedemptionConfirmationSerializer(required=False)


class PrizeRedemptionSerializer(serializers.ModelSerializer):
    prize_name = serializers.CharField(source='award.prize.name', read_only=True)
    phone = serializers.CharField(source='award.phone', read_only=True)

    class Meta:
        model = PrizeRedemption
        fields = [
            'id', 'award', 'prize_name', 'phone', 'redemption_code', 'redeemed_at',
            'channel', 'from_ip', 'status', 'notes',
        ]
        read_only_fields = fields
