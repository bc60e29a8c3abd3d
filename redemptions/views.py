import logging

from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter, OpenApiResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from redemptions import redemption_service
from redemptions.serializers import (
    PhoneOnlySerializer, InitiateRedemptionSerializer, InitiateRedemptionResultSerializer,
    CompleteRedemptionSerializer, CompleteRedemptionResultSerializer, PrizeRedemptionSerializer,
    RedeemablePrizeSerializer,
)

logger = logging.getLogger(__name__)

_INITIATE_STATUS = {
    'not_available': status.HTTP_400_BAD_REQUEST,
    'otp_rate_limited': status.HTTP_429_TOO_MANY_REQUESTS,
    'otp_send_failed': status.HTTP_502_BAD_GATEWAY,
}


class RedemptionThrottle(AnonRateThrottle):
    scope = 'redemption'


def _client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR') or None


@extend_schema(
    tags=['Redemption'],
    summary='List redeemable prizes',
    parameters=[OpenApiParameter('phone', str, required=True, description='Winner cell number')],
    responses={200: RedeemablePrizeSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([RedemptionThrottle])
def available_prizes(request):
    """Prizes a phone can currently redeem."""
    serializer = PhoneOnlySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    awards = redemption_service.get_redeemable_awards(serializer.validated_data['phone'])
    return Response([redemption_service.redeemable_summary(a) for a in awards])


@extend_schema(
    tags=['Redemption'],
    summary='Initiate redemption',
    description=(
        'Lists the redeemable prizes for a cell number and sends a verification code by SMS.\n\n'
        'When `award_id` is given only that prize is considered.'
    ),
    request=InitiateRedemptionSerializer,
    responses={
        200: InitiateRedemptionResultSerializer,
        400: OpenApiResponse(description='The specified prize is not available for redemption'),
        429: OpenApiResponse(description='Too many OTP requests for this phone'),
        502: OpenApiResponse(description='Verification code could not be delivered'),
    },
    examples=[
        OpenApiExample('Initiate', value={'phone': '+27821234567'}, request_only=True),
    ],
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RedemptionThrottle])
def initiate_redemption(request):
    serializer = InitiateRedemptionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = redemption_service.initiate_redemption(
        serializer.validated_data['phone'],
        award_id=serializer.validated_data.get('award_id'),
        ip_address=_client_ip(request),
    )
    return Response(result, status=_INITIATE_STATUS.get(result.get('error_code'), status.HTTP_200_OK))


@extend_schema(
    tags=['Redemption'],
    summary='Complete redemption',
    description=(
        'Verifies the code sent by initiate and redeems the prize.\n\n'
        '**Checks, in order**: code valid, prize exists, prize belongs to the phone, '
        'prize is in the awarded state, prize has not expired.'
    ),
    request=CompleteRedemptionSerializer,
    responses={
        200: CompleteRedemptionResultSerializer,
        400: OpenApiResponse(description='Invalid code, wrong owner, wrong status or expired'),
        404: OpenApiResponse(description='Prize not found'),
    },
    examples=[
        OpenApiExample('Complete', value={'phone': '+27821234567', 'otp_code': '482916', 'award_id': 41},
                       request_only=True),
        OpenApiExample('Failed', value={'success': False, 'message': 'Invalid OTP code.',
                                        'error_code': 'otp_invalid', 'remaining_attempts': 2},
                       response_only=True, status_codes=['400']),
    ],
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RedemptionThrottle])
def complete_redemption(request):
    serializer = CompleteRedemptionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = redemption_service.complete_redemption(
        data['phone'],
        data['otp_code'],
        data['award_id'],
        channel=data['channel'],
        notes=data['notes'],
        ip_address=_client_ip(request),
    )
    if result['success']:
        return Response(result)
    if result['error_code'] == 'not_found':
        return Response(result, status=status.HTTP_404_NOT_FOUND)
    return Response(result, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    tags=['Redemption'],
    summary='Get redemption for an award',
    responses={200: PrizeRedemptionSerializer, 404: OpenApiResponse(description='Award not redeemed')},
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def redemption_detail(request, award_id):
    redemption = redemption_service.get_redemption(award_id)
    if redemption is None:
        return Response({'error': 'Redemption not found.'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PrizeRedemptionSerializer(redemption).data)
