import logging

from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from awards import award_service
from awards.models import PrizeAward
from awards.serializers import (
    AwardPrizeSerializer, BulkAwardSerializer, BulkAwardResultSerializer, CancelAwardSerializer,
    ResendNotificationSerializer, PrizeAwardSerializer,
)
from prizes.models import Prize, PrizePool

logger = logging.getLogger(__name__)


@extend_schema(
    tags=['Awards'],
    summary='Award a prize',
    description='Reserve one unit of a prize for a cell number and notify the winner.',
    request=AwardPrizeSerializer,
    responses={
        201: PrizeAwardSerializer,
        400: OpenApiResponse(description='Prize inactive, expired or out of stock'),
        404: OpenApiResponse(description='Prize not found'),
    },
    examples=[
        OpenApiExample('Award', value={'prize_id': 12, 'phone': '+27821234567', 'expiry_days': 30},
                       request_only=True),
    ],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def award_prize(request):
    """Award a single prize."""
    serializer = AwardPrizeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if not Prize.objects.filter(pk=data['prize_id']).exists():
        return Response({'error': 'Prize not found.'}, status=status.HTTP_404_NOT_FOUND)

    award = award_service.award_prize(
        data['prize_id'],
        data['phone'],
        actor_id=request.user.pk,
        competition_id=data.get('competition_id'),
        notification_channel=data['notification_channel'],
        send_notification=data['send_notification'],
        expiry_days=data.get('expiry_days'),
        external_reference=data['external_reference'],
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        email=data.get('email'),
    )
    if award is None:
        return Response({'error': 'Prize is not available for award.'}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PrizeAwardSerializer(award).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=['Awards'],
    summary='Bulk award',
    description=(
        'Award the next available prize in a pool to each phone in the list.\n\n'
        'Items succeed or fail independently; the response reports every item.'
    ),
    request=BulkAwardSerializer,
    responses={
        200: BulkAwardResultSerializer,
        404: OpenApiResponse(description='Prize pool not found'),
    },
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def bulk_award(request):
    """Award prizes from a pool to a list of phones."""
    serializer = BulkAwardSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if not PrizePool.objects.filter(pk=data['pool_id']).exists():
        return Response({'error': 'Prize pool not found.'}, status=status.HTTP_404_NOT_FOUND)

    result = award_service.bulk_award(
        data['pool_id'],
        data['phones'],
        type_id=data.get('prize_type_id'),
        actor_id=request.user.pk,
        competition_id=data.get('competition_id'),
        notification_channel=data['notification_channel'],
        send_notification=data['send_notification'],
        expiry_days=data.get('expiry_days'),
    )
    return Response(result)


@extend_schema(
    tags=['Awards'],
    summary='Get award',
    responses={200: PrizeAwardSerializer, 404: OpenApiResponse(description='Award not found')},
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def award_detail(request, award_id):
    award = award_service.get_award(award_id)
    if award is None:
        return Response({'error': 'Award not found.'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PrizeAwardSerializer(award).data)


@extend_schema(
    tags=['Awards'],
    summary='List awards for a phone',
    responses={200: PrizeAwardSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def awards_by_phone(request, phone):
    awards = award_service.get_awards_for_phone(phone)
    return Response(PrizeAwardSerializer(awards, many=True).data)


@extend_schema(
    tags=['Awards'],
    summary='Cancel award',
    request=CancelAwardSerializer,
    responses={
        204: OpenApiResponse(description='Cancelled'),
        400: OpenApiResponse(description='Award is not in the awarded state'),
        404: OpenApiResponse(description='Award not found'),
    },
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def cancel_award(request, award_id):
    """Cancel an award that has not been redeemed."""
    serializer = CancelAwardSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    award = PrizeAward.objects.filter(pk=award_id).first()
    if award is None:
        return Response({'error': 'Award not found.'}, status=status.HTTP_404_NOT_FOUND)

    if not award_service.cancel_award(award_id, serializer.validated_data['reason'], actor_id=request.user.pk):
        award.refresh_from_db(fields=['status'])
        return Response(
            {'error': f'Award cannot be cancelled. Current status: {award.get_status_display()}'},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=['Awards'],
    summary='Resend award notification',
    request=ResendNotificationSerializer,
    responses={
        204: OpenApiResponse(description='Notification re-dispatched'),
        404: OpenApiResponse(description='Award not found'),
    },
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def resend_notification(request, award_id):
    serializer = ResendNotificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if not award_service.resend_notification(
        award_id, serializer.validated_data.get('channel'), actor_id=request.user.pk
    ):
        return Response({'error': 'Award not found.'}, status=status.HTTP_404_NOT_FOUND)
    return Response(status=status.HTTP_204_NO_CONTENT)
