import logging

from django.conf import settings
from django.contrib.auth import authenticate
from drf_spectacular.utils import extend_schema, inline_serializer, OpenApiResponse
from rest_framework import status, serializers as drf_serializers
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from accounts.authentication import generate_access_token
from accounts.serializers import AdminLoginSerializer

logger = logging.getLogger(__name__)


class LoginThrottle(AnonRateThrottle):
    scope = 'login'


@extend_schema(
    tags=['Auth'],
    summary='Staff login',
    request=AdminLoginSerializer,
    responses={
        200: inline_serializer('AdminLoginResponse', fields={
            'access_token': drf_serializers.CharField(),
            'token_type': drf_serializers.CharField(),
            'expires_in': drf_serializers.IntegerField(),
        }),
        401: OpenApiResponse(description='Invalid credentials or not a staff account'),
    },
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginThrottle])
def admin_login(request):
    """Exchange staff credentials for a JWT access token."""
    serializer = AdminLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = authenticate(
        request,
        username=serializer.validated_data['username'],
        password=serializer.validated_data['password'],
    )
    if user is None or not user.is_staff:
        logger.warning(f'Staff login failed for {serializer.validated_data["username"]}')
        return Response({'error': 'Invalid credentials.'}, status=status.HTTP_401_UNAUTHORIZED)

    logger.info(f'Staff login: user={user.pk}')
    return Response({
        'access_token': generate_access_token(user),
        'token_type': 'Bearer',
        'expires_in': settings.JWT_ACCESS_TOKEN_LIFETIME_MINUTES * 60,
    })
