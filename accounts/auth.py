"""
Authentication views for the admin console.
Handles the password gate and logout.
"""
import logging
import secrets

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from dashboard.shell import close_shell

from .serializers import AdminLoginSerializer, AdminUserSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


def get_admin_user():
    """The staff account every console session runs as, created on first login."""
    user, created = User.objects.get_or_create(
        username=settings.ADMIN_USERNAME,
        defaults={'is_staff': True, 'is_active': True},
    )
    if created:
        user.set_unusable_password()
        user.save(update_fields=['password'])
        logger.info("Created admin console user %s", user.username)
    elif not user.is_staff:
        user.is_staff = True
        user.save(update_fields=['is_staff'])
    return user


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """
    Admin login endpoint.

    POST /api/v1/auth/login/
    Body: { "password": "..." }

    Returns: { "token": "...", "user": {...} }
    """
    serializer = AdminLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    expected = settings.ADMIN_PASSWORD
    if not expected:
        logger.warning("Admin login attempted but ADMIN_PASSWORD is not set")
        return Response(
            {'error': {'code': 'LOGIN_DISABLED', 'message': 'Admin login is not configured', 'status': 503}},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    if not secrets.compare_digest(serializer.validated_data['password'].encode(), expected.encode()):
        logger.warning("Rejected admin login from %s", request.META.get('REMOTE_ADDR'))
        return Response(
            {'error': {'code': 'INVALID_PASSWORD', 'message': 'Invalid password', 'status': 401}},
            status=status.HTTP_401_UNAUTHORIZED
        )

    user = get_admin_user()
    refresh = RefreshToken.for_user(user)

    return Response({
        'message': 'Login successful',
        'token': str(refresh.access_token),
        'user': AdminUserSerializer(user).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """
    Admin logout endpoint. Closes the console shell and its badge subscriptions.

    POST /api/v1/auth/logout/
    Headers: Authorization: Bearer <token>
    """
    close_shell(request.user)
    return Response({'message': 'Logged out successfully'}, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    """
    GET /api/v1/auth/me/

    Returns: { "user": {...} }
    """
    return Response({
        'user': AdminUserSerializer(request.user).data
    })
