"""
Views for the Users app.

Auth responses carry the user plus a flat access/refresh token pair.
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.users.serializers import (
    LoginSerializer,
    RefreshTokenSerializer,
    UserRegistrationSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from common.responses import success_response

logger = logging.getLogger(__name__)
User = get_user_model()


def _build_auth_response(user, refresh_token, http_status=status.HTTP_200_OK):
    """Helper to build a consistent auth response."""
    return success_response(
        {
            'user': UserSerializer(user).data,
            'access_token': str(refresh_token.access_token),
            'refresh_token': str(refresh_token),
        },
        status=http_status,
    )


class RegisterView(APIView):
    """
    Register a new user account.

    POST /api/v1/auth/register/
    Body: {"full_name": "...", "email": "...", "password": "..."}
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        refresh = RefreshToken.for_user(user)
        return _build_auth_response(user, refresh, status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Login with email and password to obtain JWT tokens.

    POST /api/v1/auth/login/
    Body: {"email": "...", "password": "..."}
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email'].lower()
        password = serializer.validated_data['password']

        user = User.objects.filter(email=email).first()
        if user is None or not user.check_password(password):
            logger.info('Failed login attempt for %s', email)
            raise AuthenticationFailed('Invalid email or password.')

        if not user.is_active:
            raise PermissionDenied('This account has been disabled.')

        refresh = RefreshToken.for_user(user)
        return _build_auth_response(user, refresh, status.HTTP_200_OK)


class TokenRefreshView(APIView):
    """
    Exchange a refresh token for a new token pair.

    POST /api/v1/auth/token/refresh/
    Body: {"refresh_token": "..."}
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            old_refresh = RefreshToken(serializer.validated_data['refresh_token'])
            user = User.objects.get(id=old_refresh.payload.get('user_id'))
        except (TokenError, User.DoesNotExist):
            raise AuthenticationFailed('Token is invalid or expired.')

        # Rotation: the old token can no longer be used
        old_refresh.blacklist()
        return _build_auth_response(user, RefreshToken.for_user(user))


class LogoutView(APIView):
    """
    Logout by blacklisting the refresh token.

    POST /api/v1/auth/logout/
    Body: {"refresh_token": "<refresh_token>"}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            RefreshToken(serializer.validated_data['refresh_token']).blacklist()
        except TokenError as exc:
            # Already expired or blacklisted; the session is over either way.
            logger.debug('Logout with unusable refresh token: %s', exc)

        return success_response(message='Successfully logged out.')


class UserProfileView(APIView):
    """
    Retrieve or update the authenticated user's profile.

    GET   /api/v1/users/me/
    PATCH /api/v1/users/me/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = UserUpdateSerializer(
            request.user,
            data=request.data,
            partial=True,
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success_response(UserSerializer(request.user).data)
