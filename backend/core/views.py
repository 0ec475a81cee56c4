import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db import transaction
from backend.transactions.models import Transaction
from backend.transactions.utils import record_event
from .permissions import IsSuperAdmin
from .serializers import UserSerializer, SubAdminCreateSerializer, ChangePasswordSerializer

User = get_user_model()

logger = logging.getLogger('backend.core')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        # Ensure user is active
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        logger.info(f"User {self.user.username} logged in")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.effective_role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            # User referenced in token doesn't exist anymore
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with role"""
    return Response(UserSerializer(request.user).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def subadmin_list_create(request):
    """List all sub-admins or create a new one"""
    if request.method == 'GET':
        queryset = User.objects.filter(role=User.ROLE_SUBADMIN, is_superuser=False).order_by('-date_joined')
        return Response(UserSerializer(queryset, many=True).data)

    serializer = SubAdminCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        user = serializer.save()
        record_event(
            Transaction.TYPE_CREATE_USER, request=request,
            item_name=user.username, item_category='User',
            reason=f'Sub-admin {user.username} created',
        )
    logger.info(f"User {request.user.username} created sub-admin {user.username}")
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def subadmin_count(request):
    count = User.objects.filter(role=User.ROLE_SUBADMIN, is_superuser=False).count()
    return Response({'count': count})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def subadmin_delete(request, pk):
    """Delete a sub-admin; superadmins cannot be removed through the API"""
    user = get_object_or_404(User, pk=pk)
    if user.is_superadmin:
        return Response({'error': 'Can only delete sub-admins'}, status=status.HTTP_400_BAD_REQUEST)

    username = user.username
    with transaction.atomic():
        record_event(
            Transaction.TYPE_DELETE_USER, request=request,
            item_name=username, item_category='User',
            reason=f'Sub-admin {username} deleted',
        )
        user.delete()
    logger.info(f"User {request.user.username} deleted sub-admin {username}")
    return Response({'message': 'Sub-admin deleted successfully'})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def subadmin_change_password(request, pk):
    user = get_object_or_404(User, pk=pk)
    if user.is_superadmin:
        return Response({'error': 'Can only change password for sub-admins'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = ChangePasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user.set_password(serializer.validated_data['newPassword'])
    user.save(update_fields=['password', 'updated_at'])
    logger.info(f"User {request.user.username} changed password for sub-admin {user.username}")
    return Response({'message': 'Password updated successfully'})
