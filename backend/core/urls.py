from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me,
    subadmin_list_create, subadmin_count, subadmin_delete, subadmin_change_password,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # Sub-admin endpoints
    path('users/subadmins/', subadmin_list_create, name='subadmin-list-create'),
    path('users/subadmins/count/', subadmin_count, name='subadmin-count'),
    path('users/subadmins/<int:pk>/', subadmin_delete, name='subadmin-delete'),
    path('users/subadmins/<int:pk>/change-password/', subadmin_change_password, name='subadmin-change-password'),
]
