from django.urls import path
from .views import (
    NurseryTokenObtainPairView, NurseryTokenRefreshView, register, user_me,
    organisation_detail, user_list_create, user_detail,
    setting_list_create, setting_detail,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    # Auth
    path('auth/register/', register, name='register'),
    path('auth/login/', NurseryTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', NurseryTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    path('organisation/', organisation_detail, name='organisation-detail'),

    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/<int:pk>/', setting_detail, name='setting-detail'),

    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
