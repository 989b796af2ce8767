from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'attendance', views.ProcessedAttendanceViewSet, basename='attendance')

urlpatterns = [
    path('attendance/recalculate/', views.AttendanceRecalculateView.as_view()),
    path('audit-log/', views.AuditLogListView.as_view()),
    path('', include(router.urls)),
]
