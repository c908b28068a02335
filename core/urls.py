# core/urls.py
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from exams.views import (
    BlueprintViewSet, AttemptStartView, AttemptSubmitView, MyAttemptsView,
    AttemptPaperView, AttemptReviewView,
)

router = DefaultRouter()
router.register(r"blueprints", BlueprintViewSet, basename="blueprint")


urlpatterns = [
    path('admin/', admin.site.urls),

    path("api/auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    path("api/attempts/start/", AttemptStartView.as_view(), name="attempt-start"),
    path("api/attempts/mine/", MyAttemptsView.as_view(), name="attempt-mine"),
    path("api/attempts/<uuid:attempt_id>/submit/", AttemptSubmitView.as_view(), name="attempt-submit"),
    path("api/attempts/<uuid:attempt_id>/paper/", AttemptPaperView.as_view(), name="attempt-paper"),
    path("api/attempts/<uuid:attempt_id>/review/", AttemptReviewView.as_view(), name="attempt-review"),

    path("api/", include(router.urls)),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
