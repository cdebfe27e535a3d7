from django.contrib import admin
from django.urls import path
from trackerbackend.api import billing_views as billing
from trackerbackend.api import tracking_views as tracking
from trackerbackend.api import views as api


def both(route, view):
    """Accept a route with and without a trailing slash."""
    return [path(route, view), path(route + '/', view)]


urlpatterns = [
    path('admin/', admin.site.urls),

    # Health and ping
    *both('healthz', api.healthz),
    *both('api/ping', api.ping),
    *both('api/health', api.health),

    # Auth endpoints
    *both('api/auth/signup', api.register),
    *both('api/auth/register', api.register),
    *both('api/auth/login', api.login_view),
    *both('api/auth/me', api.me),

    # Timetable entries
    *both('api/timetable', api.timetable),
    *both('api/timetable/today', api.timetable_today),
    *both('api/timetable/week', api.timetable_week),
    *both('api/timetable/<str:task_id>', api.timetable_detail),

    # Completion tracking and statistics
    *both('api/tracking/mark', tracking.mark),
    *both('api/tracking/daily/<str:date>', tracking.daily),
    *both('api/tracking/weekly/<str:start_date>', tracking.weekly),
    *both('api/tracking/monthly/<int:year>/<int:month>', tracking.monthly),
    *both('api/tracking/history/<str:task_id>', tracking.history),
    *both('api/tracking/stats', tracking.stats),

    # Targets
    *both('api/targets', api.targets),
    *both('api/targets/<int:target_id>/toggle', api.target_toggle),
    *both('api/targets/<int:target_id>', api.target_detail),

    # Audio links
    *both('api/audio', api.audio),
    *both('api/audio/<int:audio_id>', api.audio_detail),

    # Subscription and payments
    *both('api/subscription/status', billing.status),
    *both('api/subscription/create-order', billing.create_order),
    *both('api/subscription/verify-payment', billing.verify_payment),
    *both('api/subscription/webhook', billing.webhook),
    *both('api/subscription/cancel', billing.cancel),
]
