from functools import wraps

from django.http import JsonResponse

from trackerbackend.api.models import Subscription


def _iso(value):
    return value.isoformat() if value else None


def login_required_json(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Unauthorized"}, status=401)
        return view(request, *args, **kwargs)
    return wrapper


def subscription_required(view):
    """Reject users whose trial has run out or who have no paid subscription."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Unauthorized"}, status=401)
        sub = Subscription.for_user(request.user)
        if not sub.has_active_subscription():
            if sub.is_trial_expired():
                message = 'Your free trial has expired. Please subscribe to continue.'
            else:
                message = 'Active subscription required to access this feature.'
            return JsonResponse({
                "message": message,
                "subscriptionStatus": sub.status,
                "trialEndsAt": _iso(sub.trial_ends_at),
                "subscriptionEndsAt": _iso(sub.subscription_ends_at),
            }, status=403)
        return view(request, *args, **kwargs)
    return wrapper
