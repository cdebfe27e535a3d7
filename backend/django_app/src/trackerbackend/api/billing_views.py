import json
import logging
from datetime import datetime, timedelta, timezone as dt_timezone

from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from razorpay.errors import BadRequestError, GatewayError, ServerError
from requests.exceptions import RequestException

from trackerbackend.api import payments
from trackerbackend.api.decorators import login_required_json
from trackerbackend.api.models import Subscription
from trackerbackend.api.views import json_body

logger = logging.getLogger(__name__)

GATEWAY_ERRORS = (BadRequestError, GatewayError, ServerError, RequestException)


def _iso(value):
    return value.isoformat() if value else None


def _not_configured(message):
    return JsonResponse({"message": message}, status=503)


@require_http_methods(["GET"])
@login_required_json
def status(request):
    sub = Subscription.for_user(request.user)
    return JsonResponse({
        "subscriptionStatus": sub.status,
        "isActive": sub.has_active_subscription(),
        "trial": {
            "isTrialActive": sub.is_trial_active(),
            "trialEndsAt": _iso(sub.trial_ends_at),
            "daysRemaining": sub.trial_days_remaining(),
        },
        "subscription": {
            "razorpaySubscriptionId": sub.razorpay_subscription_id,
            "subscriptionEndsAt": _iso(sub.subscription_ends_at),
        },
    })


@csrf_exempt
@require_http_methods(["POST"])
@login_required_json
def create_order(request):
    if not payments.is_configured():
        return JsonResponse({
            "message": "Payment system not configured yet. Please contact administrator.",
            "note": "Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET in the environment",
        }, status=503)
    sub = Subscription.for_user(request.user)
    try:
        created = payments.create_subscription(request.user)
    except GATEWAY_ERRORS as exc:
        logger.exception('Razorpay subscription creation failed for user %s', request.user.pk)
        return JsonResponse({"message": "Error creating subscription order", "error": str(exc)}, status=500)

    sub.razorpay_subscription_id = created['id']
    sub.save(update_fields=['razorpay_subscription_id'])
    return JsonResponse({
        "subscriptionId": created['id'],
        "planId": created.get('plan_id'),
        "status": created.get('status'),
        "razorpayKey": settings.RAZORPAY_KEY_ID,
        "message": "Subscription order created successfully",
    })


@csrf_exempt
@require_http_methods(["POST"])
@login_required_json
def verify_payment(request):
    if not payments.is_configured():
        return _not_configured('Payment verification not available. Razorpay not configured.')
    body = json_body(request)
    payment_id = body.get('razorpay_payment_id')
    subscription_id = body.get('razorpay_subscription_id')
    signature = body.get('razorpay_signature')
    if not payment_id or not subscription_id or not signature:
        return JsonResponse({"message": "Missing payment details"}, status=400)
    if not payments.payment_signature_valid(payment_id, subscription_id, signature):
        return JsonResponse({"message": "Invalid payment signature"}, status=400)

    sub = Subscription.for_user(request.user)
    sub.status = Subscription.STATUS_ACTIVE
    sub.razorpay_subscription_id = subscription_id
    sub.subscription_ends_at = timezone.now() + timedelta(days=settings.SUBSCRIPTION_PERIOD_DAYS)
    sub.save()
    logger.info('Payment verified for user %s', request.user.pk)
    return JsonResponse({
        "message": "Payment verified successfully",
        "subscriptionStatus": sub.status,
        "subscriptionEndsAt": _iso(sub.subscription_ends_at),
    })


def _period_end(entity):
    current_end = entity.get('current_end')
    if not current_end:
        return None
    return datetime.fromtimestamp(int(current_end), tz=dt_timezone.utc)


def _apply_event(event, entity):
    sub_id = entity.get('id')
    if event == 'subscription.activated':
        user_id = (entity.get('notes') or {}).get('userId')
        sub = Subscription.objects.filter(user_id=user_id).first() if user_id else None
        if sub is not None:
            sub.status = Subscription.STATUS_ACTIVE
            sub.razorpay_subscription_id = sub_id
            sub.subscription_ends_at = _period_end(entity)
            sub.save()
    elif event == 'subscription.charged':
        sub = Subscription.objects.filter(razorpay_subscription_id=sub_id).first()
        if sub is not None:
            sub.status = Subscription.STATUS_ACTIVE
            sub.subscription_ends_at = _period_end(entity)
            sub.save()
    elif event in ('subscription.cancelled', 'subscription.completed'):
        Subscription.objects.filter(razorpay_subscription_id=sub_id).update(status=Subscription.STATUS_CANCELLED)
    elif event == 'subscription.payment_failed':
        logger.warning('Subscription payment failed: %s', sub_id)


@csrf_exempt
@require_http_methods(["POST"])
def webhook(request):
    if not payments.webhook_configured():
        logger.info('Webhook received but secret not configured')
        return JsonResponse({"received": True})

    signature = request.headers.get('X-Razorpay-Signature')
    raw = request.body.decode('utf-8', errors='replace')
    if not signature or not payments.webhook_signature_valid(raw, signature):
        return JsonResponse({"message": "Invalid webhook signature"}, status=400)

    try:
        payload = json.loads(raw)
    except ValueError:
        return JsonResponse({"message": "Invalid webhook payload"}, status=400)

    event = payload.get('event')
    entity = (((payload.get('payload') or {}).get('subscription') or {}).get('entity')) or {}
    logger.info('Razorpay webhook event: %s', event)
    _apply_event(event, entity)
    return JsonResponse({"received": True})


@csrf_exempt
@require_http_methods(["POST"])
@login_required_json
def cancel(request):
    sub = Subscription.for_user(request.user)
    if not sub.razorpay_subscription_id:
        return JsonResponse({"message": "No active subscription found"}, status=400)
    if not payments.is_configured():
        return _not_configured('Subscription cancellation not available. Razorpay not configured.')
    try:
        payments.cancel_subscription(sub.razorpay_subscription_id)
    except GATEWAY_ERRORS as exc:
        logger.exception('Razorpay cancellation failed for user %s', request.user.pk)
        return JsonResponse({"message": "Error cancelling subscription", "error": str(exc)}, status=500)

    sub.status = Subscription.STATUS_CANCELLED
    sub.save(update_fields=['status'])
    return JsonResponse({
        "message": "Subscription cancelled successfully",
        "subscriptionStatus": sub.status,
    })
