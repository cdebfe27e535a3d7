"""Thin wrapper around the Razorpay SDK."""
import logging

import razorpay
from django.conf import settings
from razorpay.errors import SignatureVerificationError

logger = logging.getLogger(__name__)

PLACEHOLDER_SECRET = 'placeholder_secret'


def is_configured():
    return bool(settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET
                and settings.RAZORPAY_KEY_SECRET != PLACEHOLDER_SECRET)


def webhook_configured():
    return bool(settings.RAZORPAY_WEBHOOK_SECRET
                and settings.RAZORPAY_WEBHOOK_SECRET != PLACEHOLDER_SECRET)


def get_client():
    return razorpay.Client(auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET))


def create_subscription(user):
    return get_client().subscription.create({
        'plan_id': settings.RAZORPAY_PLAN_ID,
        'customer_notify': 1,
        'total_count': 12,
        'notes': {
            'userId': str(user.pk),
            'email': user.email,
        },
    })


def cancel_subscription(subscription_id):
    return get_client().subscription.cancel(subscription_id)


def payment_signature_valid(payment_id, subscription_id, signature):
    try:
        return bool(get_client().utility.verify_subscription_payment_signature({
            'razorpay_payment_id': payment_id,
            'razorpay_subscription_id': subscription_id,
            'razorpay_signature': signature,
        }))
    except SignatureVerificationError:
        return False


def webhook_signature_valid(body, signature):
    try:
        return bool(get_client().utility.verify_webhook_signature(
            body, signature, settings.RAZORPAY_WEBHOOK_SECRET))
    except SignatureVerificationError:
        return False
