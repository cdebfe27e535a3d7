"""Bearer token issue and verification."""
import logging
from datetime import timedelta

import jwt
from django.conf import settings
from django.contrib.auth.models import User
from django.utils import timezone

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


def issue_token(user):
    payload = {
        'userId': user.pk,
        'exp': timezone.now() + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def user_for_token(token):
    """Return the active user a token was issued to, or None."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError as exc:
        logger.debug('Rejected bearer token: %s', exc)
        return None
    return User.objects.filter(pk=payload.get('userId'), is_active=True).first()


class BearerTokenMiddleware:
    """Authenticate ``Authorization: Bearer <token>`` requests.

    Must come after ``AuthenticationMiddleware``; an invalid token leaves
    ``request.user`` anonymous.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        header = request.headers.get('Authorization', '')
        if header.startswith('Bearer '):
            user = user_for_token(header[len('Bearer '):].strip())
            if user is not None:
                request.user = user
        return self.get_response(request)
