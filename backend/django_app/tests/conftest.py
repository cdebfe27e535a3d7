"""Shared fixtures for the tracker API tests."""

from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.test import Client
from django.utils import timezone

from trackerbackend.api.models import Completion, Subscription, Task
from trackerbackend.api.tokens import issue_token


@pytest.fixture(autouse=True)
def isolated_settings(settings):
    """Cheap password hashing and no payment gateway unless a test opts in."""
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.RAZORPAY_KEY_ID = ''
    settings.RAZORPAY_KEY_SECRET = ''
    settings.RAZORPAY_WEBHOOK_SECRET = ''


def _make_user(email):
    user = User.objects.create_user(username=email, email=email, password='secret123', first_name='Test')
    Subscription.objects.create(user=user)
    return user


@pytest.fixture
def user(db):
    return _make_user('owner@example.com')


@pytest.fixture
def other_user(db):
    return _make_user('other@example.com')


def client_for(user):
    return Client(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')


@pytest.fixture
def api(user):
    """Client authenticated as ``user``."""
    return client_for(user)


@pytest.fixture
def other_api(other_user):
    return client_for(other_user)


@pytest.fixture
def make_task():
    def _make(user, title='Task', start_time='09:00', end_time='10:00', **kwargs):
        return Task.objects.create(user=user, title=title, start_time=start_time, end_time=end_time, **kwargs)
    return _make


@pytest.fixture
def make_completion():
    def _make(task, day, status=Completion.STATUS_COMPLETED, notes=''):
        return Completion.objects.create(task=task, date=day, status=status, notes=notes)
    return _make


@pytest.fixture
def expire_trial():
    def _expire(user):
        Subscription.objects.filter(user=user).update(trial_ends_at=timezone.now() - timedelta(days=1))
    return _expire
