import math
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone


def _random_id():
    return str(uuid.uuid4())


def default_trial_end():
    return timezone.now() + timedelta(days=settings.TRIAL_DAYS)


class Task(models.Model):
    id = models.CharField(primary_key=True, max_length=64, default=_random_id)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='tasks')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    start_time = models.CharField(max_length=5)  # HH:MM
    end_time = models.CharField(max_length=5)  # HH:MM
    is_recurring = models.BooleanField(default=True)
    exclude_days = models.JSONField(default=list, blank=True)  # 0=Sunday .. 6=Saturday
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title


class Completion(models.Model):
    STATUS_COMPLETED = 'completed'
    STATUS_MISSED = 'missed'
    STATUS_CHOICES = [
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_MISSED, 'Missed'),
    ]

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='completions')
    date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['task', 'date'], name='unique_completion_per_task_day'),
        ]


class Subscription(models.Model):
    STATUS_TRIAL = 'trial'
    STATUS_ACTIVE = 'active'
    STATUS_EXPIRED = 'expired'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_TRIAL, 'Trial'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_EXPIRED, 'Expired'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='subscription')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_TRIAL)
    trial_ends_at = models.DateTimeField(default=default_trial_end)
    razorpay_customer_id = models.CharField(max_length=64, blank=True, null=True)
    razorpay_subscription_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    razorpay_order_id = models.CharField(max_length=64, blank=True, null=True)
    subscription_ends_at = models.DateTimeField(blank=True, null=True)

    @classmethod
    def for_user(cls, user):
        sub, _ = cls.objects.get_or_create(user=user)
        return sub

    def is_trial_active(self, now=None):
        now = now or timezone.now()
        return self.status == self.STATUS_TRIAL and self.trial_ends_at > now

    def is_trial_expired(self, now=None):
        now = now or timezone.now()
        return self.status == self.STATUS_TRIAL and self.trial_ends_at <= now

    def has_active_subscription(self, now=None):
        now = now or timezone.now()
        if self.status == self.STATUS_TRIAL:
            return self.trial_ends_at > now
        if self.status == self.STATUS_ACTIVE:
            return self.subscription_ends_at is None or self.subscription_ends_at > now
        return False

    def trial_days_remaining(self, now=None):
        now = now or timezone.now()
        if self.status != self.STATUS_TRIAL or not self.trial_ends_at:
            return 0
        remaining = (self.trial_ends_at - now).total_seconds() / 86400
        return max(0, math.ceil(remaining))


class Target(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='targets')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    deadline = models.DateTimeField()
    is_completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)


class AudioLink(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='audio_links')
    title = models.CharField(max_length=255)
    original_link = models.TextField()
    file_id = models.CharField(max_length=255)
    added_at = models.DateTimeField(default=timezone.now)
