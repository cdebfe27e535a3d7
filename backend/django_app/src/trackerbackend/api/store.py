"""Per-user persistence handle for tracking data."""
import logging

from trackerbackend.api.models import Completion, Task

logger = logging.getLogger(__name__)


class TrackingStore:
    """Every query goes through the owning user, so records of other users'
    tasks never reach the reporting functions."""

    def __init__(self, user):
        self.user = user

    def tasks(self):
        return list(Task.objects.filter(user=self.user).order_by('start_time', 'created_at'))

    def get_task(self, task_id):
        return Task.objects.filter(user=self.user, pk=task_id).first()

    def _completions(self):
        return Completion.objects.filter(task__user=self.user)

    def completions_on(self, day):
        return list(self._completions().filter(date=day))

    def completions_between(self, start, end):
        return list(self._completions().filter(date__range=(start, end)))

    def all_completions(self):
        return list(self._completions())

    def history(self, task):
        return list(Completion.objects.filter(task=task).order_by('-date'))

    def upsert_completion(self, task, day, status, notes=''):
        """Insert or overwrite the record for ``(task, day)`` in one statement."""
        Completion.objects.bulk_create(
            [Completion(task=task, date=day, status=status, notes=notes or '')],
            update_conflicts=True,
            unique_fields=['task', 'date'],
            update_fields=['status', 'notes', 'updated_at'],
        )
        logger.debug('Marked task %s on %s as %s', task.pk, day, status)
        return Completion.objects.get(task=task, date=day)
