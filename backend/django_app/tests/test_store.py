"""TrackingStore scoping and the completion upsert."""

from datetime import date

import pytest

from trackerbackend.api.models import Completion
from trackerbackend.api.store import TrackingStore

pytestmark = pytest.mark.django_db

DAY = date(2024, 3, 3)


class TestUpsert:
    def test_single_record_per_task_and_day(self, user, make_task) -> None:
        store = TrackingStore(user)
        task = make_task(user)

        first = store.upsert_completion(task, DAY, 'completed', 'ok')
        second = store.upsert_completion(task, DAY, 'missed')

        assert Completion.objects.count() == 1
        assert second.pk == first.pk
        assert second.status == 'missed'
        assert second.notes == ''
        assert second.created_at == first.created_at

    def test_different_days_are_separate(self, user, make_task) -> None:
        store = TrackingStore(user)
        task = make_task(user)

        store.upsert_completion(task, DAY, 'completed')
        store.upsert_completion(task, date(2024, 3, 4), 'completed')

        assert Completion.objects.filter(task=task).count() == 2


class TestScoping:
    def test_queries_only_see_own_tasks(self, user, other_user, make_task, make_completion) -> None:
        mine = make_task(user)
        theirs = make_task(other_user)
        make_completion(mine, DAY)
        make_completion(theirs, DAY)
        store = TrackingStore(user)

        assert store.tasks() == [mine]
        assert store.get_task(theirs.pk) is None
        assert [c.task_id for c in store.completions_on(DAY)] == [mine.pk]
        assert [c.task_id for c in store.completions_between(DAY, DAY)] == [mine.pk]
        assert [c.task_id for c in store.all_completions()] == [mine.pk]
