"""Targets (deadline goals) and saved audio links."""

import pytest

from trackerbackend.api.models import AudioLink, Target

pytestmark = pytest.mark.django_db


def create_target(client, title='Ship v1', deadline='2026-12-01T00:00:00Z'):
    return client.post('/api/targets', {'title': title, 'deadline': deadline}, content_type='application/json')


class TestTargets:
    def test_create_and_list_by_deadline(self, api) -> None:
        assert create_target(api, 'later', '2027-01-01T00:00:00Z').status_code == 201
        assert create_target(api, 'sooner', '2026-11-01T00:00:00Z').status_code == 201

        body = api.get('/api/targets').json()

        assert [t['title'] for t in body] == ['sooner', 'later']
        assert body[0]['isCompleted'] is False

    def test_camel_case_wire_names(self, api) -> None:
        response = api.post('/api/targets', {'title': 'Done already', 'deadline': '2026-12-01T00:00:00Z',
                                            'isCompleted': True}, content_type='application/json')

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {'id', 'title', 'description', 'deadline', 'isCompleted', 'createdAt'}
        assert body['isCompleted'] is True
        assert Target.objects.get(pk=body['id']).is_completed is True

    def test_deadline_required(self, api) -> None:
        response = api.post('/api/targets', {'title': 'No date'}, content_type='application/json')
        assert response.status_code == 400
        assert 'deadline' in response.json()['error']

    def test_toggle(self, api) -> None:
        target_id = create_target(api).json()['id']

        first = api.patch(f'/api/targets/{target_id}/toggle')
        second = api.patch(f'/api/targets/{target_id}/toggle')

        assert first.json()['isCompleted'] is True
        assert second.json()['isCompleted'] is False

    def test_delete(self, api) -> None:
        target_id = create_target(api).json()['id']
        assert api.delete(f'/api/targets/{target_id}').status_code == 200
        assert not Target.objects.exists()

    def test_other_users_target(self, api, other_api) -> None:
        target_id = create_target(other_api).json()['id']

        assert api.get('/api/targets').json() == []
        assert api.patch(f'/api/targets/{target_id}/toggle').status_code == 404
        assert api.delete(f'/api/targets/{target_id}').status_code == 404
        assert Target.objects.filter(pk=target_id).exists()

    def test_not_gated_by_subscription(self, api, user, expire_trial) -> None:
        expire_trial(user)
        assert api.get('/api/targets').status_code == 200


class TestAudio:
    def _create(self, client, title='Focus mix'):
        return client.post('/api/audio', {
            'title': title,
            'originalLink': 'https://example.com/watch?v=abc',
            'fileId': 'file-abc',
        }, content_type='application/json')

    def test_create_and_list(self, api) -> None:
        assert self._create(api).status_code == 201
        body = api.get('/api/audio').json()
        assert [a['title'] for a in body] == ['Focus mix']

    def test_camel_case_wire_names(self, api) -> None:
        response = self._create(api)

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {'id', 'title', 'originalLink', 'fileId', 'addedAt'}
        link = AudioLink.objects.get(pk=body['id'])
        assert link.original_link == 'https://example.com/watch?v=abc'
        assert link.file_id == 'file-abc'

    def test_missing_file_id(self, api) -> None:
        response = api.post('/api/audio', {'title': 'x', 'originalLink': 'https://example.com'},
                            content_type='application/json')
        assert response.status_code == 400
        assert 'fileId' in response.json()['error']

    def test_rename_only_changes_title(self, api) -> None:
        audio_id = self._create(api).json()['id']

        response = api.patch(f'/api/audio/{audio_id}', {'title': 'Deep work', 'fileId': 'other'},
                             content_type='application/json')

        assert response.status_code == 200
        link = AudioLink.objects.get(pk=audio_id)
        assert link.title == 'Deep work'
        assert link.file_id == 'file-abc'

    def test_links_cannot_be_deleted(self, api) -> None:
        audio_id = self._create(api).json()['id']
        assert api.delete(f'/api/audio/{audio_id}').status_code == 405

    def test_other_users_link(self, api, other_api) -> None:
        audio_id = self._create(other_api).json()['id']
        assert api.patch(f'/api/audio/{audio_id}', {'title': 'x'}, content_type='application/json').status_code == 404

    def test_gated_by_subscription(self, api, user, expire_trial) -> None:
        expire_trial(user)
        assert api.get('/api/audio').status_code == 403
