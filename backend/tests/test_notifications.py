# Overview: Pytest coverage for notification reads and state changes.

import pytest

from managefy.models import Notification
from managefy.services import notification_service


@pytest.fixture
def note(manager, db_session):
    notification = notification_service.create_notification(
        manager.id, 'Hello', notification_service.KIND_PRIORITY
    )
    db_session.commit()
    return notification


class TestNotifications:

    def test_list_own_notifications(self, client, manager, business, note, headers_for):
        resp = client.get(f'/api/notifications/user/{manager.id}', headers=headers_for(manager))

        assert resp.status_code == 200
        messages = [n['message'] for n in resp.get_json()['data']]
        assert 'Hello' in messages
        assert all(n['userId'] == manager.id for n in resp.get_json()['data'])

    def test_other_users_notifications_are_unauthorized(self, client, manager, note, make_user, headers_for):
        other = make_user('other@mail.com')

        assert client.get(f'/api/notifications/user/{manager.id}', headers=headers_for(other)).status_code == 401
        assert client.get(f'/api/notifications/{note.id}', headers=headers_for(other)).status_code == 401

    def test_state_goes_unread_read_closed(self, client, manager, note, headers_for):
        headers = headers_for(manager)

        resp = client.put(f'/api/notifications/{note.id}/state/read', headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()['data']['state'] == 'Read'

        resp = client.put(f'/api/notifications/{note.id}/state/Closed', headers=headers)
        assert resp.get_json()['data']['state'] == 'Closed'

    @pytest.mark.parametrize('state', ['Closed', 'Unread', 'Archived'])
    def test_invalid_state_changes_from_unread(self, client, manager, note, headers_for, state):
        resp = client.put(f'/api/notifications/{note.id}/state/{state}', headers=headers_for(manager))
        assert resp.status_code == 400

    def test_closed_never_reopens(self, client, manager, note, headers_for):
        headers = headers_for(manager)
        client.put(f'/api/notifications/{note.id}/state/Read', headers=headers)
        client.put(f'/api/notifications/{note.id}/state/Closed', headers=headers)

        for state in ('Unread', 'Read'):
            assert client.put(f'/api/notifications/{note.id}/state/{state}', headers=headers).status_code == 400

    def test_delete_own_notification(self, client, manager, note, headers_for, db_session):
        note_id = note.id
        resp = client.delete(f'/api/notifications/{note_id}', headers=headers_for(manager))

        assert resp.status_code == 200
        assert db_session.get(Notification, note_id) is None

    def test_unknown_kind_is_rejected(self, manager):
        with pytest.raises(ValueError):
            notification_service.create_notification(manager.id, 'x', 'Urgent')
