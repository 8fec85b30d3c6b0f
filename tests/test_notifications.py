import pytest

from extensions import db
from shopnish.models import Notification


@pytest.fixture
def inbox(customer):
    notes = [
        Notification.notify(customer.id, 'order_placed', 'Your order ORD-1 has been placed'),
        Notification.notify(customer.id, 'order_status', 'Your order ORD-1 is confirmed'),
        Notification.notify(customer.id, 'delivery_update', 'Your order ORD-1 is on the way'),
    ]
    db.session.commit()
    return notes


class TestNotifications:
    def test_list(self, client, customer, inbox, auth_headers):
        inbox[0].mark_read()
        db.session.commit()

        data = client.get('/api/notifications', headers=auth_headers(customer)).get_json()

        assert len(data['notifications']) == 3
        assert data['unread_count'] == 2
        assert data['pagination']['total'] == 3

    def test_unread_only(self, client, customer, inbox, auth_headers):
        inbox[0].mark_read()
        db.session.commit()

        data = client.get('/api/notifications?unread=true', headers=auth_headers(customer)).get_json()

        assert {n['id'] for n in data['notifications']} == {inbox[1].id, inbox[2].id}

    def test_mark_read(self, client, customer, inbox, auth_headers):
        response = client.patch(f'/api/notifications/{inbox[1].id}/read', headers=auth_headers(customer))

        assert response.status_code == 200
        assert response.get_json()['notification']['is_read'] is True
        assert response.get_json()['notification']['read_at'] is not None

    def test_cannot_read_someone_elses(self, client, make_user, inbox, auth_headers):
        stranger = make_user(full_name='Stranger')

        response = client.patch(f'/api/notifications/{inbox[0].id}/read', headers=auth_headers(stranger))

        assert response.status_code == 404

    def test_read_all(self, client, customer, inbox, auth_headers):
        response = client.patch('/api/notifications/read-all', headers=auth_headers(customer))

        assert response.status_code == 200
        assert response.get_json()['updated'] == 3
        assert Notification.query.filter_by(user_id=customer.id, is_read=False).count() == 0

    def test_requires_token(self, client):
        assert client.get('/api/notifications').status_code == 401
