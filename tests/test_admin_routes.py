import pytest

from extensions import db
from shopnish.models import AssignmentStatus, Notification, OrderStatus


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def product(make_seller, make_product):
    return make_product(make_seller(), price='500.00', stock=10)


@pytest.fixture
def order(product, make_order):
    return make_order(product, quantity=2)


class TestAccess:
    def test_customer_is_forbidden(self, client, customer, auth_headers):
        response = client.get('/api/admin/stats', headers=auth_headers(customer))

        assert response.status_code == 403
        assert response.get_json()['error'] == 'Admin access required'

    def test_token_required(self, client):
        assert client.get('/api/admin/pending-vendors').status_code == 401


class TestApprovals:
    def test_pending_vendor_queue(self, client, make_seller, admin_headers):
        pending = make_seller(approved=False, business_name='New Store')
        make_seller()

        data = client.get('/api/admin/pending-vendors', headers=admin_headers).get_json()

        assert data['count'] == 1
        assert data['items'][0]['id'] == pending.id

    def test_approve_vendor(self, client, admin, make_seller, admin_headers):
        seller = make_seller(approved=False)

        response = client.post(f'/api/admin/approve-vendor/{seller.id}', headers=admin_headers)

        assert response.status_code == 200
        item = response.get_json()['item']
        assert item['approval_status'] == 'approved'
        assert item['is_verified'] is True
        assert item['approved_by'] == admin.id
        assert Notification.query.filter_by(user_id=seller.user_id, type='vendor_approved').count() == 1

    def test_reject_needs_reason(self, client, make_seller, admin_headers):
        seller = make_seller(approved=False)

        response = client.post(f'/api/admin/reject-vendor/{seller.id}', json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'A rejection reason is required'

    def test_reject_vendor(self, client, make_seller, admin_headers):
        seller = make_seller(approved=False)

        response = client.post(f'/api/admin/reject-vendor/{seller.id}',
                               json={'reason': 'GST number does not match'}, headers=admin_headers)

        assert response.status_code == 200
        item = response.get_json()['item']
        assert item['approval_status'] == 'rejected'
        assert item['rejection_reason'] == 'GST number does not match'
        assert Notification.query.filter_by(user_id=seller.user_id, type='vendor_rejected').count() == 1

    def test_approve_twice(self, client, make_seller, admin_headers):
        seller = make_seller()

        response = client.post(f'/api/admin/approve-vendor/{seller.id}', headers=admin_headers)

        assert response.status_code == 400

    def test_unknown_record(self, client, admin_headers):
        response = client.post('/api/admin/approve-product/999', headers=admin_headers)

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Product not found'

    def test_approve_product_makes_it_public(self, client, make_seller, make_product, admin_headers):
        seller = make_seller()
        product = make_product(seller, approved=False)
        assert client.get('/api/products').get_json()['products'] == []

        response = client.post(f'/api/admin/approve-product/{product.id}', headers=admin_headers)

        assert response.status_code == 200
        assert Notification.query.filter_by(user_id=seller.user_id, type='product_approved').count() == 1
        assert [p['id'] for p in client.get('/api/products').get_json()['products']] == [product.id]

    @pytest.mark.parametrize('kind, factory', [
        ('food-vendor', 'make_food_vendor'),
        ('service-provider', 'make_provider'),
        ('delivery-boy', 'make_agent'),
    ])
    def test_other_queues(self, request, client, admin_headers, kind, factory):
        record = request.getfixturevalue(factory)(approved=False)

        queue = client.get(f'/api/admin/pending-{kind}s', headers=admin_headers).get_json()
        assert [i['id'] for i in queue['items']] == [record.id]

        response = client.post(f'/api/admin/approve-{kind}/{record.id}', headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['item']['approval_status'] == 'approved'

    def test_food_item_queue(self, client, make_food_vendor, make_food_item, admin_headers):
        item = make_food_item(make_food_vendor(), approved=False)

        response = client.post(f'/api/admin/reject-food-item/{item.id}', json={'reason': 'Photo missing'},
                               headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['item']['vendor']['restaurant_name'] == 'Annapurna Mess'


class TestOrders:
    def test_list_with_filters(self, client, order, admin_headers):
        data = client.get('/api/admin/orders?status=pending&payment_status=pending',
                          headers=admin_headers).get_json()
        assert [o['id'] for o in data['orders']] == [order.id]

        assert client.get('/api/admin/orders?status=lost', headers=admin_headers).status_code == 400
        assert client.get('/api/admin/orders?date_from=yesterday', headers=admin_headers).status_code == 400

    def test_status_override(self, client, order, admin_headers):
        response = client.patch(f'/api/admin/orders/{order.id}/status', json={'status': 'confirmed'},
                                headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['order']['status'] == 'confirmed'
        assert Notification.query.filter_by(user_id=order.user_id, type='order_status').count() == 1

    def test_status_override_respects_flow(self, client, order, admin_headers):
        response = client.patch(f'/api/admin/orders/{order.id}/status', json={'status': 'delivered'},
                                headers=admin_headers)

        assert response.status_code == 400

    def test_cancel_restocks(self, client, order, product, admin_headers):
        response = client.patch(f'/api/admin/orders/{order.id}/status', json={'status': 'cancelled'},
                                headers=admin_headers)

        assert response.status_code == 200
        assert product.stock == 10

    def test_payment_status(self, client, order, admin_headers):
        paid = client.patch(f'/api/admin/orders/{order.id}/payment-status',
                            json={'payment_status': 'paid'}, headers=admin_headers)
        bad = client.patch(f'/api/admin/orders/{order.id}/payment-status',
                           json={'payment_status': 'pending'}, headers=admin_headers)

        assert paid.status_code == 200
        assert paid.get_json()['order']['payment_status'] == 'paid'
        assert bad.status_code == 400


class TestAssignDelivery:
    def test_assign_agent(self, client, order, make_agent, admin_headers):
        agent = make_agent()

        response = client.post(f'/api/admin/orders/{order.id}/assign',
                               json={'delivery_boy_id': agent.id, 'notes': 'Fragile'}, headers=admin_headers)

        assert response.status_code == 200
        assignment = response.get_json()['assignment']
        assert assignment['delivery_boy_id'] == agent.id
        assert assignment['status'] == 'pending'
        assert assignment['earning'] == 20.0
        assert assignment['pickup_address'] == 'Sharma Kitchenware, 12 MG Road, Pune - 411001'
        assert assignment['delivery_address'] == 'Flat 4B, Lake View Apartments, Bengaluru - 560001'
        assert assignment['order']['status'] == 'confirmed'
        assert Notification.query.filter_by(user_id=agent.user_id, type='assignment_new').count() == 1
        assert Notification.query.filter_by(user_id=order.user_id, type='order_assigned').count() == 1

    def test_agent_must_be_approved(self, client, order, make_agent, admin_headers):
        agent = make_agent(approved=False)

        response = client.post(f'/api/admin/orders/{order.id}/assign',
                               json={'delivery_boy_id': agent.id}, headers=admin_headers)

        assert response.status_code == 400

    def test_agent_id_required(self, client, order, admin_headers):
        response = client.post(f'/api/admin/orders/{order.id}/assign', json={}, headers=admin_headers)

        assert response.status_code == 400

    def test_reassign_pending_assignment(self, client, order, make_agent, admin_headers):
        first, second = make_agent(), make_agent(full_name='Suresh Babu')
        client.post(f'/api/admin/orders/{order.id}/assign', json={'delivery_boy_id': first.id},
                    headers=admin_headers)

        response = client.post(f'/api/admin/orders/{order.id}/assign', json={'delivery_boy_id': second.id},
                               headers=admin_headers)

        assert response.status_code == 200
        assert order.assignment.delivery_boy_id == second.id
        assert Notification.query.filter_by(user_id=first.user_id, type='assignment_removed').count() == 1

    def test_accepted_assignment_is_locked(self, client, order, make_agent, admin_headers):
        first, second = make_agent(), make_agent(full_name='Suresh Babu')
        client.post(f'/api/admin/orders/{order.id}/assign', json={'delivery_boy_id': first.id},
                    headers=admin_headers)
        order.assignment.update_status(AssignmentStatus.ACCEPTED)
        db.session.commit()

        response = client.post(f'/api/admin/orders/{order.id}/assign', json={'delivery_boy_id': second.id},
                               headers=admin_headers)

        assert response.status_code == 400

    def test_agent_finishes_after_status_override(self, client, order, make_agent, admin_headers,
                                                  auth_headers):
        agent = make_agent()
        assignment_id = client.post(f'/api/admin/orders/{order.id}/assign', json={'delivery_boy_id': agent.id},
                                    headers=admin_headers).get_json()['assignment']['id']
        agent_headers = auth_headers(agent.user)

        def advance(status):
            return client.patch(f'/api/delivery/assignments/{assignment_id}/status', json={'status': status},
                                headers=agent_headers)

        assert advance('accepted').status_code == 200
        for status in ('out_for_delivery', 'delivered'):
            response = client.patch(f'/api/admin/orders/{order.id}/status', json={'status': status},
                                    headers=admin_headers)
            assert response.status_code == 200

        for status in ('picked_up', 'on_the_way', 'delivered'):
            assert advance(status).status_code == 200

        assert order.assignment.status == AssignmentStatus.DELIVERED
        assert order.status == OrderStatus.DELIVERED
        summary = client.get('/api/delivery/stats', headers=agent_headers).get_json()['summary']
        assert summary['completed_deliveries'] == 1
        assert summary['total_earnings'] == 20.0

    def test_cancelled_order_cannot_be_assigned(self, client, order, make_agent, admin_headers):
        order.cancel()
        db.session.commit()

        response = client.post(f'/api/admin/orders/{order.id}/assign',
                               json={'delivery_boy_id': make_agent().id}, headers=admin_headers)

        assert response.status_code == 400
        assert order.status == OrderStatus.CANCELLED


def test_stats(client, order, make_agent, make_seller, admin_headers):
    make_agent()
    make_seller(approved=False, business_name='New Store')

    data = client.get('/api/admin/stats', headers=admin_headers).get_json()

    assert data['orders']['total'] == 1
    assert data['orders']['by_status']['pending'] == 1
    assert data['sellers'] == {'total': 2, 'approved': 1}
    assert data['products'] == {'total': 1, 'approved': 1}
    assert data['pending_approvals']['vendor'] == 1
    assert data['active_delivery_agents'] == 1
    assert data['users']['admins'] == 1
    assert data['revenue'] == 0.0
