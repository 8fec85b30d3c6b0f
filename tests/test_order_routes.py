import pytest

from conftest import ADDRESS
from extensions import db
from shopnish.models import CartItem, Notification, Order, OrderStatus


@pytest.fixture
def seller(make_seller):
    return make_seller()


@pytest.fixture
def product(seller, make_product):
    return make_product(seller, price='500.00', stock=10)


@pytest.fixture
def fill_cart(client, auth_headers):
    def _fill_cart(user, product, quantity=2):
        response = client.post('/api/cart', json={'product_id': product.id, 'quantity': quantity},
                               headers=auth_headers(user))
        assert response.status_code == 201
    return _fill_cart


@pytest.fixture
def placed_order(client, customer, product, fill_cart, auth_headers):
    fill_cart(customer, product)
    response = client.post('/api/checkout', json={'shipping_address': ADDRESS},
                           headers=auth_headers(customer))
    assert response.status_code == 201
    return response.get_json()['order']


class TestCheckout:
    def test_checkout_turns_cart_into_order(self, client, customer, seller, product, fill_cart,
                                            auth_headers):
        fill_cart(customer, product, quantity=2)

        response = client.post('/api/checkout', json={
            'shipping_address': ADDRESS,
            'payment_method': 'upi',
            'notes': 'Ring twice',
        }, headers=auth_headers(customer))

        assert response.status_code == 201
        data = response.get_json()
        assert data['order_number'].startswith('ORD-')
        order = data['order']
        assert order['id'] == data['order_id']
        assert order['subtotal'] == 1000.0
        assert order['tax'] == 180.0
        assert order['shipping'] == 0.0
        assert order['total'] == 1180.0
        assert order['status'] == 'pending'
        assert order['payment_method'] == 'upi'
        assert order['payment_status'] == 'pending'
        assert order['shipping_address']['phone'] == '+918123456789'
        assert [(i['product_id'], i['quantity'], i['total']) for i in order['items']] == [(product.id, 2, 1000.0)]

        assert product.stock == 8
        assert CartItem.query.filter_by(user_id=customer.id).count() == 0

        types = {(n.user_id, n.type) for n in Notification.query.all()}
        assert (customer.id, 'order_placed') in types
        assert (seller.user_id, 'new_order') in types

    def test_small_order_pays_shipping(self, client, customer, product, fill_cart, auth_headers):
        fill_cart(customer, product, quantity=1)

        order = client.post('/api/create-payment-intent', json={'shipping_address': ADDRESS},
                            headers=auth_headers(customer)).get_json()['order']

        assert order['shipping'] == 50.0
        assert order['total'] == 640.0
        assert order['payment_method'] == 'cod'

    def test_empty_cart(self, client, customer, auth_headers):
        response = client.post('/api/checkout', json={'shipping_address': ADDRESS},
                               headers=auth_headers(customer))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Your cart is empty'

    def test_invalid_address(self, client, customer, product, fill_cart, auth_headers):
        fill_cart(customer, product)

        response = client.post('/api/checkout', json={'shipping_address': dict(ADDRESS, pincode='12')},
                               headers=auth_headers(customer))

        assert response.status_code == 400
        assert 'pincode' in response.get_json()['errors']['shipping_address']
        assert product.stock == 10

    def test_stock_is_rechecked(self, client, customer, product, fill_cart, auth_headers):
        fill_cart(customer, product, quantity=3)
        product.stock = 2
        db.session.commit()

        response = client.post('/api/checkout', json={'shipping_address': ADDRESS},
                               headers=auth_headers(customer))

        assert response.status_code == 400
        assert str(product.id) in response.get_json()['items']
        assert CartItem.query.filter_by(user_id=customer.id).count() == 1

    def test_unapproved_product_blocks_checkout(self, client, customer, product, fill_cart, auth_headers):
        fill_cart(customer, product)
        product.resubmit()
        db.session.commit()

        response = client.post('/api/checkout', json={'shipping_address': ADDRESS},
                               headers=auth_headers(customer))

        assert response.status_code == 400
        assert 'no longer available' in response.get_json()['items'][str(product.id)]


class TestOrderHistory:
    def test_list_own_orders(self, client, customer, placed_order, auth_headers):
        data = client.get('/api/orders', headers=auth_headers(customer)).get_json()

        assert [o['id'] for o in data['orders']] == [placed_order['id']]
        assert data['pagination']['total'] == 1

    def test_status_filter(self, client, customer, placed_order, auth_headers):
        delivered = client.get('/api/orders?status=delivered', headers=auth_headers(customer)).get_json()
        invalid = client.get('/api/orders?status=lost', headers=auth_headers(customer))

        assert delivered['orders'] == []
        assert invalid.status_code == 400

    def test_other_customer_cannot_view(self, client, make_user, placed_order, auth_headers):
        stranger = make_user(full_name='Stranger')

        response = client.get(f'/api/orders/{placed_order["id"]}', headers=auth_headers(stranger))

        assert response.status_code == 403

    def test_seller_sees_only_own_lines(self, client, customer, seller, product, make_seller,
                                        make_product, fill_cart, auth_headers):
        other_seller = make_seller(business_name='Lamp House')
        lamp = make_product(other_seller, name='Desk Lamp', price='300.00')
        fill_cart(customer, product, quantity=1)
        fill_cart(customer, lamp, quantity=1)
        order = client.post('/api/checkout', json={'shipping_address': ADDRESS},
                            headers=auth_headers(customer)).get_json()['order']

        response = client.get(f'/api/orders/{order["id"]}', headers=auth_headers(other_seller.user))

        assert response.status_code == 200
        assert [i['product_name'] for i in response.get_json()['order']['items']] == ['Desk Lamp']

        listing = client.get('/api/seller/orders', headers=auth_headers(seller.user)).get_json()
        assert [i['product_name'] for i in listing['orders'][0]['items']] == ['Steel Bottle']


class TestCancelOrder:
    def test_cancel_restocks_and_cancels_payment(self, client, customer, seller, product, placed_order,
                                                 auth_headers):
        response = client.post(f'/api/orders/{placed_order["id"]}/cancel', headers=auth_headers(customer))

        assert response.status_code == 200
        order = response.get_json()['order']
        assert order['status'] == 'cancelled'
        assert order['payment_status'] == 'cancelled'
        assert product.stock == 10
        assert Notification.query.filter_by(user_id=seller.user_id, type='order_cancelled').count() == 1

    def test_only_the_buyer_can_cancel(self, client, make_user, placed_order, auth_headers):
        stranger = make_user(full_name='Stranger')

        response = client.post(f'/api/orders/{placed_order["id"]}/cancel', headers=auth_headers(stranger))

        assert response.status_code == 403

    def test_cannot_cancel_after_pickup(self, client, customer, placed_order, auth_headers):
        order = db.session.get(Order, placed_order['id'])
        order.update_status(OrderStatus.CONFIRMED)
        order.update_status(OrderStatus.OUT_FOR_DELIVERY)
        db.session.commit()

        response = client.post(f'/api/orders/{order.id}/cancel', headers=auth_headers(customer))

        assert response.status_code == 400
        assert 'out_for_delivery' in response.get_json()['error']
