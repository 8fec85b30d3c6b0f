import pytest

from shopnish.models import CartItem


@pytest.fixture
def product(make_seller, make_product):
    return make_product(make_seller(), price='500.00', stock=10)


class TestAddToCart:
    def test_adding_twice_increases_quantity(self, client, customer, product, auth_headers):
        headers = auth_headers(customer)

        first = client.post('/api/cart', json={'product_id': product.id, 'quantity': 2}, headers=headers)
        second = client.post('/api/cart', json={'productId': product.id, 'quantity': 3}, headers=headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert second.get_json()['item']['quantity'] == 5
        assert CartItem.query.filter_by(user_id=customer.id).count() == 1

        cart = client.get('/api/cart', headers=headers).get_json()
        assert cart['count'] == 5
        assert cart['subtotal'] == 2500.0
        assert cart['items'][0]['line_total'] == 2500.0

    def test_cannot_exceed_stock(self, client, customer, product, auth_headers):
        headers = auth_headers(customer)
        client.post('/api/cart', json={'product_id': product.id, 'quantity': 8}, headers=headers)

        response = client.post('/api/cart', json={'product_id': product.id, 'quantity': 3}, headers=headers)

        assert response.status_code == 400
        assert 'Only 10 unit(s)' in response.get_json()['error']

    def test_pending_product_cannot_be_added(self, client, customer, make_seller, make_product,
                                             auth_headers):
        pending = make_product(make_seller(), approved=False)

        response = client.post('/api/cart', json={'product_id': pending.id}, headers=auth_headers(customer))

        assert response.status_code == 400

    def test_unknown_product(self, client, customer, auth_headers):
        response = client.post('/api/cart', json={'product_id': 999}, headers=auth_headers(customer))

        assert response.status_code == 404

    def test_invalid_quantity(self, client, customer, product, auth_headers):
        response = client.post('/api/cart', json={'product_id': product.id, 'quantity': 0},
                               headers=auth_headers(customer))

        assert response.status_code == 400
        assert 'quantity' in response.get_json()['errors']

    def test_requires_login(self, client, product):
        assert client.post('/api/cart', json={'product_id': product.id}).status_code == 401


class TestUpdateCart:
    @pytest.fixture
    def item_id(self, client, customer, product, auth_headers):
        response = client.post('/api/cart', json={'product_id': product.id}, headers=auth_headers(customer))
        return response.get_json()['item']['id']

    def test_set_quantity(self, client, customer, item_id, auth_headers):
        response = client.put(f'/api/cart/{item_id}', json={'quantity': 4}, headers=auth_headers(customer))

        assert response.status_code == 200
        assert response.get_json()['item']['quantity'] == 4

    def test_quantity_is_required(self, client, customer, item_id, auth_headers):
        response = client.put(f'/api/cart/{item_id}', json={}, headers=auth_headers(customer))

        assert response.status_code == 400

    def test_set_quantity_above_stock(self, client, customer, item_id, auth_headers):
        response = client.put(f'/api/cart/{item_id}', json={'quantity': 11}, headers=auth_headers(customer))

        assert response.status_code == 400

    def test_other_users_item_is_not_found(self, client, make_user, item_id, auth_headers):
        stranger = make_user(full_name='Stranger')

        response = client.put(f'/api/cart/{item_id}', json={'quantity': 2}, headers=auth_headers(stranger))

        assert response.status_code == 404

    def test_remove_item(self, client, customer, item_id, auth_headers):
        response = client.delete(f'/api/cart/{item_id}', headers=auth_headers(customer))

        assert response.status_code == 204
        assert client.get('/api/cart', headers=auth_headers(customer)).get_json()['items'] == []

    def test_clear_cart(self, client, customer, item_id, auth_headers):
        response = client.delete('/api/cart', headers=auth_headers(customer))

        assert response.status_code == 204
        assert CartItem.query.filter_by(user_id=customer.id).count() == 0
