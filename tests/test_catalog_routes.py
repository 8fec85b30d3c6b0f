from extensions import db
from shopnish.models import Product


class TestCategories:
    def test_list_is_public(self, client, category):
        response = client.get('/api/categories')

        assert response.status_code == 200
        assert [c['slug'] for c in response.get_json()['categories']] == ['home-kitchen']

    def test_seller_can_create(self, client, customer, make_seller, auth_headers):
        make_seller(user=customer)

        response = client.post('/api/categories', json={'name': 'Electronics'},
                               headers=auth_headers(customer))

        assert response.status_code == 201
        assert response.get_json()['category']['slug'] == 'electronics'

    def test_customer_cannot_create(self, client, customer, auth_headers):
        response = client.post('/api/categories', json={'name': 'Electronics'},
                               headers=auth_headers(customer))

        assert response.status_code == 403

    def test_duplicate_slug(self, client, admin, category, auth_headers):
        response = client.post('/api/categories', json={'name': 'Home & Kitchen'},
                               headers=auth_headers(admin))

        assert response.status_code == 409


class TestProductListing:
    def test_only_approved_products_of_approved_sellers(self, client, make_seller, make_product):
        seller = make_seller()
        live = make_product(seller, name='Steel Bottle')
        make_product(seller, name='Pending Lamp', approved=False)
        make_product(make_seller(approved=False, business_name='New Store'), name='Hidden Mug')

        response = client.get('/api/products')

        assert response.status_code == 200
        data = response.get_json()
        assert [p['id'] for p in data['products']] == [live.id]
        assert data['products'][0]['seller']['business_name'] == 'Sharma Kitchenware'
        assert data['pagination'] == {'total': 1, 'page': 1, 'limit': 20, 'pages': 1}

    def test_seller_sees_own_pending_products(self, client, customer, make_seller, make_product,
                                              auth_headers):
        seller = make_seller(user=customer)
        make_product(seller, name='Steel Bottle')
        make_product(seller, name='Pending Lamp', approved=False)

        public = client.get(f'/api/products?seller_id={seller.id}').get_json()
        own = client.get(f'/api/products?sellerId={seller.id}', headers=auth_headers(customer)).get_json()

        assert public['pagination']['total'] == 1
        assert own['pagination']['total'] == 2

    def test_search_and_category_filters(self, client, make_seller, make_product, category):
        seller = make_seller()
        make_product(seller, name='Steel Bottle')
        make_product(seller, name='Desk Lamp')

        names = [p['name'] for p in client.get('/api/products?search=bottle').get_json()['products']]
        assert names == ['Steel Bottle']

        other = client.get(f'/api/products?category_id={category.id + 1}').get_json()
        assert other['products'] == []

    def test_invalid_paging(self, client):
        response = client.get('/api/products?page=zero')

        assert response.status_code == 400


class TestProductDetail:
    def test_pending_product_is_hidden_from_public(self, client, customer, admin, make_seller,
                                                   make_product, auth_headers):
        owner = make_seller(user=customer)
        product = make_product(owner, approved=False)

        assert client.get(f'/api/products/{product.id}').status_code == 404
        assert client.get(f'/api/products/{product.id}', headers=auth_headers(customer)).status_code == 200
        assert client.get(f'/api/products/{product.id}', headers=auth_headers(admin)).status_code == 200

    def test_missing_product(self, client):
        assert client.get('/api/products/999').status_code == 404


class TestProductManagement:
    def test_approved_seller_creates_pending_product(self, client, customer, make_seller, category,
                                                     auth_headers):
        make_seller(user=customer)

        response = client.post('/api/products', json={
            'name': 'Steel Bottle',
            'categoryId': category.id,
            'price': 499,
            'stock': 40,
            'images': ['https://cdn.example.com/bottle.jpg'],
        }, headers=auth_headers(customer))

        assert response.status_code == 201
        product = response.get_json()['product']
        assert product['approval_status'] == 'pending'
        assert product['price'] == 499.0
        assert product['images'] == ['https://cdn.example.com/bottle.jpg']

    def test_pending_seller_cannot_list(self, client, customer, make_seller, category, auth_headers):
        make_seller(user=customer, approved=False)

        response = client.post('/api/products', json={
            'name': 'Steel Bottle', 'category_id': category.id, 'price': 499,
        }, headers=auth_headers(customer))

        assert response.status_code == 403
        assert response.get_json()['approval_status'] == 'pending'

    def test_unknown_category(self, client, customer, make_seller, auth_headers):
        make_seller(user=customer)

        response = client.post('/api/products', json={
            'name': 'Steel Bottle', 'category_id': 999, 'price': 499,
        }, headers=auth_headers(customer))

        assert response.status_code == 400
        assert response.get_json()['errors'] == {'category_id': 'Category not found'}

    def test_price_change_resubmits(self, client, customer, make_seller, make_product, auth_headers):
        product = make_product(make_seller(user=customer))

        response = client.put(f'/api/products/{product.id}', json={'price': 450},
                              headers=auth_headers(customer))

        assert response.status_code == 200
        data = response.get_json()
        assert data['resubmitted'] is True
        assert data['product']['approval_status'] == 'pending'

    def test_stock_change_keeps_listing_live(self, client, customer, make_seller, make_product,
                                             auth_headers):
        product = make_product(make_seller(user=customer))

        data = client.put(f'/api/products/{product.id}', json={'stock': 25},
                          headers=auth_headers(customer)).get_json()

        assert data['resubmitted'] is False
        assert data['product']['stock'] == 25
        assert data['product']['approval_status'] == 'approved'

    def test_original_price_checked_against_stored_price(self, client, customer, make_seller,
                                                         make_product, auth_headers):
        product = make_product(make_seller(user=customer), price='500.00')

        response = client.put(f'/api/products/{product.id}', json={'original_price': 400},
                              headers=auth_headers(customer))

        assert response.status_code == 400

    def test_other_seller_cannot_edit(self, client, customer, make_seller, make_product, auth_headers):
        make_seller(user=customer, business_name='Intruder Store')
        product = make_product(make_seller())

        response = client.put(f'/api/products/{product.id}', json={'price': 1},
                              headers=auth_headers(customer))

        assert response.status_code == 403

    def test_delete_product(self, client, customer, make_seller, make_product, auth_headers):
        product = make_product(make_seller(user=customer))
        product_id = product.id

        response = client.delete(f'/api/products/{product_id}', headers=auth_headers(customer))

        assert response.status_code == 204
        assert db.session.get(Product, product_id) is None

    def test_delete_product_with_orders_deactivates_it(self, client, customer, make_user, make_seller,
                                                       make_product, make_order, auth_headers):
        product = make_product(make_seller(user=customer))
        make_order(product, user=make_user(full_name='Buyer'))

        response = client.delete(f'/api/products/{product.id}', headers=auth_headers(customer))

        assert response.status_code == 204
        assert db.session.get(Product, product.id).is_active is False
        assert client.get('/api/products').get_json()['products'] == []
