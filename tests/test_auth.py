from flask_jwt_extended import decode_token


class TestRegister:
    def test_register_customer_returns_tokens_and_cookies(self, client):
        response = client.post('/api/auth/register', json={
            'full_name': 'Asha Rao',
            'email': 'Asha@Example.com',
            'password': 'secret123',
            'phone': '8123456789',
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data['message'] == 'User registered successfully'
        assert data['user']['email'] == 'asha@example.com'
        assert data['user']['phone'] == '+918123456789'
        assert data['user']['role'] == 'customer'
        assert decode_token(data['access_token'])['role'] == 'customer'

        cookies = response.headers.getlist('Set-Cookie')
        assert any(c.startswith('access_token_cookie=') for c in cookies)
        assert any(c.startswith('refresh_token_cookie=') for c in cookies)

    def test_register_delivery_role(self, client):
        response = client.post('/api/auth/register', json={
            'full_name': 'Ravi Kumar',
            'email': 'ravi@example.com',
            'password': 'secret123',
            'role': 'delivery',
        })

        assert response.status_code == 201
        assert decode_token(response.get_json()['access_token'])['role'] == 'delivery'

    def test_admin_role_cannot_be_self_assigned(self, client):
        response = client.post('/api/auth/register', json={
            'full_name': 'Mallory',
            'email': 'mallory@example.com',
            'password': 'secret123',
            'role': 'admin',
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid role'

    def test_missing_field(self, client):
        response = client.post('/api/auth/register', json={'email': 'x@example.com', 'password': 'secret123'})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'full_name is required'

    def test_body_must_be_an_object(self, client):
        response = client.post('/api/auth/register', json=[1])

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Request body is required'

    def test_short_password(self, client):
        response = client.post('/api/auth/register', json={
            'full_name': 'Asha Rao', 'email': 'asha@example.com', 'password': '123',
        })

        assert response.status_code == 422

    def test_duplicate_email(self, client, customer):
        response = client.post('/api/auth/register', json={
            'full_name': 'Someone Else', 'email': 'CUSTOMER@example.com', 'password': 'secret123',
        })

        assert response.status_code == 422
        assert response.get_json()['error'] == 'Email already taken'

    def test_duplicate_phone_after_normalization(self, client, make_user):
        make_user(phone='+918123456789')

        response = client.post('/api/auth/register', json={
            'full_name': 'Someone Else',
            'email': 'other@example.com',
            'password': 'secret123',
            'phone': '08123456789',
        })

        assert response.status_code == 422
        assert response.get_json()['error'] == 'Phone number already taken'

    def test_invalid_phone(self, client):
        response = client.post('/api/auth/register', json={
            'full_name': 'Asha Rao', 'email': 'asha@example.com', 'password': 'secret123', 'phone': '12345',
        })

        assert response.status_code == 422


class TestLogin:
    def test_login_is_case_insensitive_on_email(self, client, customer):
        response = client.post('/api/auth/login', json={
            'email': 'CUSTOMER@example.com', 'password': 'password123',
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['id'] == customer.id
        assert decode_token(data['access_token'])['sub'] == str(customer.id)

    def test_wrong_password(self, client, customer):
        response = client.post('/api/auth/login', json={
            'email': 'customer@example.com', 'password': 'nope-nope',
        })

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

    def test_inactive_account(self, client, make_user):
        make_user(email='gone@example.com', is_active=False)

        response = client.post('/api/auth/login', json={
            'email': 'gone@example.com', 'password': 'password123',
        })

        assert response.status_code == 403

    def test_missing_credentials(self, client):
        response = client.post('/api/auth/login', json={'email': 'customer@example.com'})

        assert response.status_code == 400

    def test_list_body(self, client):
        assert client.post('/api/auth/login', json=['customer@example.com']).status_code == 400


class TestSession:
    def test_me_with_bearer_token(self, client, customer, auth_headers):
        response = client.get('/api/auth/me', headers=auth_headers(customer))

        assert response.status_code == 200
        data = response.get_json()
        assert data['email'] == 'customer@example.com'
        assert data['is_seller'] is False
        assert data['seller_id'] is None

    def test_user_alias(self, client, customer, auth_headers):
        response = client.get('/api/auth/user', headers=auth_headers(customer))

        assert response.status_code == 200
        assert response.get_json()['id'] == customer.id

    def test_me_with_login_cookie(self, client, customer):
        client.post('/api/auth/login', json={'email': 'customer@example.com', 'password': 'password123'})

        response = client.get('/api/auth/me')

        assert response.status_code == 200
        assert response.get_json()['id'] == customer.id

    def test_me_requires_token(self, client):
        assert client.get('/api/auth/me').status_code == 401

    def test_me_reports_seller_profile(self, client, customer, make_seller, auth_headers):
        seller = make_seller(user=customer)

        data = client.get('/api/auth/me', headers=auth_headers(customer)).get_json()

        assert data['is_seller'] is True
        assert data['seller_id'] == seller.id

    def test_refresh_issues_new_access_token(self, client, customer, refresh_headers):
        response = client.post('/api/auth/refresh', headers=refresh_headers(customer))

        assert response.status_code == 200
        token = response.get_json()['access_token']
        assert decode_token(token)['role'] == 'customer'

    def test_logout_clears_cookies(self, client):
        response = client.post('/api/auth/logout')

        assert response.status_code == 200
        cookies = response.headers.getlist('Set-Cookie')
        assert any(c.startswith('access_token_cookie=;') for c in cookies)
