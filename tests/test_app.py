import logging

from shopnish.utils.request_logging import MAX_LINE_LENGTH, format_log_line


class TestCoreRoutes:
    def test_health(self, client):
        for path in ('/health', '/healthz'):
            response = client.get(path)
            assert response.status_code == 200
            assert response.get_json()['status'] == 'healthy'

    def test_index_lists_endpoints(self, client):
        data = client.get('/').get_json()

        assert data['version'] == '1.0.0'
        assert data['endpoints']['cart'] == '/api/cart'

    def test_unknown_route_returns_json(self, client):
        response = client.get('/api/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Resource not found'


class TestRequestLogging:
    def test_short_line(self):
        assert format_log_line('GET', '/api/cart', 200, 5) == 'GET /api/cart 200 in 5ms'

    def test_payload_is_truncated(self):
        line = format_log_line('GET', '/api/products', 200, 12, {'products': ['x' * 200]})

        assert len(line) == MAX_LINE_LENGTH
        assert line.startswith('GET /api/products 200 in 12ms :: {"products"')
        assert line.endswith('…')

    def test_api_requests_are_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger='shopnish.requests')

        client.get('/api/categories')
        client.get('/health')

        lines = [r.getMessage() for r in caplog.records if r.name == 'shopnish.requests']
        assert len(lines) == 1
        assert lines[0].startswith('GET /api/categories 200 in ')
