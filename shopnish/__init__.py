"""
Shopnish - multi-vendor local commerce API
(marketplace + food + services + delivery)
"""
import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_restful import Api
from config import Config
from extensions import db, bcrypt, jwt, mail, migrate

__version__ = '1.0.0'

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    logging.getLogger('shopnish').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    jwt.init_app(app)
    mail.init_app(app)
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'), supports_credentials=True)

    # Make sure every model is registered before the first query
    from shopnish import models  # noqa: F401

    # Register auth resources
    from shopnish.routes.auth_routes import (
        RegisterResource, LoginResource, MeResource, RefreshResource, LogoutResource,
    )

    api = Api(app)
    api.add_resource(RegisterResource, "/api/auth/register")
    api.add_resource(LoginResource, "/api/auth/login")
    api.add_resource(MeResource, "/api/auth/me", "/api/auth/user")
    api.add_resource(RefreshResource, "/api/auth/refresh")
    api.add_resource(LogoutResource, "/api/auth/logout")

    # Register blueprints
    from shopnish.routes.catalog_routes import catalog_bp
    from shopnish.routes.seller_routes import sellers_bp
    from shopnish.routes.cart_routes import cart_bp
    from shopnish.routes.order_routes import orders_bp
    from shopnish.routes.admin_routes import admin_bp
    from shopnish.routes.delivery_routes import delivery_bp
    from shopnish.routes.food_routes import food_bp
    from shopnish.routes.service_routes import services_bp
    from shopnish.routes.notification_routes import notifications_bp

    for blueprint in (catalog_bp, sellers_bp, cart_bp, orders_bp, admin_bp,
                      delivery_bp, food_bp, services_bp, notifications_bp):
        app.register_blueprint(blueprint)

    from shopnish.utils.request_logging import register_request_logging
    register_request_logging(app)

    register_core_routes(app)
    register_error_handlers(app)
    register_cli_commands(app)

    return app


def register_core_routes(app):
    @app.route('/health')
    @app.route('/healthz')
    def health_check():
        """Simple health check endpoint"""
        return {
            'status': 'healthy',
            'message': 'Shopnish API is running',
            'database': 'connected' if app.config.get('SQLALCHEMY_DATABASE_URI') else 'not configured'
        }, 200

    @app.route('/')
    def index():
        """API root endpoint with available routes"""
        return {
            'message': 'Welcome to Shopnish API',
            'version': __version__,
            'endpoints': {
                'health': '/health',
                'auth': '/api/auth/*',
                'categories': '/api/categories',
                'products': '/api/products',
                'sellers': '/api/sellers/*',
                'cart': '/api/cart',
                'checkout': '/api/checkout',
                'orders': '/api/orders/*',
                'admin': '/api/admin/*',
                'delivery': '/api/delivery/*',
                'food': '/api/food/*',
                'services': '/api/services/*',
                'notifications': '/api/notifications'
            }
        }, 200


def register_error_handlers(app):
    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 errors"""
        return jsonify({
            'error': 'Bad request',
            'message': getattr(error, 'description', str(error))
        }), 400

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle 401 errors"""
        return jsonify({
            'error': 'Unauthorized',
            'message': 'Authentication required'
        }), 401

    @app.errorhandler(403)
    def forbidden(error):
        """Handle 403 errors"""
        return jsonify({
            'error': 'Forbidden',
            'message': 'You do not have permission to access this resource'
        }), 403

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors"""
        return jsonify({
            'error': 'Resource not found',
            'message': getattr(error, 'description', str(error))
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors"""
        return jsonify({
            'error': 'Method not allowed',
            'message': getattr(error, 'description', str(error))
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors"""
        db.session.rollback()  # Rollback any failed transactions
        logger.error("Unhandled server error: %s", error)
        return jsonify({
            'error': 'Internal server error',
            'message': 'Something went wrong on our end'
        }), 500


def register_cli_commands(app):
    @app.cli.command("create-db")
    def create_db():
        """
        Create database tables
        Usage: flask create-db
        """
        db.create_all()
        print("Database tables created successfully!")

    @app.cli.command("drop-db")
    def drop_db():
        """
        Drop all database tables (use with caution!)
        Usage: flask drop-db
        """
        if input("Are you sure you want to drop all tables? (yes/no): ").lower() == 'yes':
            db.drop_all()
            print("All database tables dropped!")
        else:
            print("Operation cancelled")

    @app.cli.command("seed-db")
    def seed_db():
        """
        Seed database with initial data
        Usage: flask seed-db
        """
        from seed import seed_data
        seed_data(app)
        print("Database seeded successfully!")
