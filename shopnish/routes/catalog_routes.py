"""
Catalog Routes
Categories and marketplace products (public browsing, seller listing management)
"""
import logging

from flask import Blueprint, jsonify, request, g
from flask_jwt_extended import jwt_required
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from extensions import db
from shopnish.models.approval import ApprovalStatus
from shopnish.models.catalog import Category, Product
from shopnish.models.order import OrderItem
from shopnish.models.seller import Seller
from shopnish.auth.decorators import (
    get_current_user, login_required, seller_required, approved_seller_required,
)
from shopnish.validators.catalog_validators import CatalogValidator
from shopnish.utils.pagination import paginate

logger = logging.getLogger(__name__)

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api')


def _int_arg(*names):
    """First of the given query parameters that is present, as an int"""
    for name in names:
        value = request.args.get(name)
        if value not in (None, ''):
            return int(value)
    return None


# ============================================================================
# CATEGORIES
# ============================================================================
@catalog_bp.route('/categories', methods=['GET'])
def list_categories():
    """
    List all categories ordered by name

    GET /api/categories
    """
    categories = Category.query.order_by(Category.name.asc()).all()
    return jsonify({'categories': [c.to_dict() for c in categories]}), 200


@catalog_bp.route('/categories', methods=['POST'])
@jwt_required()
@login_required
def create_category():
    """
    Create a category (sellers and admins)

    POST /api/categories
    Body:
    {
        "name": "Home & Kitchen",
        "slug": "home-kitchen",     (optional, derived from name)
        "description": "...",
        "image_url": "https://..."
    }
    """
    user = g.current_user
    if not user.is_admin and user.seller is None:
        return jsonify({'error': 'Only sellers and admins can create categories'}), 403

    is_valid, validated_data, errors = CatalogValidator.validate_category(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    if Category.query.filter_by(slug=validated_data['slug']).first():
        return jsonify({'error': f"Category '{validated_data['slug']}' already exists"}), 409

    try:
        category = Category(**validated_data)
        db.session.add(category)
        db.session.commit()

        logger.info("Category %s created by user #%s", category.slug, user.id)
        return jsonify({'message': 'Category created', 'category': category.to_dict()}), 201

    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': f"Category '{validated_data['slug']}' already exists"}), 409
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to create category")
        return jsonify({'error': f'Failed to create category: {str(e)}'}), 500


# ============================================================================
# PRODUCTS - PUBLIC BROWSING
# ============================================================================
@catalog_bp.route('/products', methods=['GET'])
def list_products():
    """
    List products

    GET /api/products
    Query Parameters:
    - category_id / categoryId: Filter by category
    - seller_id / sellerId: Filter by seller
    - search: Case-insensitive match on name or description
    - page, limit: Pagination

    A seller asking for its own products (seller_id = own id) also sees
    pending and rejected listings.
    """
    try:
        category_id = _int_arg('category_id', 'categoryId')
        seller_id = _int_arg('seller_id', 'sellerId')
        search = (request.args.get('search') or '').strip()

        user = get_current_user(optional=True)
        own_listing = (
            seller_id is not None
            and user is not None
            and user.seller is not None
            and user.seller.id == seller_id
        )

        query = Product.query
        if own_listing:
            query = query.filter(Product.seller_id == seller_id)
        else:
            query = query.join(Seller).filter(
                Product.approval_status == ApprovalStatus.APPROVED,
                Product.is_active.is_(True),
                Seller.approval_status == ApprovalStatus.APPROVED,
            )
            if seller_id is not None:
                query = query.filter(Product.seller_id == seller_id)

        if category_id is not None:
            query = query.filter(Product.category_id == category_id)

        if search:
            pattern = f'%{search}%'
            query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))

        products, pagination = paginate(query, Product.created_at.desc())

        return jsonify({
            'products': [p.to_dict(include_details=True) for p in products],
            'pagination': pagination
        }), 200

    except ValueError as e:
        return jsonify({'error': f'Invalid parameter: {str(e)}'}), 400


@catalog_bp.route('/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    """
    Get a single product with its seller and category

    GET /api/products/:id
    """
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({'error': 'Product not found'}), 404

    user = get_current_user(optional=True)
    seller = user.seller if user else None
    is_admin = bool(user and user.is_admin)

    # Unapproved listings look missing to everyone but their seller and admins
    if not product.is_visible_to(seller=seller, is_admin=is_admin):
        return jsonify({'error': 'Product not found'}), 404

    return jsonify({'product': product.to_dict(include_details=True)}), 200


# ============================================================================
# PRODUCTS - SELLER MANAGEMENT
# ============================================================================
@catalog_bp.route('/products', methods=['POST'])
@jwt_required()
@approved_seller_required
def create_product():
    """
    Create a product listing (approved sellers only); starts pending review

    POST /api/products
    Body:
    {
        "name": "Steel water bottle",
        "category_id": 1,
        "price": 499,
        "original_price": 699,
        "stock": 40,
        "images": ["https://..."],
        "description": "..."
    }
    """
    seller = g.profile

    is_valid, validated_data, errors = CatalogValidator.validate_product(request.get_json(silent=True))
    if not is_valid:
        return jsonify({'errors': errors}), 400

    if not db.session.get(Category, validated_data['category_id']):
        return jsonify({'errors': {'category_id': 'Category not found'}}), 400

    try:
        product = Product(seller_id=seller.id, **validated_data)
        db.session.add(product)
        db.session.commit()

        logger.info("Seller #%s listed product #%s (pending review)", seller.id, product.id)
        return jsonify({
            'message': 'Product created and submitted for review',
            'product': product.to_dict()
        }), 201

    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'A product with this SKU already exists'}), 409
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to create product")
        return jsonify({'error': f'Failed to create product: {str(e)}'}), 500


@catalog_bp.route('/products/<int:product_id>', methods=['PUT'])
@jwt_required()
@seller_required
def update_product(product_id):
    """
    Update a product (owning seller only)

    PUT /api/products/:id

    Changing name, description, price, original_price, category or images
    sends an approved or rejected product back to pending review.
    """
    seller = g.profile
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({'error': 'Product not found'}), 404

    if product.seller_id != seller.id:
        return jsonify({'error': 'You can only edit your own products'}), 403

    is_valid, validated_data, errors = CatalogValidator.validate_product(
        request.get_json(silent=True), partial=True)
    if not is_valid:
        return jsonify({'errors': errors}), 400

    if 'category_id' in validated_data and not db.session.get(Category, validated_data['category_id']):
        return jsonify({'errors': {'category_id': 'Category not found'}}), 400

    # Cross-check against the stored price when only one side is sent
    price = validated_data.get('price', product.price)
    original_price = validated_data.get('original_price', product.original_price)
    if price is not None and original_price is not None and original_price < price:
        return jsonify({'errors': {'original_price': 'Original price cannot be lower than the selling price'}}), 400

    try:
        resubmitted = product.apply_update(validated_data)
        db.session.commit()

        return jsonify({
            'message': 'Product updated and resubmitted for review' if resubmitted else 'Product updated',
            'resubmitted': resubmitted,
            'product': product.to_dict()
        }), 200

    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'A product with this SKU already exists'}), 409
    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to update product #%s", product_id)
        return jsonify({'error': f'Failed to update product: {str(e)}'}), 500


@catalog_bp.route('/products/<int:product_id>', methods=['DELETE'])
@jwt_required()
@seller_required
def delete_product(product_id):
    """
    Delete a product (owning seller only)

    DELETE /api/products/:id

    Products that appear in past orders are deactivated instead so that
    order history keeps its references.
    """
    seller = g.profile
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({'error': 'Product not found'}), 404

    if product.seller_id != seller.id:
        return jsonify({'error': 'You can only delete your own products'}), 403

    try:
        if OrderItem.query.filter_by(product_id=product.id).first():
            product.is_active = False
            for cart_item in list(product.cart_items):
                db.session.delete(cart_item)
            logger.info("Product #%s has order history, deactivated instead of deleted", product.id)
        else:
            db.session.delete(product)
        db.session.commit()
        return '', 204

    except Exception as e:
        db.session.rollback()
        logger.exception("Failed to delete product #%s", product_id)
        return jsonify({'error': f'Failed to delete product: {str(e)}'}), 500
