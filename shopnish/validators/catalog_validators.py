"""
Catalog Validators
Validates category and product payloads
"""
from abc import ABC

from shopnish.validators.common import clean_text, clean_bool, parse_money, parse_int, slugify


class CatalogValidator(ABC):
    """Validator for categories and products"""

    MAX_IMAGES = 8
    MAX_STOCK = 100000

    @staticmethod
    def validate_category(data: dict) -> tuple:
        """
        Validate category creation data

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        if not isinstance(data, dict) or not data:
            return (False, {}, {'body': 'Request body is required'})

        errors = {}
        name = clean_text(data, 'name', errors, required=True, min_length=2, max_length=100)
        slug = slugify(data.get('slug') or name or '')
        if name and not slug:
            errors['slug'] = 'Slug must contain letters or numbers'

        validated_data = {
            'name': name,
            'slug': slug,
            'description': clean_text(data, 'description', errors, max_length=1000),
            'image_url': clean_text(data, 'image_url', errors, max_length=500),
        }

        if errors:
            return (False, {}, errors)
        return (True, validated_data, {})

    @staticmethod
    def validate_product(data: dict, partial: bool = False) -> tuple:
        """
        Validate product creation/update data

        Args:
            data: Product request data (camelCase keys from the SPA are accepted)
            partial: Only validate the fields present (product update)

        Returns:
            tuple: (is_valid: bool, validated_data: dict, errors: dict)
        """
        if not isinstance(data, dict) or (not data and not partial):
            return (False, {}, {'body': 'Request body is required'})

        data = dict(data)
        for camel, snake in (('categoryId', 'category_id'), ('originalPrice', 'original_price'),
                             ('isActive', 'is_active')):
            if camel in data and snake not in data:
                data[snake] = data.pop(camel)

        errors = {}
        validated_data = {}

        def wants(field):
            return not partial or field in data

        # 1. REQUIRED FIELDS
        if wants('name'):
            validated_data['name'] = clean_text(data, 'name', errors, required=True,
                                                min_length=2, max_length=200)
        if wants('category_id'):
            if data.get('category_id') in (None, ''):
                errors['category_id'] = 'category_id is required'
            else:
                validated_data['category_id'] = parse_int(data['category_id'], 'category_id', errors, minimum=1)
        if wants('price'):
            if data.get('price') in (None, ''):
                errors['price'] = 'price is required'
            else:
                validated_data['price'] = parse_money(data['price'], 'price', errors)

        # 2. OPTIONAL FIELDS
        if 'description' in data:
            validated_data['description'] = clean_text(data, 'description', errors, max_length=5000)

        if 'original_price' in data:
            if data['original_price'] in (None, ''):
                validated_data['original_price'] = None
            else:
                validated_data['original_price'] = parse_money(data['original_price'], 'original_price', errors)

        if 'sku' in data:
            validated_data['sku'] = clean_text(data, 'sku', errors, max_length=64)

        if wants('stock'):
            validated_data['stock'] = parse_int(data.get('stock', 0), 'stock', errors,
                                                minimum=0, maximum=CatalogValidator.MAX_STOCK)

        if 'images' in data:
            images = data.get('images') or []
            if not isinstance(images, list) or not all(isinstance(i, str) and i.strip() for i in images):
                errors['images'] = 'images must be a list of image URLs'
            elif len(images) > CatalogValidator.MAX_IMAGES:
                errors['images'] = f'A product can have at most {CatalogValidator.MAX_IMAGES} images'
            else:
                validated_data['images'] = [i.strip() for i in images]

        if 'is_active' in data:
            validated_data['is_active'] = clean_bool(data, 'is_active', errors, default=True)

        # 3. CROSS-FIELD CHECKS
        price = validated_data.get('price')
        original_price = validated_data.get('original_price')
        if price is not None and original_price is not None and original_price < price:
            errors['original_price'] = 'Original price cannot be lower than the selling price'

        if errors:
            return (False, {}, errors)

        return (True, validated_data, {})


__all__ = ['CatalogValidator']
