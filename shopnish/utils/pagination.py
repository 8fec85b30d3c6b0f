from flask import request

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def get_page_args():
    """Read ?page= and ?limit= from the query string; raises ValueError on junk"""
    limit = int(request.args.get('limit', DEFAULT_LIMIT))
    page = int(request.args.get('page', 1))
    if limit < 1 or page < 1:
        raise ValueError('page and limit must be positive integers')
    return page, min(limit, MAX_LIMIT)


def paginate(query, order_by):
    """Apply ordering and paging to a query; returns (items, pagination dict)"""
    page, limit = get_page_args()
    total = query.count()
    items = query.order_by(order_by)\
                 .limit(limit)\
                 .offset((page - 1) * limit)\
                 .all()

    return items, {
        'total': total,
        'page': page,
        'limit': limit,
        'pages': (total + limit - 1) // limit
    }
