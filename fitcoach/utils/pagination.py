from flask import current_app, request


def page_args():
    default = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    ceiling = current_app.config.get("MAX_PAGE_SIZE", 100)
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    limit = request.args.get("limit", default, type=int) or default
    return page, min(max(limit, 1), ceiling)


def paginate(query, serialize=lambda row: row.to_dict()):
    page, limit = page_args()
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "items": [serialize(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }
