"""
Request handlers.

Handlers take (request, writer) and return an outcome (see
itemapi.http.outcome). Each resource gets a class that is bound to the
state it needs and registers its own routes:

    ItemHandlers(store).register(app.router)
"""

from .items import ItemHandlers, parse_item_id, parse_item_body

__all__ = [
    "ItemHandlers",
    "parse_item_id",
    "parse_item_body",
]
