"""
=============================================================================
ITEM HANDLERS
=============================================================================

The /items resource:

    GET     /items          list all items                  200
    GET     /items/{id}     one item                        200 / 400 / 404
    POST    /items          create (body id ignored)        201 / 400
    PUT     /items/{id}     replace (body id ignored)       200 / 400 / 404
    DELETE  /items/{id}     remove                          204 / 400 / 404

Handlers return outcomes (ok(), created(), not_found(), ...) and never
raise for expected problems: a bad id or a bad body is caught here and
returned as a tagged Failure. delete_item shows the other style and
writes its 204 straight through the ResponseWriter.

Example:

    curl -X POST localhost:8080/items -d '{"title": "A", "completed": false}'
    HTTP/1.1 201 Created
    Location: /items/4
    {"id": 4, "title": "A", "completed": false}

=============================================================================
"""

from http import HTTPStatus
from typing import Optional
import logging
import re

from ..core.store import Item, ItemStore, InvalidItemError
from ..http.errors import BadRequest
from ..http.outcome import Outcome, ok, created, failure, not_found
from ..http.request import HTTPRequest
from ..http.response import ResponseWriter
from ..http.router import Router


logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[+-]?[0-9]+$")


def parse_item_id(request: HTTPRequest) -> int:
    """
    Read the {id} path parameter as an integer.

    Only plain decimal integers are accepted ("7", "+7", "-7"). Python's
    int() would also take " 7" and "1_000", which no client means as an id.

    Raises:
        BadRequest: The parameter is missing or not an integer.
    """
    raw = request.path_params.get("id", "")
    if not _ID_PATTERN.match(raw):
        raise BadRequest(f"invalid ID: {raw!r}")
    return int(raw)


def parse_item_body(request: HTTPRequest) -> Item:
    """
    Decode the request body into an Item (without id).

    Raises:
        BadRequest: Empty body, invalid JSON, or wrong field types.
    """
    try:
        return Item.from_dict(request.json)
    except InvalidItemError as e:
        raise BadRequest(str(e))


class ItemHandlers:
    """
    Handlers for the /items collection, bound to one store.

        store = ItemStore.with_samples()
        ItemHandlers(store).register(app.router)

    The store is injected, not global: every app (and every test) decides
    which store its handlers talk to.
    """

    def __init__(self, store: ItemStore, prefix: str = "/items"):
        self.store = store
        self.prefix = prefix.rstrip("/")

    def register(self, router: Router) -> Router:
        """Register all five routes under `prefix`. Returns the group."""
        group = router.group(self.prefix)
        group.get("", name="list_items")(self.list_items)
        group.get("/{id}", name="get_item")(self.get_item)
        group.post("", name="create_item")(self.create_item)
        group.put("/{id}", name="update_item")(self.update_item)
        group.delete("/{id}", name="delete_item")(self.delete_item)
        return group

    def location(self, item: Item) -> str:
        return f"{self.prefix}/{item.id}"

    # =========================================================================
    # READ
    # =========================================================================

    def list_items(self, request: HTTPRequest, writer: ResponseWriter) -> Outcome:
        return ok(self.store.get_all())

    def get_item(self, request: HTTPRequest, writer: ResponseWriter) -> Outcome:
        try:
            item_id = parse_item_id(request)
        except BadRequest as e:
            return failure(e)

        item, found = self.store.get(item_id)
        if not found:
            return not_found()
        return ok(item)

    # =========================================================================
    # WRITE
    # =========================================================================

    def create_item(self, request: HTTPRequest, writer: ResponseWriter) -> Outcome:
        try:
            item = parse_item_body(request)
        except BadRequest as e:
            return failure(e)

        stored = self.store.create(item)
        logger.info(f"Created item {stored.id}")
        return created(stored, location=self.location(stored))

    def update_item(self, request: HTTPRequest, writer: ResponseWriter) -> Outcome:
        try:
            item_id = parse_item_id(request)
            item = parse_item_body(request)
        except BadRequest as e:
            return failure(e)

        # Full replace: fields missing from the body fall back to defaults
        stored, found = self.store.update(item_id, item)
        if not found:
            return not_found()
        logger.info(f"Updated item {item_id}")
        return ok(stored)

    def delete_item(self, request: HTTPRequest, writer: ResponseWriter) -> Optional[Outcome]:
        try:
            item_id = parse_item_id(request)
        except BadRequest as e:
            return failure(e)

        if not self.store.delete(item_id):
            return not_found()

        logger.info(f"Deleted item {item_id}")
        writer.write_status(HTTPStatus.NO_CONTENT)
        return None
