"""
Resolve public route identifiers for cards and card items.

Cards and items are addressable two ways: the legacy integer id, and the
UUID added later. Both forms stay valid for links that were already shared.
A route parameter is classified by shape and turned into a key that knows
which column to query, for the row itself and for its children.

Children are looked up with the same identifier generation as the parent
parameter. An item that only carries the other generation's parent reference
is unreachable through that route.
"""
import logging
import re
import uuid
from typing import NamedTuple

from django.db import DatabaseError

from .exceptions import FetchError, NotFoundError
from .models import Card, CardItem
from .repositories import card_item_repository

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(r'^[0-9a-fA-F-]{36}$')
LEGACY_ID_PATTERN = re.compile(r'^[0-9]+$')


class LegacyKey(NamedTuple):
    value: int

    def row_lookup(self):
        return {'id': self.value}

    def child_lookup(self):
        return {'card_id': self.value}


class StableKey(NamedTuple):
    value: uuid.UUID

    def row_lookup(self):
        return {'uuid_id': self.value}

    def child_lookup(self):
        return {'card_uuid': self.value}


def parse_public_key(param):
    """
    Classify a route parameter as a StableKey (36 hex-and-hyphen chars) or a
    LegacyKey (digits). Anything else raises NotFoundError, including strings
    with the UUID shape that do not parse as a UUID.
    """
    param = (param or '').strip()
    if UUID_PATTERN.match(param):
        try:
            return StableKey(uuid.UUID(param))
        except ValueError:
            raise NotFoundError(f"Malformed identifier: {param}")
    if LEGACY_ID_PATTERN.match(param):
        return LegacyKey(int(param))
    raise NotFoundError(f"Malformed identifier: {param}")


def _resolve(model, param):
    key = parse_public_key(param)
    try:
        row = model.objects.filter(**key.row_lookup()).first()
    except DatabaseError as e:
        logger.error(f"Failed to resolve {model._meta.verbose_name} {param}: {e}")
        raise FetchError(f"Failed to fetch {model._meta.verbose_name}") from e
    if row is None:
        raise NotFoundError(f"{model._meta.verbose_name.capitalize()} {param} not found")
    return key, row


def resolve_card(param):
    return _resolve(Card, param)[1]


def resolve_card_item(param):
    return _resolve(CardItem, param)[1]


def card_with_items(param):
    """Return (card, items) for a /card/:id route parameter."""
    key, card = _resolve(Card, param)
    return card, card_item_repository.list_for(key)


def public_id(row):
    """Identifier to put in a shared link: the UUID when the row has one."""
    return str(row.uuid_id) if row.uuid_id else str(row.id)
