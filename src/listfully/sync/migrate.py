"""Moving lists created as a guest into a signed-in owner's store."""

from __future__ import annotations

import logging
from dataclasses import replace

from listfully.engine.ids import generate_id
from listfully.engine.ordering import sort_lists
from listfully.engine.models import ShoppingList

from .store import DocumentStore

logger = logging.getLogger(__name__)


def merge_guest_lists(
    guest_store: DocumentStore,
    guest_owner: str,
    store: DocumentStore,
    owner_id: str,
) -> list[ShoppingList]:
    """Copy every guest list into ``owner_id``'s store and clear the guest's.

    Each list gets a fresh id and is rewritten to the new owner. Item ids and
    order keys are kept; a missing ``statusGroupId`` already defaulted to
    ``default`` on load and is resolved by the owner's fallback rules.
    Returns the lists written.
    """
    merged = []
    for guest_list in sort_lists(guest_store.load_lists(guest_owner)):
        shopping_list = replace(guest_list, id=generate_id(), owner_id=owner_id)
        store.put_list(shopping_list)
        merged.append(shopping_list)
    discard_guest_lists(guest_store, guest_owner)
    logger.info("Merged %d guest lists into owner %s", len(merged), owner_id)
    return merged


def discard_guest_lists(guest_store: DocumentStore, guest_owner: str) -> int:
    """Delete every list held for ``guest_owner``; returns how many were removed."""
    lists = guest_store.load_lists(guest_owner)
    for shopping_list in lists:
        guest_store.delete_list(guest_owner, shopping_list.id)
    return len(lists)
