"""
Access Policy
Central visibility and mutation decisions for users, stores and products.

Pure functions over the data model: nothing here reads or writes storage.
Callers resolve records first (missing id -> NotFound) and only then ask
the policy, so a denied decision always means the record exists.

Rules:
- admin: sees everything, may create and mutate anything, manages users
- store_owner: sees and mutates only stores they own and the products of
  those stores; a store they create is always owned by them
- user: sees every store and product, mutates nothing
"""

import logging
from typing import Iterable, List, Optional, Set

from errors import Forbidden
from schemas import Caller, Product, Role, Store

logger = logging.getLogger(__name__)


# ============================================================================
# Visibility
# ============================================================================


def owned_store_ids(owner_id: str, stores: Iterable[Store]) -> Set[str]:
    return {s.id for s in stores if s.owner_id == owner_id}


def can_read_store(caller: Caller, store: Store) -> bool:
    if caller.role == Role.STORE_OWNER:
        return store.owner_id == caller.id
    return True


def can_read_product(caller: Caller, product: Product, stores: Iterable[Store]) -> bool:
    if caller.role == Role.STORE_OWNER:
        return product.store_id in owned_store_ids(caller.id, stores)
    return True


def visible_stores(caller: Caller, stores: List[Store]) -> List[Store]:
    """Stores the caller may read; store owners are scoped to their own"""
    if caller.role == Role.STORE_OWNER:
        return [s for s in stores if s.owner_id == caller.id]
    return list(stores)


def visible_products(caller: Caller, products: List[Product], stores: List[Store]) -> List[Product]:
    """Products the caller may read; store owners are scoped to their stores' products"""
    if caller.role == Role.STORE_OWNER:
        store_ids = owned_store_ids(caller.id, stores)
        return [p for p in products if p.store_id in store_ids]
    return list(products)


# ============================================================================
# Creation
# ============================================================================


def can_create(caller: Caller) -> bool:
    return caller.role in (Role.ADMIN, Role.STORE_OWNER)


def resolve_store_owner(caller: Caller, requested_owner_id: Optional[str]) -> Optional[str]:
    """
    Owner for a new store

    A store owner always owns what they create, whatever owner they asked for.
    An admin assigns the requested owner.
    """
    if caller.role == Role.STORE_OWNER:
        return caller.id
    return requested_owner_id


def can_create_product_in(caller: Caller, store: Optional[Store]) -> bool:
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.STORE_OWNER:
        return store is not None and store.owner_id == caller.id
    return False


# ============================================================================
# Mutation (update and delete)
# ============================================================================


def can_mutate_store(caller: Caller, store: Store) -> bool:
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.STORE_OWNER:
        return store.owner_id == caller.id
    return False


def can_mutate_product(caller: Caller, product: Product, stores: Iterable[Store]) -> bool:
    """Store owners may mutate a product only through a store they own"""
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.STORE_OWNER:
        store = next((s for s in stores if s.id == product.store_id), None)
        return store is not None and store.owner_id == caller.id
    return False


# ============================================================================
# User administration
# ============================================================================


def can_list_users(caller: Caller) -> bool:
    return caller.role == Role.ADMIN


def can_create_user(caller: Caller) -> bool:
    return caller.role == Role.ADMIN


def can_delete_user(caller: Caller) -> bool:
    return caller.role == Role.ADMIN


def ensure(allowed: bool, caller: Caller, action: str, message: str = "Access denied") -> None:
    """Raise Forbidden when a decision denies the caller"""
    if not allowed:
        logger.warning(f"Denied {action} for user {caller.id} (role: {caller.role.value})")
        raise Forbidden(message)
