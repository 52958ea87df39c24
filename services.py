"""
Resource Services
CRUD over stores, products and users, every call gated by the Access Policy

Order of checks:
- update/delete: resolve the record (NotFound), then policy (Forbidden), then write
- create: request validation first, then policy
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import policy
from auth import add_user, find_user
from config import DEFAULT_PRODUCT_IMAGE
from database import PRODUCTS, STORES, USERS, JsonStore, Record
from errors import NotFound, ValidationFailed
from schemas import (
    Caller,
    CreateProductRequest,
    CreateStoreRequest,
    CreateUserRequest,
    Product,
    Store,
    UpdateProductRequest,
    UpdateStoreRequest,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)


def load_stores(db: JsonStore) -> List[Store]:
    return [Store.model_validate(s) for s in db.load(STORES)]


def load_products(db: JsonStore) -> List[Product]:
    return [Product.model_validate(p) for p in db.load(PRODUCTS)]


def load_users(db: JsonStore) -> List[User]:
    return [User.model_validate(u) for u in db.load(USERS)]


def find_index(records: List[Record], record_id: str) -> Optional[int]:
    for i, record in enumerate(records):
        if record.get("id") == record_id:
            return i
    return None


def locate(records: List[Record], record_id: str, label: str) -> Tuple[int, Record]:
    i = find_index(records, record_id)
    if i is None:
        raise NotFound(f"{label} not found")
    return i, records[i]


# ============================================================================
# Stores
# ============================================================================


def list_stores(db: JsonStore, caller: Caller) -> List[Store]:
    return policy.visible_stores(caller, load_stores(db))


def get_store(db: JsonStore, caller: Caller, store_id: str) -> Store:
    _, record = locate(db.load(STORES), store_id, "Store")
    store = Store.model_validate(record)
    policy.ensure(policy.can_read_store(caller, store), caller, f"read store {store_id}")
    return store


def create_store(db: JsonStore, caller: Caller, payload: CreateStoreRequest) -> Store:
    policy.ensure(policy.can_create(caller), caller, "create store", "Insufficient permissions")

    owner_id = policy.resolve_store_owner(caller, payload.owner_id)
    if not owner_id:
        raise ValidationFailed("ownerId is required")
    if caller.is_admin and find_user(db, owner_id) is None:
        raise ValidationFailed("ownerId must reference an existing user")

    store = Store(
        name=payload.name,
        description=payload.description,
        category=payload.category,
        owner_id=owner_id,
    )
    with db.collection(STORES) as stores:
        stores.append(store.to_record())
    logger.info(f"Store {store.id} created by {caller.id} for owner {owner_id}")
    return store


def update_store(db: JsonStore, caller: Caller, store_id: str, payload: UpdateStoreRequest) -> Store:
    with db.collection(STORES) as stores:
        i, record = locate(stores, store_id, "Store")
        store = Store.model_validate(record)
        policy.ensure(policy.can_mutate_store(caller, store), caller, f"update store {store_id}")

        store = store.model_copy(update={**payload.changes(), "updated_at": utcnow()})
        stores[i] = store.to_record()
    logger.info(f"Store {store_id} updated by {caller.id}")
    return store


def delete_store(db: JsonStore, caller: Caller, store_id: str) -> None:
    """Delete a store; its products are left in place"""
    with db.collection(STORES) as stores:
        i, record = locate(stores, store_id, "Store")
        store = Store.model_validate(record)
        policy.ensure(policy.can_mutate_store(caller, store), caller, f"delete store {store_id}")
        del stores[i]
    logger.info(f"Store {store_id} deleted by {caller.id}")


# ============================================================================
# Products
# ============================================================================


def list_products(db: JsonStore, caller: Caller) -> List[Product]:
    return policy.visible_products(caller, load_products(db), load_stores(db))


def get_product(db: JsonStore, caller: Caller, product_id: str) -> Product:
    _, record = locate(db.load(PRODUCTS), product_id, "Product")
    product = Product.model_validate(record)
    allowed = policy.can_read_product(caller, product, load_stores(db))
    policy.ensure(allowed, caller, f"read product {product_id}")
    return product


def create_product(db: JsonStore, caller: Caller, payload: CreateProductRequest) -> Product:
    policy.ensure(policy.can_create(caller), caller, "create product", "Insufficient permissions")

    store = next((s for s in load_stores(db) if s.id == payload.store_id), None)
    policy.ensure(policy.can_create_product_in(caller, store), caller, f"create product in store {payload.store_id}")
    if store is None:
        raise ValidationFailed("storeId must reference an existing store")

    product = Product(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        stock=payload.stock,
        category=payload.category,
        store_id=payload.store_id,
        image=payload.image or DEFAULT_PRODUCT_IMAGE,
    )
    with db.collection(PRODUCTS) as products:
        products.append(product.to_record())
    logger.info(f"Product {product.id} created in store {product.store_id} by {caller.id}")
    return product


def update_product(db: JsonStore, caller: Caller, product_id: str, payload: UpdateProductRequest) -> Product:
    with db.collection(PRODUCTS) as products:
        i, record = locate(products, product_id, "Product")
        product = Product.model_validate(record)
        allowed = policy.can_mutate_product(caller, product, load_stores(db))
        policy.ensure(allowed, caller, f"update product {product_id}")

        product = product.model_copy(update={**payload.changes(), "updated_at": utcnow()})
        products[i] = product.to_record()
    logger.info(f"Product {product_id} updated by {caller.id}")
    return product


def delete_product(db: JsonStore, caller: Caller, product_id: str) -> None:
    with db.collection(PRODUCTS) as products:
        i, record = locate(products, product_id, "Product")
        product = Product.model_validate(record)
        allowed = policy.can_mutate_product(caller, product, load_stores(db))
        policy.ensure(allowed, caller, f"delete product {product_id}")
        del products[i]
    logger.info(f"Product {product_id} deleted by {caller.id}")


# ============================================================================
# Users (admin)
# ============================================================================


def list_users(db: JsonStore, caller: Caller) -> List[Dict[str, Any]]:
    policy.ensure(policy.can_list_users(caller), caller, "list users", "Insufficient permissions")
    return [u.public_view() for u in load_users(db)]


def create_user(db: JsonStore, caller: Caller, payload: CreateUserRequest) -> Dict[str, Any]:
    policy.ensure(policy.can_create_user(caller), caller, "create user", "Insufficient permissions")
    user = add_user(db, payload.email, payload.password, payload.name, payload.role)
    return user.public_view()


def delete_user(db: JsonStore, caller: Caller, user_id: str) -> None:
    with db.collection(USERS) as users:
        i, _ = locate(users, user_id, "User")
        policy.ensure(policy.can_delete_user(caller), caller, f"delete user {user_id}", "Insufficient permissions")
        del users[i]
    logger.info(f"User {user_id} deleted by {caller.id}")
