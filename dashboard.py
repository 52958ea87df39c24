"""
Dashboard Aggregator
Role-specific summary counts, recomputed from the full collections on every call
"""

from typing import Any, Dict

from database import JsonStore
from policy import owned_store_ids
from schemas import Caller, Role, StoreStatus
from services import load_products, load_stores, load_users


def summarize(db: JsonStore, caller: Caller) -> Dict[str, Any]:
    stores = load_stores(db)
    products = load_products(db)
    active_stores = sum(1 for s in stores if s.status == StoreStatus.ACTIVE)

    if caller.role == Role.ADMIN:
        return {
            "totalUsers": len(load_users(db)),
            "totalStores": len(stores),
            "totalProducts": len(products),
            "activeStores": active_stores,
        }

    if caller.role == Role.STORE_OWNER:
        store_ids = owned_store_ids(caller.id, stores)
        own_products = [p for p in products if p.store_id in store_ids]
        return {
            "totalStores": len(store_ids),
            "totalProducts": len(own_products),
            "totalStock": sum(p.stock for p in own_products),
            "totalValue": round(sum(p.price * p.stock for p in own_products), 2),
        }

    return {
        "availableStores": active_stores,
        "availableProducts": len(products),
    }
