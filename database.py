"""
JSON file persistence for the Store Manager
Each collection is one JSON array file; writes replace the whole file
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

from config import DATA_DIR
from errors import Unexpected
from schemas import Product, Role, Store, User
from security import hash_password

logger = logging.getLogger(__name__)

USERS = "users"
STORES = "stores"
PRODUCTS = "products"
COLLECTIONS = (USERS, STORES, PRODUCTS)

Record = Dict[str, Any]


class JsonStore:
    """
    Key-value persistence over a directory of JSON files

    load/save read and overwrite a whole collection. Writers should go through
    collection(), which holds the collection's lock across the
    read-modify-write window so concurrent writers cannot lose updates.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _path(self, name: str) -> Path:
        if name not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {name}")
        return self.data_dir / f"{name}.json"

    def _lock(self, name: str) -> threading.Lock:
        with self._locks_guard:
            if name not in self._locks:
                self._locks[name] = threading.Lock()
            return self._locks[name]

    def load(self, name: str) -> List[Record]:
        path = self._path(name)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read collection '{name}' from {path}: {e}")
            raise Unexpected(f"Could not read {name}") from e
        if not isinstance(data, list):
            logger.error(f"Collection '{name}' in {path} is not a JSON array")
            raise Unexpected(f"Could not read {name}")
        return data

    def save(self, name: str, records: List[Record]) -> None:
        path = self._path(name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, indent=2, allow_nan=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write collection '{name}' to {path}: {e}")
            raise Unexpected(f"Could not save {name}") from e

    @contextmanager
    def collection(self, name: str) -> Iterator[List[Record]]:
        """
        Exclusive read-modify-write on one collection

        Usage:
            with db.collection(STORES) as stores:
                stores.append(record)

        The list is saved when the block exits normally; nothing is written
        if the block raises.
        """
        with self._lock(name):
            records = self.load(name)
            yield records
            self.save(name, records)

    def clear(self) -> None:
        for name in COLLECTIONS:
            with self._lock(name):
                self.save(name, [])


db = JsonStore(DATA_DIR)


def get_db() -> JsonStore:
    """
    Dependency returning the process-wide store

    Usage in FastAPI:
        @app.get("/endpoint")
        def endpoint(db: JsonStore = Depends(get_db)):
            ...
    """
    return db


def seed_demo_data(store: JsonStore) -> bool:
    """
    Seed demo accounts, one store and two products

    Only runs against an empty users collection. Returns True when data was written.
    """
    with store.collection(USERS) as users:
        if users:
            return False

        admin = User(email="admin@admin.com", password_hash=hash_password("admin123"),
                     name="System Administrator", role=Role.ADMIN)
        owner = User(email="owner@store.com", password_hash=hash_password("owner123"),
                     name="Store Owner Demo", role=Role.STORE_OWNER)
        normal = User(email="user@user.com", password_hash=hash_password("user123"),
                      name="Normal User Demo", role=Role.USER)
        users.extend(u.to_record() for u in (admin, owner, normal))

    shop = Store(
        name="Tech Paradise",
        description="Your one-stop shop for all tech needs",
        category="Electronics",
        owner_id=owner.id,
    )
    with store.collection(STORES) as stores:
        stores.append(shop.to_record())

    demo_products = [
        Product(
            name="Wireless Headphones",
            description="High-quality wireless headphones with noise cancellation",
            price=199.99,
            stock=50,
            category="Electronics",
            store_id=shop.id,
            image="https://images.pexels.com/photos/3394650/pexels-photo-3394650.jpeg",
        ),
        Product(
            name="Smart Watch",
            description="Feature-rich smartwatch with health monitoring",
            price=299.99,
            stock=30,
            category="Electronics",
            store_id=shop.id,
            image="https://images.pexels.com/photos/437037/pexels-photo-437037.jpeg",
        ),
    ]
    with store.collection(PRODUCTS) as products:
        products.extend(p.to_record() for p in demo_products)

    logger.info("Seeded demo data: 3 users, 1 store, 2 products")
    return True
