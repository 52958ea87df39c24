"""
Store Manager API - Main Application
REST backend for role-gated store, product and user management
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import auth
import dashboard
import database
import services
from config import (
    APP_DESCRIPTION,
    APP_NAME,
    APP_VERSION,
    DATA_DIR,
    LOG_LEVEL,
    SEED_DEMO_DATA,
    get_allowed_origins,
)
from database import JsonStore, get_db, seed_demo_data
from errors import AppError, InvalidCredentials, Unauthenticated
from schemas import (
    Caller,
    CreateProductRequest,
    CreateStoreRequest,
    CreateUserRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProductRequest,
    UpdateStoreRequest,
)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")
    logger.info(f"Data directory: {DATA_DIR}")
    if SEED_DEMO_DATA:
        if seed_demo_data(database.db):
            logger.info("Demo logins: admin@admin.com / admin123, owner@store.com / owner123, user@user.com / user123")
        else:
            logger.info("Existing users found, skipping demo data")
    yield
    logger.info("Shutting down")


# App and CORS
app = FastAPI(title=APP_NAME, version=APP_VERSION, description=APP_DESCRIPTION, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = None
    if isinstance(exc, (Unauthenticated, InvalidCredentials)):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "ValidationFailed", "detail": "Request validation failed", "details": errors},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Internal server error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Unexpected", "detail": "Server error"},
    )


# ============================================================================
# Auth Routes
# ============================================================================


@app.post("/api/auth/login")
def login(payload: LoginRequest, db: JsonStore = Depends(get_db)):
    return auth.login(db, payload.email, payload.password)


@app.post("/api/auth/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: JsonStore = Depends(get_db)):
    return auth.register(db, payload.email, payload.password, payload.name, payload.role)


@app.get("/api/auth/me")
def me(caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return auth.me(db, caller)


# ============================================================================
# User Routes (admin)
# ============================================================================


@app.get("/api/users")
def list_users(caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return services.list_users(db, caller)


@app.post("/api/users", status_code=status.HTTP_201_CREATED)
def create_user(payload: CreateUserRequest, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return services.create_user(db, caller, payload)


@app.delete("/api/users/{user_id}")
def delete_user(user_id: str, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    services.delete_user(db, caller, user_id)
    return {"message": "User deleted successfully"}


# ============================================================================
# Store Routes
# ============================================================================


@app.get("/api/stores")
def list_stores(caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return [s.to_record() for s in services.list_stores(db, caller)]


@app.post("/api/stores", status_code=status.HTTP_201_CREATED)
def create_store(payload: CreateStoreRequest, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return services.create_store(db, caller, payload).to_record()


@app.get("/api/stores/{store_id}")
def get_store(store_id: str, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return services.get_store(db, caller, store_id).to_record()


@app.put("/api/stores/{store_id}")
def update_store(
    store_id: str,
    payload: UpdateStoreRequest,
    caller: Caller = Depends(auth.get_caller),
    db: JsonStore = Depends(get_db),
):
    return services.update_store(db, caller, store_id, payload).to_record()


@app.delete("/api/stores/{store_id}")
def delete_store(store_id: str, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    services.delete_store(db, caller, store_id)
    return {"message": "Store deleted successfully"}


# ============================================================================
# Product Routes
# ============================================================================


@app.get("/api/products")
def list_products(caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return [p.to_record() for p in services.list_products(db, caller)]


@app.post("/api/products", status_code=status.HTTP_201_CREATED)
def create_product(payload: CreateProductRequest, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return services.create_product(db, caller, payload).to_record()


@app.get("/api/products/{product_id}")
def get_product(product_id: str, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return services.get_product(db, caller, product_id).to_record()


@app.put("/api/products/{product_id}")
def update_product(
    product_id: str,
    payload: UpdateProductRequest,
    caller: Caller = Depends(auth.get_caller),
    db: JsonStore = Depends(get_db),
):
    return services.update_product(db, caller, product_id, payload).to_record()


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    services.delete_product(db, caller, product_id)
    return {"message": "Product deleted successfully"}


# ============================================================================
# Dashboard
# ============================================================================


@app.get("/api/dashboard/stats")
def dashboard_stats(caller: Caller = Depends(auth.get_caller), db: JsonStore = Depends(get_db)):
    return dashboard.summarize(db, caller)


# Utility endpoints
@app.get("/")
def root():
    return {"message": f"{APP_NAME} running", "version": APP_VERSION, "docs": "/docs"}


@app.get("/health")
def health_check(db: JsonStore = Depends(get_db)):
    return {"status": "healthy", "service": APP_NAME, "dataDir": str(db.data_dir)}


if __name__ == "__main__":
    import uvicorn
    from config import DEBUG_MODE, SERVER_HOST, SERVER_PORT

    uvicorn.run("main:app", host=SERVER_HOST, port=SERVER_PORT, reload=DEBUG_MODE)
