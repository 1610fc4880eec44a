"""
Storefront API

Backend for the storefront: product catalog, orders, server-side carts,
image uploads and the payment gateway endpoints used at checkout.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .database.products import product_db
from .exceptions import InvalidStatusTransition
from .routes import (
    products_router,
    orders_router,
    cart_router,
    payment_router,
    upload_router,
    users_router,
    admin_router,
)

# Load environment variables
load_dotenv(os.path.join("config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Payment gateway: {'configured' if settings.payment_gateway_configured else 'not configured'}")
    os.makedirs(settings.upload_dir, exist_ok=True)
    await product_db.seed()
    yield
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Storefront API: catalog, orders, carts and payments",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Error Handlers ====================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in exc.errors()
    ]
    logger.debug(f"Rejected {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": errors},
    )


@app.exception_handler(InvalidStatusTransition)
async def status_transition_handler(request: Request, exc: InvalidStatusTransition):
    return JSONResponse(status_code=409, content={"message": exc.message})


# Uploaded images
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)

# Include API routers
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(cart_router)
app.include_router(payment_router)
app.include_router(upload_router)
app.include_router(users_router)
app.include_router(admin_router)


@app.get("/")
async def home():
    """API index"""
    return {
        "message": f"{settings.app_name} API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "orders": "/api/orders",
            "cart": "/api/cart",
            "payment": "/api/payment",
            "upload": "/api/upload",
            "users": "/api/users",
            "admin": "/api/admin",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "storefront"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
