"""Product API routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..database.products import product_db
from ..models.product import Product, ProductCreate, ProductSort, ProductUpdate
from ..models.user import Identity
from ..security.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=list[Product])
async def list_products(
    search: Optional[str] = Query(None, description="Search name and description"),
    category: Optional[str] = Query(None, description="Filter by category"),
    sort_by: ProductSort = Query(ProductSort.NEWEST, description="Sort order"),
):
    """List active catalog products"""
    return await product_db.list_products(search=search, category=category, sort_by=sort_by)


@router.get("/featured", response_model=list[Product])
async def featured_products():
    """Featured products for the home page"""
    return await product_db.featured_products()


@router.get("/search", response_model=list[Product])
async def search_products(query: str = Query("", description="Search query")):
    """
    Search products by name or description.

    Queries shorter than two characters return no results.
    """
    if len(query.strip()) < 2:
        return []
    return await product_db.search_products(query.strip())


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str):
    """Get a product by ID"""
    product = await product_db.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
async def create_product(
    request: ProductCreate,
    identity: Identity = Depends(require_admin),
):
    """Create a catalog product (admin)"""
    product = await product_db.create_product(request)
    logger.info(f"Product {product.id} created by {identity.user_id}")
    return product


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    request: ProductUpdate,
    identity: Identity = Depends(require_admin),
):
    """Update a catalog product (admin)"""
    product = await product_db.update_product(product_id, request)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Product {product_id} updated by {identity.user_id}")
    return product


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    identity: Identity = Depends(require_admin),
):
    """Delete a catalog product (admin)"""
    if not await product_db.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info(f"Product {product_id} deleted by {identity.user_id}")
    return {"message": "Product deleted"}
