"""Admin dashboard routes"""

from fastapi import APIRouter, Depends, Query

from ..database.orders import order_db
from ..database.products import product_db
from ..database.users import user_db
from ..models.checkout import Order, OrderStatus
from ..models.product import Product
from ..models.user import AdminStats, User
from ..security.auth import require_admin

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

# Statuses whose totals count as sales
SETTLED_STATUSES = {OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED}


@router.get("/stats", response_model=AdminStats)
async def get_stats():
    """Sales and catalog totals"""
    orders = await order_db.list_orders()
    products = await product_db.all_products()
    users = await user_db.list_users()

    return AdminStats(
        total_sales=round(sum(o.total for o in orders if o.status in SETTLED_STATUSES), 2),
        total_orders=len(orders),
        total_products=len(products),
        total_users=len(users),
    )


@router.get("/products", response_model=list[Product])
async def list_all_products():
    """All products including inactive ones"""
    return await product_db.all_products()


@router.get("/orders", response_model=list[Order])
async def list_all_orders(limit: int = Query(100, ge=1, le=1000)):
    """Recent orders across all users"""
    return await order_db.list_orders(limit=limit)


@router.get("/users", response_model=list[User])
async def list_all_users():
    return await user_db.list_users()
