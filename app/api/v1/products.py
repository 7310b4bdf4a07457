from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional
from app.db.session import get_db
from app.api.deps import get_current_user
from app.core.config import settings
from app.core.rate_limiter import limiter, READ_LIMIT, WRITE_LIMIT
from app.models.user import User
from app.schemas.product import ProductCreate
from app.services.product_service import ProductService, serialize_product
from app.utils.response import pagination_meta, success

router = APIRouter()


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    responses={
        201: {"description": "Listing created"},
        400: {"description": "Invalid title, description, price or images"},
        401: {"description": "Identity header missing"},
        404: {"description": "User not found"},
    },
)
@limiter.limit(WRITE_LIMIT)
def create_product(
    request: Request,
    product_data: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a listing owned by the caller"""
    product = ProductService.create_product(db, current_user, product_data)
    return success(data={"product": serialize_product(product)}, message="Product created successfully")


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit(READ_LIMIT)
def get_products(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Get listings with search, category filter and pagination
    """
    products, total = ProductService.list_products(
        db,
        page=page,
        limit=limit,
        search=search.strip() if search else None,
        category=category.strip() if category else None,
    )
    return success(
        data={
            "products": [serialize_product(product) for product in products],
            "pagination": pagination_meta(total=total, page=page, limit=limit),
        },
        message="Products retrieved",
    )


@router.get("/my-listings", response_model=dict)
def get_my_listings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get the caller's own listings, newest first"""
    products = ProductService.list_owner_products(db, current_user.id)
    return success(
        data={
            "products": [serialize_product(product) for product in products],
            "total": len(products),
        },
        message="Listings retrieved",
    )


@router.get("/{product_id}", response_model=dict)
@limiter.limit(READ_LIMIT)
def get_product_detail(request: Request, product_id: int, db: Session = Depends(get_db)):
    """Get product details by id."""
    product = ProductService.get_product(db, product_id)
    return success(data={"product": serialize_product(product)}, message="Product retrieved")


@router.delete("/{product_id}", response_model=dict)
@router.delete("/{product_id}/delete", response_model=dict)
@limiter.limit(WRITE_LIMIT)
def delete_product(
    request: Request,
    product_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a listing (owner only)"""
    deleted = ProductService.delete_product(db, product_id, current_user.id)
    return success(data={"deleted_product": deleted}, message="Product deleted successfully")
