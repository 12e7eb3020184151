"""Store products router: public browsing and admin catalog management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from services.store_service.dependencies import get_catalog_service
from services.store_service.schemas import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from services.store_service.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Browse products with search and pagination."""
    return await catalog.list_products(search=search, page=page, page_size=page_size)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.get_product(product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Create a product and announce it to connected users."""
    return await catalog.create_product(payload.model_dump())


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return await catalog.update_product(product_id, payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_product(product_id)
