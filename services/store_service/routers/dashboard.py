"""Admin dashboard router."""

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from services.store_service.dependencies import get_dashboard_service
from services.store_service.schemas import (
    DashboardOverview,
    RecentOrder,
    ReturnsSummary,
    StatusCount,
    TopProduct,
)
from services.store_service.services.dashboard_service import DashboardService

router = APIRouter(prefix="/admin/dashboard", tags=["admin-dashboard"])


@router.get("/overview", response_model=DashboardOverview)
async def overview(
    _admin: AuthUser = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.overview()


@router.get("/orders-by-status", response_model=list[StatusCount])
async def orders_by_status(
    _admin: AuthUser = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.orders_by_status()


@router.get("/recent-orders", response_model=list[RecentOrder])
async def recent_orders(
    limit: int = Query(10, ge=1, le=100),
    _admin: AuthUser = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.recent_orders(limit)


@router.get("/top-products", response_model=list[TopProduct])
async def top_products(
    limit: int = Query(5, ge=1, le=50),
    _admin: AuthUser = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.top_products(limit)


@router.get("/returns-summary", response_model=list[ReturnsSummary])
async def returns_summary(
    _admin: AuthUser = Depends(require_admin),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard.returns_summary()
