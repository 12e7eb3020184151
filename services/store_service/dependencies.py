"""Request-scoped wiring of store services and their collaborators."""

from fastapi import Depends
from libs.common.emails.mailer import Mailer
from libs.common.notifications import Notifier, get_notifier
from libs.db.session import get_async_db
from services.payments_service.dependencies import (
    get_mailer,
    get_reconciliation_engine,
)
from services.payments_service.services.reconciliation import ReconciliationEngine
from services.store_service.services.address_service import AddressService
from services.store_service.services.cart_service import CartService
from services.store_service.services.catalog_service import CatalogService
from services.store_service.services.dashboard_service import DashboardService
from services.store_service.services.invoice_service import InvoiceService
from services.store_service.services.order_service import OrderService
from sqlalchemy.ext.asyncio import AsyncSession


def get_cart_service(
    db: AsyncSession = Depends(get_async_db),
    payments: ReconciliationEngine = Depends(get_reconciliation_engine),
    notifier: Notifier = Depends(get_notifier),
) -> CartService:
    return CartService(db, payments=payments, notifier=notifier)


def get_order_service(
    db: AsyncSession = Depends(get_async_db),
    payments: ReconciliationEngine = Depends(get_reconciliation_engine),
    mailer: Mailer = Depends(get_mailer),
) -> OrderService:
    return OrderService(db, payments, mailer=mailer)


def get_invoice_service(db: AsyncSession = Depends(get_async_db)) -> InvoiceService:
    return InvoiceService(db)


def get_dashboard_service(
    db: AsyncSession = Depends(get_async_db),
) -> DashboardService:
    return DashboardService(db)


def get_address_service(db: AsyncSession = Depends(get_async_db)) -> AddressService:
    return AddressService(db)


def get_catalog_service(
    db: AsyncSession = Depends(get_async_db),
    notifier: Notifier = Depends(get_notifier),
) -> CatalogService:
    return CatalogService(db, notifier=notifier)
