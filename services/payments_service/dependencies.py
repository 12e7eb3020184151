"""Request-scoped wiring of the payments collaborators."""

from fastapi import Depends
from libs.common.emails.mailer import Mailer
from libs.common.notifications import Notifier, get_notifier
from libs.db.session import get_async_db
from services.payments_service.services.reconciliation import ReconciliationEngine
from services.payments_service.stripe_client import StripeClient
from services.store_service.services.invoice_service import InvoiceService
from sqlalchemy.ext.asyncio import AsyncSession


def get_stripe_client() -> StripeClient:
    return StripeClient()


def get_mailer() -> Mailer:
    return Mailer()


def get_reconciliation_engine(
    db: AsyncSession = Depends(get_async_db),
    provider: StripeClient = Depends(get_stripe_client),
    mailer: Mailer = Depends(get_mailer),
    notifier: Notifier = Depends(get_notifier),
) -> ReconciliationEngine:
    return ReconciliationEngine(
        db,
        provider,
        mailer=mailer,
        notifier=notifier,
        invoice=InvoiceService(db),
    )
