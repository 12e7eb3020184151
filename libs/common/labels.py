"""Human readable labels for order/payment status codes and payment methods."""

from typing import Optional

ORDER_STATUS_LABELS: dict[str, str] = {
    "pending": "Pending",
    "processing": "Processing",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "completed": "Completed",
    "cancelled": "Cancelled",
    "awaiting_return": "Awaiting return",
    "returned": "Returned",
}

PAYMENT_STATUS_LABELS: dict[str, str] = {
    "pending": "Pending",
    "completed": "Completed",
    "failed": "Failed",
    "refunded": "Refunded",
}

PAYMENT_METHOD_LABELS: dict[str, str] = {
    "card": "Card",
    "paypal": "PayPal",
    "sepa_debit": "SEPA transfer",
    "klarna": "Klarna",
    "bancontact": "Bancontact",
    "ideal": "iDEAL",
    "alipay": "Alipay",
    "afterpay_clearpay": "Afterpay / Clearpay",
}


def _code(value) -> Optional[str]:
    # Accept plain strings as well as str-valued enums
    if value is None:
        return None
    return getattr(value, "value", value)


def order_status_label(code) -> str:
    """Label for an order status; '-' when missing, the raw code when unknown."""
    code = _code(code)
    if not code:
        return "-"
    return ORDER_STATUS_LABELS.get(code, code)


def payment_status_label(code) -> str:
    code = _code(code)
    if not code:
        return "-"
    return PAYMENT_STATUS_LABELS.get(code, code)


def payment_method_label(code) -> str:
    code = _code(code)
    if not code:
        return "Unknown method"
    return PAYMENT_METHOD_LABELS.get(code, "Unknown method")
