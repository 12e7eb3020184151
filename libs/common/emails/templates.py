"""
Order lifecycle email templates.

Every template takes a context dict and returns ``(text_body, html_body)``.
HTML bodies share the branded layout from ``wrap_html()``.

Color palette by email category:
- Confirmation / General:  slate   #111827 → #374151
- Success / Delivered:     green   #10b981 → #059669
- Alerts / Cancellations:  amber   #f59e0b → #d97706
"""

from html import escape
from typing import Callable, Dict, Tuple

from libs.common.currency import format_amount

# ─── Color presets ────────────────────────────────────────────────────
GRADIENT_SLATE = "linear-gradient(135deg, #111827 0%, #374151 100%)"
GRADIENT_GREEN = "linear-gradient(135deg, #10b981 0%, #059669 100%)"
GRADIENT_AMBER = "linear-gradient(135deg, #f59e0b 0%, #d97706 100%)"

Rendered = Tuple[str, str]


def wrap_html(
    title: str,
    body_html: str,
    subtitle: str = "",
    header_gradient: str = GRADIENT_SLATE,
) -> str:
    """Wrap inner content in the branded ShopBrands email layout."""
    subtitle_html = (
        f'<p style="margin: 8px 0 0 0; opacity: 0.9; font-size: 15px;">{subtitle}</p>'
        if subtitle
        else ""
    )
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title}</title>
</head>
<body style="margin:0;padding:0;background:#f8fafc;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;color:#333;line-height:1.6;">
    <div style="max-width:600px;margin:0 auto;padding:20px;">
        <div style="background:{header_gradient};color:white;padding:30px;border-radius:12px 12px 0 0;">
            <h1 style="margin:0;font-size:24px;">{title}</h1>
            {subtitle_html}
        </div>
        <div style="background:white;padding:30px;border-radius:0 0 12px 12px;">
            {body_html}
        </div>
        <p style="text-align:center;color:#94a3b8;font-size:12px;margin-top:20px;">
            ShopBrands &middot; You are receiving this email because you placed an order with us.
        </p>
    </div>
</body>
</html>"""


def detail_box(rows: Dict[str, str]) -> str:
    """Render a key/value summary box."""
    cells = "".join(
        f'<tr><td style="padding:6px 0;color:#64748b;">{escape(k)}</td>'
        f'<td style="padding:6px 0;text-align:right;font-weight:600;">{escape(v)}</td></tr>'
        for k, v in rows.items()
    )
    return (
        '<table style="width:100%;border-collapse:collapse;background:#f8fafc;'
        f'border-radius:8px;padding:12px;margin:16px 0;">{cells}</table>'
    )


def _name(context: dict) -> str:
    return context.get("customer_name") or "there"


def _money(context: dict, key: str) -> str:
    return format_amount(context.get(key) or 0, context.get("currency", "eur"))


def order_confirmation(context: dict) -> Rendered:
    items = context.get("items", [])
    currency = context.get("currency", "eur")
    items_text = "\n".join(
        f"  - {i['name']} x{i['quantity']} - {format_amount(i['price'], currency)}"
        for i in items
    )
    items_html = "".join(
        f"<tr><td>{escape(i['name'])}</td>"
        f"<td style='text-align:center'>{i['quantity']}</td>"
        f"<td style='text-align:right'>{format_amount(i['price'], currency)}</td></tr>"
        for i in items
    )
    discount = context.get("discount_amount") or 0

    text = f"""Hi {_name(context)},

Thank you for your order! We've received your payment and your order is now being processed.

Order #{context['order_id']}

Items:
{items_text}

{f"Discount: -{_money(context, 'discount_amount')}" if discount else ""}
Total paid: {_money(context, 'total_paid')}

Your invoice is attached to this email.

- The ShopBrands Team
"""
    html = wrap_html(
        title="Order confirmed",
        subtitle=f"Order #{context['order_id']}",
        body_html=(
            f"<p>Hi {escape(_name(context))},</p>"
            "<p>Thank you for your order! We've received your payment and your order "
            "is now being processed.</p>"
            f"<table style='width:100%;border-collapse:collapse;'>{items_html}</table>"
            + detail_box(
                {
                    **({"Discount": "-" + _money(context, "discount_amount")} if discount else {}),
                    "Total paid": _money(context, "total_paid"),
                }
            )
            + "<p>Your invoice is attached to this email.</p>"
        ),
    )
    return text, html


def order_shipped(context: dict) -> Rendered:
    tracking = context.get("tracking_number")
    tracking_line = f"Tracking number: {tracking}\n" if tracking else ""
    text = f"""Hi {_name(context)},

Good news! Your order #{context['order_id']} is on its way.
{tracking_line}
- The ShopBrands Team
"""
    rows = {"Order": f"#{context['order_id']}"}
    if tracking:
        rows["Tracking number"] = tracking
    html = wrap_html(
        title="Your order has shipped",
        body_html=f"<p>Hi {escape(_name(context))},</p>"
        "<p>Good news! Your order is on its way.</p>" + detail_box(rows),
    )
    return text, html


def order_delivered(context: dict) -> Rendered:
    text = f"""Hi {_name(context)},

Your order #{context['order_id']} has been delivered. We hope you enjoy it!

- The ShopBrands Team
"""
    html = wrap_html(
        title="Your order was delivered",
        header_gradient=GRADIENT_GREEN,
        body_html=f"<p>Hi {escape(_name(context))},</p>"
        f"<p>Your order #{escape(str(context['order_id']))} has been delivered. "
        "We hope you enjoy it!</p>",
    )
    return text, html


def order_cancelled(context: dict) -> Rendered:
    refunded = context.get("refunded_amount") or 0
    refund_line = (
        f"A refund of {_money(context, 'refunded_amount')} has been issued to your original payment method.\n"
        if refunded
        else ""
    )
    text = f"""Hi {_name(context)},

Your order #{context['order_id']} has been cancelled.
{refund_line}
- The ShopBrands Team
"""
    rows = {"Order": f"#{context['order_id']}"}
    if refunded:
        rows["Refunded"] = _money(context, "refunded_amount")
    html = wrap_html(
        title="Order cancelled",
        header_gradient=GRADIENT_AMBER,
        body_html=f"<p>Hi {escape(_name(context))},</p>"
        "<p>Your order has been cancelled.</p>" + detail_box(rows),
    )
    return text, html


def return_approved(context: dict) -> Rendered:
    text = f"""Hi {_name(context)},

Your return request for order #{context['order_id']} has been approved.
Please send the items back. Your refund will be issued once we receive them.

- The ShopBrands Team
"""
    html = wrap_html(
        title="Return approved",
        header_gradient=GRADIENT_GREEN,
        body_html=f"<p>Hi {escape(_name(context))},</p>"
        f"<p>Your return request for order #{escape(str(context['order_id']))} has been "
        "approved. Please send the items back. Your refund will be issued once we "
        "receive them.</p>",
    )
    return text, html


def return_rejected(context: dict) -> Rendered:
    text = f"""Hi {_name(context)},

Unfortunately your return request for order #{context['order_id']} has been rejected.
Reply to this email if you have any questions.

- The ShopBrands Team
"""
    html = wrap_html(
        title="Return request rejected",
        header_gradient=GRADIENT_AMBER,
        body_html=f"<p>Hi {escape(_name(context))},</p>"
        f"<p>Unfortunately your return request for order "
        f"#{escape(str(context['order_id']))} has been rejected. Reply to this email "
        "if you have any questions.</p>",
    )
    return text, html


def return_completed(context: dict) -> Rendered:
    text = f"""Hi {_name(context)},

We've received the items from order #{context['order_id']}.
A refund of {_money(context, 'refunded_amount')} has been issued to your original payment method.

- The ShopBrands Team
"""
    html = wrap_html(
        title="Return completed",
        header_gradient=GRADIENT_GREEN,
        body_html=f"<p>Hi {escape(_name(context))},</p>"
        "<p>We've received your returned items.</p>"
        + detail_box(
            {
                "Order": f"#{context['order_id']}",
                "Refunded": _money(context, "refunded_amount"),
            }
        ),
    )
    return text, html


TEMPLATES: Dict[str, Callable[[dict], Rendered]] = {
    "order_confirmation": order_confirmation,
    "order_shipped": order_shipped,
    "order_delivered": order_delivered,
    "order_cancelled": order_cancelled,
    "return_approved": return_approved,
    "return_rejected": return_rejected,
    "return_completed": return_completed,
}


def render(template: str, context: dict) -> Rendered:
    try:
        renderer = TEMPLATES[template]
    except KeyError:
        raise ValueError(f"Unknown email template: {template}") from None
    return renderer(context)
