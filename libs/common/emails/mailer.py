"""
Mailer used by services to send a named order email.

Services depend on the ``send_mail`` contract only, so tests can inject a
recording fake.
"""

from typing import Optional, Sequence

from libs.common.emails.core import Attachment, send_email
from libs.common.emails.templates import render


class Mailer:
    async def send_mail(
        self,
        to: str,
        subject: str,
        template: str,
        context: dict,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> bool:
        text, html = render(template, context)
        return await send_email(
            to_email=to,
            subject=subject,
            body=text,
            html_body=html,
            attachments=attachments,
        )
