"""
ShopBrands Email Package.

Modules:
- core: Base send_email function (SMTP, optional attachments)
- templates: Order lifecycle email templates
- mailer: Mailer used by services to send a named template
"""
