import logging

import aiosmtplib
from email.message import EmailMessage
from app.core.config import settings

logger = logging.getLogger(__name__)


def is_demo_mode() -> bool:
    return not (settings.MAIL_FROM and settings.MAIL_PASSWORD)


async def send_email(to_email: str, subject: str, body: str):
    message = EmailMessage()
    message["From"] = settings.MAIL_FROM
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(body)

    await aiosmtplib.send(
        message,
        hostname=settings.MAIL_HOSTNAME,
        port=settings.MAIL_PORT,
        start_tls=True,
        username=settings.MAIL_FROM,
        password=settings.MAIL_PASSWORD,
    )


async def send_verification_code(to_email: str, code: str) -> bool:
    """
    Sends a verification code and returns True when it was delivered.

    False means demo mode: no mail credentials are configured or the SMTP
    server could not be reached, and the caller hands the code back directly.
    """
    if is_demo_mode():
        logger.info("Mail not configured, verification code for %s returned in demo mode", to_email)
        return False

    body = (
        f"Tu código de verificación de FindOne es: {code}\n\n"
        f"Este código expira en {settings.VERIFICATION_CODE_TTL_MINUTES} minutos.\n"
        "Si no solicitaste este código, ignora este email."
    )
    try:
        await send_email(to_email, "Tu código de verificación de FindOne", body)
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.warning("Could not send verification email to %s: %s", to_email, exc)
        return False
    return True
