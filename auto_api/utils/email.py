import logging
import smtplib
from email.message import EmailMessage

from auto_api.config import settings

logger = logging.getLogger(__name__)


def send_mail(subject: str, body: str) -> bool:
    """
    Send an HTML mail to the configured admin address.
    With MAIL_ENABLED=false the mail is only written to the log.
    """
    if not settings.MAIL_ENABLED:
        logger.info(f"[MAIL] To={settings.MAIL_TO} | Subject={subject}")
        logger.debug(f"[MAIL] Body={body}")
        return True

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.MAIL_FROM
    msg["To"] = settings.MAIL_TO
    msg.set_content(body, subtype="html")

    with smtplib.SMTP(settings.MAIL_HOST, settings.MAIL_PORT, timeout=10) as smtp:
        smtp.send_message(msg)
    logger.debug(f"[MAIL] sent: {subject}")
    return True


def send_new_auto_email(auto_id: int, modell: str) -> bool:
    """Best effort: a failing mail server is logged and never fails the create."""
    subject = f"New auto {auto_id}"
    body = f"The auto with model <strong>{modell}</strong> has been created"
    try:
        return send_mail(subject, body)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(f"[MAIL] could not send '{subject}': {e}")
        return False
