import smtplib
import ssl
from email.message import EmailMessage

from fastapi.concurrency import run_in_threadpool

from inquiry_api.core.config import MailConfig
from inquiry_api.core.exceptions import DeliveryError, DeliveryTimeoutError
from inquiry_api.core.logger import get_logger
from inquiry_api.models.inquiry_request import Inquiry
from inquiry_api.services.email_composer import ComposedEmail, compose_inquiry_email

logger = get_logger(__name__)


def _single_line(value: str) -> str:
    # Header values cannot carry line breaks
    return " ".join(value.split())


def prepare_message(config: MailConfig, reply_to: str, email: ComposedEmail) -> EmailMessage:
    message = EmailMessage()
    message["From"] = config.sender
    message["To"] = config.recipient
    message["Reply-To"] = _single_line(reply_to)
    message["Subject"] = _single_line(email.subject)
    message.set_content(email.text)
    message.add_alternative(email.html, subtype="html")
    return message


def _open_session(config: MailConfig) -> smtplib.SMTP:
    if config.secure:
        return smtplib.SMTP_SSL(
            config.host,
            config.port,
            timeout=config.timeout,
            context=ssl.create_default_context(),
        )
    return smtplib.SMTP(config.host, config.port, timeout=config.timeout)


def send_message(config: MailConfig, message: EmailMessage) -> None:
    """Deliver ``message`` over one SMTP session. Blocking.

    Plain connections are upgraded with STARTTLS when the server offers it.
    Any transport failure is raised as :class:`DeliveryError`; timeouts as
    :class:`DeliveryTimeoutError`.
    """
    try:
        with _open_session(config) as client:
            if not config.secure:
                client.ehlo()
                if client.has_extn("starttls"):
                    client.starttls(context=ssl.create_default_context())
                    client.ehlo()
            client.login(config.user, config.password)
            client.send_message(message)
    except TimeoutError as exc:
        raise DeliveryTimeoutError(
            str(exc) or f"SMTP connection to {config.host}:{config.port} timed out"
        ) from exc
    except (smtplib.SMTPException, OSError, ValueError) as exc:
        raise DeliveryError(str(exc)) from exc


async def deliver_inquiry(config: MailConfig, inquiry: Inquiry) -> None:
    email = compose_inquiry_email(inquiry)
    message = prepare_message(config, inquiry.email, email)

    logger.info(
        f"Sending inquiry email to {config.recipient} via {config.host}:{config.port} "
        f"(secure={config.secure})"
    )
    await run_in_threadpool(send_message, config, message)
    logger.info(f"Inquiry email sent for {inquiry.full_name} ({inquiry.company_name})")
