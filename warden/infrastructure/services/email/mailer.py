"""SMTP mailer for account lifecycle notifications.

Messages are rendered from the package template bundle and sent as
multipart/alternative: the plain text body first, the HTML body as the
alternative. Delivery is retried a fixed number of times with a fixed wait,
sequentially on the calling task.
"""

import asyncio
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Awaitable, Callable, Mapping, Optional

import aiosmtplib
from structlog import get_logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_fixed

from warden.core.config.email import EmailSettings
from warden.core.exceptions import EmailDeliveryError, EmailServiceError
from warden.core.logging import mask_email
from warden.domain.interfaces.email import IMailer
from warden.infrastructure.services.email.templates import RenderedMessage, TemplateBundle, load_template_bundle

logger = get_logger(__name__)

TRANSIENT_ERRORS = (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError)


class Mailer(IMailer):
    """Renders named templates and delivers them over SMTP with bounded retry.

    When every attempt fails the outcome depends on EMAIL_STRICT_DELIVERY:
    by default the failure is logged and `send` returns normally; in strict
    mode `EmailDeliveryError` is raised with the last transport error.

    Attributes:
        settings: Email configuration settings
        bundle: Template bundle, loaded once per process by default
        sender: Formatted From address
    """

    def __init__(
        self,
        settings: EmailSettings,
        bundle: Optional[TemplateBundle] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.settings = settings
        self.bundle = bundle or load_template_bundle()
        self.sender = formataddr((settings.FROM_NAME, str(settings.FROM_EMAIL)))
        self._sleep = sleep or asyncio.sleep

        if settings.SMTP_USE_TLS and settings.SMTP_USE_SSL:
            logger.error("Email configuration enables both STARTTLS and implicit TLS")
            raise EmailServiceError(
                "SMTP_USE_TLS and SMTP_USE_SSL cannot both be enabled",
                code="email_configuration_error",
            )

        try:
            settings.validate_smtp_config()
        except ValueError as e:
            logger.warning("Email configuration validation warning", error=str(e))

        logger.info(
            "Mailer initialized",
            test_mode=settings.EMAIL_TEST_MODE,
            strict_delivery=settings.EMAIL_STRICT_DELIVERY,
            smtp_host=settings.SMTP_HOST,
        )

    async def send(self, recipient: str, template_name: str, data: Mapping[str, Any]) -> None:
        rendered = self.bundle.render(template_name, data)
        message = self.compose(recipient, rendered)

        if self.settings.EMAIL_TEST_MODE:
            logger.info(
                "Email sent in test mode",
                to_email=mask_email(recipient),
                template=template_name,
                subject=rendered.subject,
                text_length=len(rendered.plain_body),
                html_length=len(rendered.html_body),
            )
            return

        await self._deliver(message, recipient, template_name)

    def compose(self, recipient: str, rendered: RenderedMessage) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = rendered.subject
        message.set_content(rendered.plain_body)
        message.add_alternative(rendered.html_body, subtype="html")
        return message

    async def _deliver(self, message: EmailMessage, recipient: str, template_name: str) -> None:
        attempts = self.settings.EMAIL_SEND_ATTEMPTS
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self.settings.EMAIL_RETRY_DELAY_SECONDS),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    await self._transmit(message)
        except TRANSIENT_ERRORS as e:
            if self.settings.EMAIL_STRICT_DELIVERY:
                logger.error(
                    "Email delivery failed",
                    to_email=mask_email(recipient),
                    template=template_name,
                    attempts=attempts,
                    error=str(e),
                )
                raise EmailDeliveryError(
                    f"Email delivery failed after {attempts} attempts",
                    attempts=attempts,
                    last_error=e,
                ) from e

            logger.error(
                "Email delivery failed, reporting success (lenient delivery)",
                to_email=mask_email(recipient),
                template=template_name,
                attempts=attempts,
                error=str(e),
            )
            return

        logger.info("Email sent successfully", to_email=mask_email(recipient), template=template_name)

    async def _transmit(self, message: EmailMessage) -> None:
        password = self.settings.SMTP_PASSWORD.get_secret_value() if self.settings.SMTP_PASSWORD else None
        await aiosmtplib.send(
            message,
            hostname=self.settings.SMTP_HOST,
            port=self.settings.SMTP_PORT,
            username=self.settings.SMTP_USERNAME,
            password=password,
            use_tls=self.settings.SMTP_USE_SSL,
            start_tls=self.settings.SMTP_USE_TLS,
            timeout=self.settings.SMTP_TIMEOUT_SECONDS,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Email delivery attempt failed, retrying",
            attempt=retry_state.attempt_number,
            error=str(error),
        )
