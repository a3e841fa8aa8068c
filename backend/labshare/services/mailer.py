import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from labshare.core.config import Settings
from labshare.core.logging import get_logger, redact_email

logger = get_logger(__name__)

LOGIN_CODE_SUBJECT = "Your Login Code - Lab Sharing"


class CodeMailer(Protocol):
    def send_login_code(self, to_email: str, code: str, ttl_minutes: int) -> bool: ...


def render_login_code(code: str, ttl_minutes: int) -> tuple[str, str]:
    text = (
        f"Your verification code is: {code}\n\n"
        f"This code will expire in {ttl_minutes} minutes.\n"
        "If you didn't request this code, please ignore this email."
    )
    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
          <h2 style="color: #333;">Your Login Code</h2>
          <p style="color: #666; font-size: 16px;">Your verification code is:</p>
          <div style="background-color: #f5f5f5; padding: 20px; text-align: center; margin: 20px 0; border-radius: 8px;">
            <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #000;">{code}</span>
          </div>
          <p style="color: #666; font-size: 14px;">This code will expire in {ttl_minutes} minutes.</p>
          <p style="color: #999; font-size: 12px; margin-top: 30px;">If you didn't request this code, please ignore this email.</p>
        </div>
    """
    return text, html


class SMTPMailer:
    """Delivers login codes over SMTP.

    Without SMTP configuration the message is only logged (body withheld) in
    dev, and delivery is reported as failed everywhere else.
    """

    def __init__(
        self,
        *,
        smtp_host: str | None = None,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        smtp_use_tls: bool = True,
        timeout_seconds: int = 10,
        from_email: str | None = None,
        from_name: str = "LabShare",
        dev_mode: bool = False,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.timeout_seconds = timeout_seconds
        self.from_email = from_email or smtp_user
        self.from_name = from_name
        self.dev_mode = dev_mode

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPMailer":
        return cls(
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=settings.SMTP_USER,
            smtp_password=settings.SMTP_PASSWORD,
            smtp_use_tls=settings.SMTP_USE_TLS,
            timeout_seconds=settings.SMTP_TIMEOUT_SECONDS,
            from_email=settings.MAIL_FROM,
            from_name=settings.MAIL_FROM_NAME,
            dev_mode=settings.ENV == "dev",
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)

    def send_login_code(self, to_email: str, code: str, ttl_minutes: int) -> bool:
        if not self.is_configured:
            if self.dev_mode:
                logger.info("email_dev_mode", to=redact_email(to_email), subject=LOGIN_CODE_SUBJECT)
                return True
            logger.error("email_not_configured")
            return False

        text_body, html_body = render_login_code(code, ttl_minutes)
        msg = MIMEMultipart("alternative")
        msg["Subject"] = LOGIN_CODE_SUBJECT
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_seconds) as server:
                if self.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.from_email, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("email_send_failed", to=redact_email(to_email), error=type(exc).__name__)
            return False

        logger.info("email_sent", to=redact_email(to_email), subject=LOGIN_CODE_SUBJECT)
        return True
