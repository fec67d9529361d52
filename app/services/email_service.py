"""Service for sending emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from urllib.parse import quote

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: str = "",
        smtp_port: int = 587,
        smtp_username: str = "",
        smtp_password: str = "",
        from_email: str = "",
        from_name: str = "True Feedback",
        frontend_base_url: str = "",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.from_name = from_name
        self.frontend_base_url = frontend_base_url.rstrip("/")
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_verification_email(self, to_email: str, username: str, verify_code: str) -> bool:
        """
        Send the one-time verification code to a newly registered account.

        Args:
            to_email: Recipient email
            username: Account username, used in the greeting
            verify_code: 6-digit verification code

        Returns:
            True if the message was handed to the SMTP server, or if SMTP is not
            configured and the code was written to the log instead. False if
            delivery was attempted and failed.
        """
        if not self.enabled:
            # Development mode: the log stands in for the mailbox
            logger.warning(
                "SMTP not configured; verification code for %s (%s): %s",
                username,
                to_email,
                verify_code,
            )
            return True

        subject = f"{self.from_name} | Verification code"
        verify_url = f"{self.frontend_base_url}/verify/{quote(username)}"
        html_body = self._render_verification_html(username, verify_code, verify_url)

        text_body = f"""
        Hello {username},

        Thank you for registering. Please use the following verification code
        to complete your registration:

        {verify_code}

        Enter it at {verify_url}. The code expires in one hour.

        If you did not request this code, please ignore this email.
        """

        return self._send_email(to_email, subject, html_body, text_body)

    def _render_verification_html(self, username: str, verify_code: str, verify_url: str) -> str:
        return f"""
        <html lang="en" dir="ltr">
            <head>
                <title>Verification Code</title>
            </head>
            <body style="font-family: Roboto, Verdana, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="display: none;">Here's your verification code: {verify_code}</div>

                <h2 style="color: #1e293b;">Hello {escape(username)},</h2>

                <p style="color: #475569; line-height: 1.6;">
                    Thank you for registering. Please use the following verification code
                    to complete your registration:
                </p>

                <p style="font-size: 20px; font-weight: bold; letter-spacing: 4px;">{verify_code}</p>

                <p style="color: #475569;">
                    Enter it on <a href="{escape(verify_url)}">the verification page</a>. It expires in one hour.
                </p>

                <p style="color: #888; font-size: 12px;">
                    If you did not request this code, please ignore this email.
                </p>
            </body>
        </html>
        """

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML body
            text_body: Plain text body

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            logger.info("Email \"%s\" sent to %s", subject, to_email)
            return True

        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False
