"""
Email Service for Game Night

Sends the two account e-mails the application needs:
- invitations (accounts are invite-only)
- password resets
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app

logger = logging.getLogger(__name__)


class EmailService:
    """Handles all email sending functionality"""

    def __init__(self):
        self.smtp_server = current_app.config.get("MAIL_SERVER") or "localhost"
        self.smtp_port = current_app.config.get("MAIL_PORT", 587)
        self.smtp_username = current_app.config.get("MAIL_USERNAME")
        self.smtp_password = current_app.config.get("MAIL_PASSWORD")
        self.from_email = current_app.config.get("FROM_EMAIL") or "noreply@gamenight.local"
        self.from_name = current_app.config.get("FROM_NAME", "Game Night")
        self.use_tls = current_app.config.get("MAIL_USE_TLS", True)

    def _create_message(self, to_email, subject, body_text, body_html=None):
        """Create email message"""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(body_text, "plain"))

        if body_html:
            msg.attach(MIMEText(body_html, "html"))

        return msg

    def _send_email(self, message):
        """Send email message; returns False instead of raising"""
        if not self.smtp_username or not self.smtp_password:
            logger.warning("SMTP credentials not configured. Email not sent.")
            return False

        try:
            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.from_email, [message["To"]], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {message['To']}: {str(e)}")
            return False

        logger.info(f"Email sent successfully to {message['To']}")
        return True

    def _send_link_email(self, user, subject, intro, action, link, expiry_hours):
        """One-button email: a greeting, a sentence, a link and its expiry"""
        expiry = f"This link will expire in {expiry_hours} hours."

        body_text = "\n\n".join(
            [f"Hi {user.full_name},", intro, f"{action}:\n{link}", expiry]
        )
        body_html = (
            f"<html><body>"
            f"<h2>{subject}</h2>"
            f"<p>Hi {user.full_name},</p>"
            f"<p>{intro}</p>"
            f'<p><a href="{link}">{action}</a></p>'
            f"<p><small>{expiry}</small></p>"
            f"</body></html>"
        )

        message = self._create_message(user.email, subject, body_text, body_html)
        return self._send_email(message)

    def send_invite_email(self, user, link, expiry_hours):
        """Invite a family member to set a password"""
        return self._send_link_email(
            user,
            subject=f"You're invited to {self.from_name}",
            intro="You've been added to the family game-night leaderboard.",
            action="Set your password",
            link=link,
            expiry_hours=expiry_hours,
        )

    def send_password_reset_email(self, user, link, expiry_hours=1):
        """Send password reset email"""
        return self._send_link_email(
            user,
            subject=f"Password reset - {self.from_name}",
            intro=(
                f"Someone asked to reset the password on your {self.from_name} "
                "account. If it wasn't you, ignore this email."
            ),
            action="Reset your password",
            link=link,
            expiry_hours=expiry_hours,
        )
