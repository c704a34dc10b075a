import logging
import smtplib
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from services.errors import NotificationError

logger = logging.getLogger(__name__)


class EmailNotifier:
    """
    Sends alert notifications by email.

    With no SMTP server configured the message is written to the log instead,
    which keeps alerting usable on installations without a mail relay.
    """

    def __init__(self, smtp_server='', smtp_port=587, username='', password='',
                 use_starttls=True, timeout=10, from_email='netmon@localhost',
                 from_name='Network Monitor'):
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_starttls = use_starttls
        self.timeout = timeout
        self.from_email = from_email
        self.from_name = from_name

    @classmethod
    def from_config(cls, config):
        return cls(
            smtp_server=config.get('SMTP_SERVER', ''),
            smtp_port=config.get('SMTP_PORT', 587),
            username=config.get('SMTP_USERNAME', ''),
            password=config.get('SMTP_PASSWORD', ''),
            use_starttls=config.get('SMTP_STARTTLS', True),
            timeout=config.get('SMTP_TIMEOUT', 10),
            from_email=config.get('ALERT_FROM_EMAIL', 'netmon@localhost'),
            from_name=config.get('ALERT_FROM_NAME', 'Network Monitor'),
        )

    @property
    def enabled(self):
        return bool(self.smtp_server)

    def send(self, to_address, subject, body):
        """Send one plain text message. Raises NotificationError on failure."""
        if not self.enabled:
            logger.info("[MOCK EMAIL] To: %s | Subject: %s\n%s", to_address, subject, body)
            return

        try:
            msg = MIMEMultipart()
            msg['From'] = f'"{self.from_name}" <{self.from_email}>'
            msg['To'] = to_address
            msg['Subject'] = subject
            msg.attach(MIMEText(body, 'plain'))
            payload = msg.as_string()
        except (MessageError, ValueError) as e:
            raise NotificationError(f"Cannot build email to {to_address!r}: {e}") from e

        try:
            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=self.timeout) as server:
                if self.use_starttls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_email, [to_address], payload)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Failed to send email to {to_address}: {e}") from e

        logger.info("Alert email sent to %s", to_address)
