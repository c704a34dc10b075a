import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass

from models import AlertRecord
from services.errors import ConflictError, NotFoundError, NotificationError
from services.network_locks import NetworkLockRegistry
from utils.helpers import format_duration, format_timestamp, utcnow

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    recipient: str
    subject: str
    body: str


class AlertManager:
    """
    The only component that opens and closes alerts.

    Lifecycle:
    - open() refuses to run while the (network, device) key has an open alert
    - close() refuses to run while it has none
    - both keep Network/Device.active_alert_id in step with the alert rows
    - notifications are held back until the unit of work commits, then sent
      with a bounded number of retries; a failed send never touches the store
    """

    def __init__(self, store, notifier, locks=None, retries=2, retry_delay=1.0, clock=utcnow):
        self.store = store
        self.notifier = notifier
        self.locks = locks or NetworkLockRegistry()
        self.retries = retries
        self.retry_delay = retry_delay
        self.clock = clock
        self._local = threading.local()

    # ---------------------------
    # Unit of work
    # ---------------------------
    @contextmanager
    def unit_of_work(self, network_name):
        """
        Serialize work on one network and run it as one transaction.
        Queued notifications go out after the commit, or are dropped on rollback.
        """
        with self.locks.hold(network_name):
            self._local.pending = []
            try:
                yield
                self.store.commit()
            except Exception:
                self.store.rollback()
                self._local.pending = None
                raise
            pending, self._local.pending = self._local.pending, None
        self.dispatch(pending)

    # ---------------------------
    # Alert transitions
    # ---------------------------
    def open(self, alert_type, network, device=None, message=None):
        subject = self.describe_subject(network, device)
        latest = self.store.find_latest_alert(network, device)
        if latest is not None and latest.is_open:
            logger.error("Refusing to open %s alert for %s: alert %s is still open",
                         alert_type.name, subject, latest.id)
            raise ConflictError(subject, latest.id)

        alert = AlertRecord(
            timestamp=self.clock(),
            network_id=network.id,
            device_id=device.id if device is not None else None,
            alert_type=alert_type,
            message=message,
        )
        self.store.save_alert(alert)

        if device is None:
            network.active_alert_id = alert.id
            self.store.save_network(network)
        else:
            device.active_alert_id = alert.id
            self.store.save_device(device)

        logger.warning("Alert %s opened: %s for %s%s", alert.id, alert_type.name, subject,
                       f" ({message})" if message else "")
        self._queue(self._compose(network, device, alert, message, closed=False))
        return alert

    def close(self, network, device=None, message=None):
        subject = self.describe_subject(network, device)
        alert = self.store.find_latest_alert(network, device)
        if alert is None or not alert.is_open:
            logger.error("Refusing to close alert for %s: no open alert", subject)
            raise NotFoundError(subject)

        alert.closure_timestamp = self.clock()
        self.store.save_alert(alert)

        if device is None:
            network.active_alert_id = None
            self.store.save_network(network)
        else:
            device.active_alert_id = None
            self.store.save_device(device)

        duration = format_duration((alert.closure_timestamp - alert.timestamp).total_seconds())
        outgoing = f"{message}; alert was open for {duration}" if message else f"alert was open for {duration}"

        logger.warning("Alert %s closed: %s for %s, %s", alert.id, alert.alert_type.name, subject, outgoing)
        self._queue(self._compose(network, device, alert, outgoing, closed=True))
        return alert

    # ---------------------------
    # Notifications
    # ---------------------------
    @staticmethod
    def describe_subject(network, device):
        if device is None:
            return f"network {network.name}"
        return f"device {device.basic_info()} on {network.name}"

    def _compose(self, network, device, alert, message, closed):
        if not network.email_address:
            logger.debug("No recipient configured for %s, skipping notification", network.name)
            return None

        state = 'closed' if closed else 'triggered'
        target = device.basic_info() if device is not None else 'network'
        subject = f"[{network.name}] {target} alert {state}"

        when = alert.closure_timestamp if closed else alert.timestamp
        lines = [
            f"Alert {state} at {format_timestamp(when)} UTC",
            f"Type: {alert.alert_type.name}",
            f"Alert id: {alert.id}",
            f"Network: {network.name}",
        ]
        if device is not None:
            lines.append(f"Device: {device.basic_info()}")
        if message:
            lines.append(f"Message: {message}")

        return Notification(network.email_address, subject, "\n".join(lines))

    def _queue(self, notification):
        pending = getattr(self._local, 'pending', None)
        if pending is not None:
            if notification is not None:
                pending.append(notification)
            return
        # Outside a unit of work the transition is committed right away
        self.store.commit()
        if notification is not None:
            self.dispatch([notification])

    def dispatch(self, notifications):
        sent = 0
        for notification in notifications:
            if self._send_with_retry(notification):
                sent += 1
        return sent

    def _send_with_retry(self, notification):
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self.notifier.send(notification.recipient, notification.subject, notification.body)
                return True
            except NotificationError as e:
                logger.warning("Notification attempt %d/%d to %s failed: %s",
                               attempt, attempts, notification.recipient, e)
            except Exception:
                logger.exception("Notification attempt %d/%d to %s raised unexpectedly",
                                 attempt, attempts, notification.recipient)
            if attempt < attempts and self.retry_delay:
                time.sleep(self.retry_delay)
        logger.error("Giving up on notification to %s: %s", notification.recipient, notification.subject)
        return False
