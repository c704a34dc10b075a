"""
Error kinds raised by the presence monitoring core.

ValidationError  - one snapshot entry is unusable (blank MAC); skip it.
ParseError       - an inbound message could not be turned into a snapshot.
ConflictError    - an alert was opened while one is already open for the subject.
NotFoundError    - an alert was closed while none is open for the subject.
NotificationError - the notifier could not deliver a message.
"""


class MonitorError(Exception):
    """Base class for all monitoring core errors."""


class ValidationError(MonitorError):
    pass


class ParseError(MonitorError):
    pass


class ConflictError(MonitorError):
    def __init__(self, subject, alert_id):
        self.subject = subject
        self.alert_id = alert_id
        super().__init__(f"Alert {alert_id} is already open for {subject}")


class NotFoundError(MonitorError):
    def __init__(self, subject):
        self.subject = subject
        super().__init__(f"No open alert for {subject}")


class NotificationError(MonitorError):
    pass
