from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class StalenessThresholds:
    """
    Time limits for one network at one evaluation instant.

    alerting_threshold: anything last seen before this is considered gone.
    closure_threshold: a device must have been back online since before this
    instant for its alert to close. It lies a small margin (at most
    max_margin_seconds, otherwise alerting_delay / margin_divisor) before the
    alerting threshold, so closing needs a little more uptime than opening
    needs downtime. The margin is subtracted, not added: with
    alerting_threshold + margin a device would clear its alert before it had
    even been up for the alerting delay.
    """
    now: datetime
    alerting_delay: int
    max_margin_seconds: int = 30
    margin_divisor: int = 10

    @property
    def margin(self) -> timedelta:
        return timedelta(seconds=min(self.max_margin_seconds, self.alerting_delay / self.margin_divisor))

    @property
    def alerting_threshold(self) -> datetime:
        return self.now - timedelta(seconds=self.alerting_delay)

    @property
    def closure_threshold(self) -> datetime:
        return self.alerting_threshold - self.margin

    def is_stale(self, last_seen: Optional[datetime]) -> bool:
        return last_seen is None or last_seen < self.alerting_threshold

    def has_settled(self, since: Optional[datetime]) -> bool:
        return since is not None and since < self.closure_threshold
