import logging
from dataclasses import dataclass, field
from typing import List

from models import AlertType, DeviceOperationMode
from thresholds.rules import StalenessThresholds
from utils.helpers import timed, utcnow

logger = logging.getLogger(__name__)


@dataclass
class NetworkEvaluation:
    network_name: str
    network_down: bool = False
    opened: List[str] = field(default_factory=list)
    closed: List[str] = field(default_factory=list)


@dataclass
class EvaluationSummary:
    evaluated: List[NetworkEvaluation] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class ThresholdEvaluator:
    """
    Decides, once per scheduler tick, which networks and devices stopped
    reporting and which alerts can be closed.
    """

    def __init__(self, store, alert_manager, max_margin_seconds=30, margin_divisor=10, clock=utcnow):
        self.store = store
        self.alert_manager = alert_manager
        self.max_margin_seconds = max_margin_seconds
        self.margin_divisor = margin_divisor
        self.clock = clock

    @timed('evaluate_all')
    def evaluate_all(self, now=None):
        """Evaluate every network, each in its own unit of work."""
        now = now or self.clock()
        summary = EvaluationSummary()

        for name in self.store.find_network_names():
            try:
                with self.alert_manager.unit_of_work(name):
                    network = self.store.find_network(name)
                    if network is None:
                        continue
                    summary.evaluated.append(self.evaluate_network(network, now))
            except Exception:
                logger.exception("Evaluation of network %s failed, continuing with the rest", name)
                summary.failed.append(name)

        return summary

    def thresholds_for(self, network, now):
        return StalenessThresholds(
            now=now,
            alerting_delay=network.alerting_delay,
            max_margin_seconds=self.max_margin_seconds,
            margin_divisor=self.margin_divisor,
        )

    def evaluate_network(self, network, now):
        evaluation = NetworkEvaluation(network_name=network.name)
        thresholds = self.thresholds_for(network, now)

        if thresholds.is_stale(network.last_seen):
            # No reliable signal about devices while the network itself is silent
            evaluation.network_down = True
            if network.active_alert_id is None:
                self.alert_manager.open(AlertType.NETWORK_DOWN, network, None, None)
                evaluation.opened.append(network.name)
            return evaluation

        if network.active_alert_id is not None:
            self.alert_manager.close(network, None, None)
            network.back_online_time = now
            self.store.save_network(network)
            evaluation.closed.append(network.name)

        for device in self.store.find_devices(network):
            self._evaluate_device(network, device, thresholds, evaluation)

        return evaluation

    def _evaluate_device(self, network, device, thresholds, evaluation):
        mode = device.operation_mode

        if mode == DeviceOperationMode.UNAUTHORIZED:
            if device.active_alert_id is not None and thresholds.is_stale(device.last_seen):
                self.alert_manager.close(network, device, None)
                evaluation.closed.append(device.mac_address)

        elif mode == DeviceOperationMode.AUTHORIZED:
            if device.active_alert_id is not None:
                self.alert_manager.close(network, device, "device is now authorized")
                evaluation.closed.append(device.mac_address)

        elif mode == DeviceOperationMode.ALWAYS_ON:
            if thresholds.is_stale(device.last_seen):
                if device.active_alert_id is None:
                    self.alert_manager.open(AlertType.DEVICE_DOWN, network, device, None)
                    evaluation.opened.append(device.mac_address)
            elif device.active_alert_id is not None:
                latest = self.store.find_latest_history(device)
                if latest is not None and latest.online and thresholds.has_settled(latest.timestamp):
                    self.alert_manager.close(network, device, None)
                    evaluation.closed.append(device.mac_address)
