import logging
from dataclasses import dataclass

from models import AlertType, DeviceOperationMode
from services.errors import ConflictError, NotFoundError, ValidationError
from utils.helpers import normalize_mac, timed

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    network_name: str
    created: int = 0
    came_online: int = 0
    still_online: int = 0
    went_offline: int = 0
    skipped: int = 0
    failed: int = 0
    alerts_opened: int = 0

    def to_dict(self):
        return {
            'network': self.network_name,
            'created': self.created,
            'came_online': self.came_online,
            'still_online': self.still_online,
            'went_offline': self.went_offline,
            'skipped': self.skipped,
            'failed': self.failed,
            'alerts_opened': self.alerts_opened,
        }


class PresenceReconciler:
    """
    Applies one snapshot of currently visible devices to the stored state.

    Scenarios per reported device:
    1. unknown MAC      -> new UNAUTHORIZED device, online history entry, alert
    2. known, was off   -> online history entry (and alert if UNAUTHORIZED)
    3. known, was on    -> nothing recorded
    Known devices missing from the snapshot go offline. Alerting for missing
    devices is left to the ThresholdEvaluator.
    """

    def __init__(self, store, alert_manager, ema_weight=0.2):
        self.store = store
        self.alert_manager = alert_manager
        self.ema_weight = ema_weight

    def handle_snapshot(self, snapshot):
        reported = [(device.mac, device.ip) for device in snapshot.devices]
        return self.reconcile(snapshot.network_name, snapshot.timestamp, reported)

    @timed('reconcile')
    def reconcile(self, network_name, snapshot_timestamp, reported_devices):
        """
        Args:
            network_name: Name of the reporting network (created if unknown).
            snapshot_timestamp: Naive UTC time of the snapshot.
            reported_devices: Iterable of (mac, ip) pairs.

        Returns:
            ReconcileResult with per-snapshot counters.
        """
        with self.alert_manager.unit_of_work(network_name):
            result = self._reconcile(network_name, snapshot_timestamp, reported_devices)
        logger.info("Snapshot for %s processed: %s", network_name, result.to_dict())
        return result

    def _reconcile(self, network_name, timestamp, reported_devices):
        result = ReconcileResult(network_name=network_name)

        network = self.store.find_or_create_network(network_name, timestamp)
        self._update_reporting_interval(network, timestamp)
        network.last_seen = timestamp
        self.store.save_network(network)

        known = {device.mac_address: device for device in self.store.find_devices(network)}
        previously_online = {entry.device_id for entry in self.store.find_online_history(network)}
        seen = set()

        for raw_mac, ip in reported_devices:
            try:
                mac = self._validated_mac(raw_mac, network)
            except ValidationError as e:
                logger.warning("%s", e)
                result.skipped += 1
                continue

            if mac in seen:
                logger.warning("Device %s reported twice on network %s, ignoring repeat", mac, network.name)
                result.skipped += 1
                continue
            seen.add(mac)

            try:
                device = known.get(mac)
                if device is None:
                    self._register_new_device(network, mac, ip, timestamp, result)
                else:
                    self._refresh_known_device(network, device, ip, timestamp,
                                               device.id in previously_online, result)
            except (ConflictError, NotFoundError) as e:
                logger.error("Alert transition failed for %s on %s: %s", mac, network.name, e)
                result.failed += 1

        for mac, device in known.items():
            if mac not in seen:
                self._mark_offline(network, device, timestamp, device.id in previously_online, result)

        return result

    # ---------------------------
    # Per-device handling
    # ---------------------------
    @staticmethod
    def _validated_mac(raw_mac, network):
        mac = normalize_mac(raw_mac)
        if not mac:
            raise ValidationError(f"Device with missing or empty MAC address reported on network: {network.name}")
        return mac

    def _register_new_device(self, network, mac, ip, timestamp, result):
        device = self.store.create_device(network, mac, ip, timestamp)
        result.created += 1
        logger.info("New device detected: %s on %s", device.basic_info(), network.name)

        self.store.append_history(network, device, ip, True, timestamp)
        self.alert_manager.open(AlertType.DEVICE_UNAUTHORIZED, network, device,
                                "device detected for the first time")
        result.alerts_opened += 1

    def _refresh_known_device(self, network, device, ip, timestamp, was_online, result):
        device.online = True
        device.last_seen = timestamp
        device.ip_address = ip
        self.store.save_device(device)

        if was_online:
            logger.debug("Device is still online: %s on %s", device.basic_info(), network.name)
            result.still_online += 1
        else:
            if device.operation_mode == DeviceOperationMode.UNAUTHORIZED:
                logger.info("Device %s is not allowed on network %s but is online!",
                            device.basic_info(), network.name)
            else:
                logger.info("Device came online: %s on %s", device.basic_info(), network.name)
            self.store.append_history(network, device, ip, True, timestamp)
            result.came_online += 1

        if device.operation_mode == DeviceOperationMode.UNAUTHORIZED and device.active_alert_id is None:
            self.alert_manager.open(AlertType.DEVICE_UNAUTHORIZED, network, device,
                                    "device was seen before")
            result.alerts_opened += 1

    def _mark_offline(self, network, device, timestamp, was_online, result):
        device.online = False
        self.store.save_device(device)

        if was_online:
            logger.info("Device went offline: %s on %s", device.basic_info(), network.name)
            # Recorded with the last known IP
            self.store.append_history(network, device, device.ip_address, False, timestamp)
            result.went_offline += 1

    def _update_reporting_interval(self, network, timestamp):
        previous = network.last_seen
        if previous is None or timestamp <= previous:
            return
        gap = (timestamp - previous).total_seconds()
        ema = network.reporting_interval_ema or 0
        if ema <= 0:
            updated = gap
        else:
            updated = ema + (gap - ema) * self.ema_weight
        network.reporting_interval_ema = int(round(updated))
