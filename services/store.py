"""
Storage interface for the presence monitoring core.

The reconciler, evaluator and alert manager only talk to the database through
``PresenceStore``. ``SqlAlchemyStore`` implements it on the Flask-SQLAlchemy
scoped session, so each thread (request or scheduler) gets its own session.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import func

from models import AlertRecord, Device, DeviceOperationMode, Network, StatusHistoryEntry


class PresenceStore(ABC):
    """Read/write operations the core depends on."""

    @abstractmethod
    def find_network(self, name: str) -> Optional[Network]:
        ...

    @abstractmethod
    def create_network(self, name: str, timestamp) -> Network:
        ...

    def find_or_create_network(self, name: str, timestamp) -> Network:
        network = self.find_network(name)
        if network is None:
            network = self.create_network(name, timestamp)
        return network

    @abstractmethod
    def find_network_names(self) -> List[str]:
        ...

    @abstractmethod
    def find_devices(self, network: Network) -> List[Device]:
        ...

    @abstractmethod
    def find_device(self, network: Network, mac_address: str) -> Optional[Device]:
        ...

    @abstractmethod
    def create_device(self, network: Network, mac_address: str, ip_address: str, timestamp) -> Device:
        ...

    @abstractmethod
    def save_network(self, network: Network) -> None:
        ...

    @abstractmethod
    def save_device(self, device: Device) -> None:
        ...

    @abstractmethod
    def find_latest_alert(self, network: Network, device: Optional[Device]) -> Optional[AlertRecord]:
        ...

    @abstractmethod
    def save_alert(self, alert: AlertRecord) -> AlertRecord:
        """Persist the alert and make sure it has an id."""

    @abstractmethod
    def find_online_history(self, network: Network) -> List[StatusHistoryEntry]:
        """Latest history entry per device of the network, where that entry is online."""

    @abstractmethod
    def append_history(self, network: Network, device: Device, ip_address, online: bool, timestamp) -> StatusHistoryEntry:
        ...

    @abstractmethod
    def find_latest_history(self, device: Device) -> Optional[StatusHistoryEntry]:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...


class SqlAlchemyStore(PresenceStore):
    def __init__(self, session, default_alerting_delay=300):
        self.session = session
        self.default_alerting_delay = default_alerting_delay

    # ---------------------------
    # Networks
    # ---------------------------
    def find_network(self, name):
        return Network.query.filter_by(name=name).first()

    def create_network(self, name, timestamp):
        network = Network(
            name=name,
            first_seen=timestamp,
            last_seen=timestamp,
            alerting_delay=self.default_alerting_delay,
            configuration='{}',
            reporting_interval_ema=0,
        )
        self.session.add(network)
        self.session.flush()
        return network

    def find_network_names(self):
        rows = self.session.query(Network.name).order_by(Network.name).all()
        return [row[0] for row in rows]

    def save_network(self, network):
        self.session.add(network)
        self.session.flush()

    # ---------------------------
    # Devices
    # ---------------------------
    def find_devices(self, network):
        return Device.query.filter_by(network_id=network.id).order_by(Device.id).all()

    def find_device(self, network, mac_address):
        return Device.query.filter_by(network_id=network.id, mac_address=mac_address).first()

    def create_device(self, network, mac_address, ip_address, timestamp):
        device = Device(
            network_id=network.id,
            mac_address=mac_address,
            ip_address=ip_address,
            operation_mode=DeviceOperationMode.UNAUTHORIZED,
            online=True,
            first_seen=timestamp,
            last_seen=timestamp,
        )
        self.session.add(device)
        self.session.flush()
        return device

    def save_device(self, device):
        self.session.add(device)
        self.session.flush()

    # ---------------------------
    # Alerts
    # ---------------------------
    def find_latest_alert(self, network, device):
        query = AlertRecord.query.filter(AlertRecord.network_id == network.id)
        if device is None:
            query = query.filter(AlertRecord.device_id.is_(None))
        else:
            query = query.filter(AlertRecord.device_id == device.id)
        return query.order_by(AlertRecord.timestamp.desc(), AlertRecord.id.desc()).first()

    def save_alert(self, alert):
        self.session.add(alert)
        self.session.flush()
        return alert

    # ---------------------------
    # Status history
    # ---------------------------
    def find_online_history(self, network):
        ranked = (
            self.session.query(
                StatusHistoryEntry.id.label('entry_id'),
                func.row_number().over(
                    partition_by=StatusHistoryEntry.device_id,
                    order_by=(StatusHistoryEntry.timestamp.desc(), StatusHistoryEntry.id.desc()),
                ).label('rank'),
            )
            .filter(StatusHistoryEntry.network_id == network.id)
            .subquery()
        )
        return (
            StatusHistoryEntry.query
            .join(ranked, StatusHistoryEntry.id == ranked.c.entry_id)
            .filter(ranked.c.rank == 1, StatusHistoryEntry.online.is_(True))
            .order_by(StatusHistoryEntry.timestamp.desc())
            .all()
        )

    def append_history(self, network, device, ip_address, online, timestamp):
        entry = StatusHistoryEntry(
            network_id=network.id,
            device_id=device.id,
            ip_address=ip_address,
            online=online,
            timestamp=timestamp,
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def find_latest_history(self, device):
        return (
            StatusHistoryEntry.query
            .filter_by(network_id=device.network_id, device_id=device.id)
            .order_by(StatusHistoryEntry.timestamp.desc(), StatusHistoryEntry.id.desc())
            .first()
        )

    # ---------------------------
    # Transaction control
    # ---------------------------
    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()
