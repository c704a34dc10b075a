from extensions import db
from models.enums import CodedEnum, DeviceOperationMode
from utils.helpers import utcnow


class Device(db.Model):
    __tablename__ = 'device'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    network_id = db.Column(db.Integer, db.ForeignKey('network.id'), nullable=False)
    name = db.Column(db.String(200), nullable=True)
    mac_address = db.Column(db.String(17), nullable=False)
    ip_address = db.Column(db.String(45), nullable=True)  # 45 chars for IPv6
    operation_mode = db.Column(
        'device_operation_mode_id',
        CodedEnum(DeviceOperationMode),
        nullable=False,
        default=DeviceOperationMode.UNAUTHORIZED,
    )
    online = db.Column(db.Boolean, nullable=False, default=False)
    first_seen = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_seen = db.Column(db.DateTime, nullable=False, default=utcnow)
    active_alert_id = db.Column(db.Integer, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('network_id', 'mac_address', name='uq_device_network_mac'),
    )

    def name_or_unknown(self):
        return self.name if self.name and self.name.strip() else 'unknown'

    def basic_info(self):
        return f'{self.name_or_unknown()} (mac: {self.mac_address}, ip: {self.ip_address})'

    def __repr__(self):
        return f'<Device {self.mac_address} ({self.ip_address})>'

    def to_dict(self):
        return {
            'id': self.id,
            'network_id': self.network_id,
            'name': self.name,
            'mac_address': self.mac_address,
            'ip_address': self.ip_address,
            'operation_mode': self.operation_mode.name if self.operation_mode is not None else None,
            'online': self.online,
            'first_seen': self.first_seen.isoformat() if self.first_seen else None,
            'last_seen': self.last_seen.isoformat() if self.last_seen else None,
            'active_alert_id': self.active_alert_id,
        }
