"""
Alert records.

A row is inserted when an alert opens and only ever updated to set
``closure_timestamp``. For one (network, device) key at most one row has
``closure_timestamp`` unset; ``device_id`` is NULL for network-level alerts.
"""
from extensions import db
from models.enums import AlertType, CodedEnum


class AlertRecord(db.Model):
    __tablename__ = 'alert'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    timestamp = db.Column(db.DateTime, nullable=False, index=True)
    network_id = db.Column(db.Integer, db.ForeignKey('network.id'), nullable=False)
    device_id = db.Column(db.Integer, db.ForeignKey('device.id'), nullable=True)
    alert_type = db.Column('alert_type_id', CodedEnum(AlertType), nullable=False)
    message = db.Column(db.String(500), nullable=True)
    closure_timestamp = db.Column(db.DateTime, nullable=True)

    network = db.relationship('Network', foreign_keys=[network_id])
    device = db.relationship('Device', foreign_keys=[device_id])

    __table_args__ = (
        db.Index('idx_alert_subject', 'network_id', 'device_id', 'timestamp'),
    )

    @property
    def is_open(self):
        return self.closure_timestamp is None

    def __repr__(self):
        state = 'open' if self.is_open else 'closed'
        return f'<AlertRecord {self.id} {self.alert_type.name if self.alert_type is not None else "?"} {state}>'

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'network_id': self.network_id,
            'device_id': self.device_id,
            'alert_type': self.alert_type.name if self.alert_type is not None else None,
            'message': self.message,
            'closure_timestamp': self.closure_timestamp.isoformat() if self.closure_timestamp else None,
        }
