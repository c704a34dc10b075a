from extensions import db


class StatusHistoryEntry(db.Model):
    """Append-only log of device online/offline flips."""
    __tablename__ = 'device_status_history'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    network_id = db.Column(db.Integer, db.ForeignKey('network.id'), nullable=False)
    device_id = db.Column(db.Integer, db.ForeignKey('device.id'), nullable=False)
    ip_address = db.Column(db.String(45), nullable=True)
    online = db.Column(db.Boolean, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False)

    device = db.relationship('Device', foreign_keys=[device_id])

    __table_args__ = (
        db.Index('idx_status_history_device_ts', 'device_id', 'timestamp'),
        db.Index('idx_status_history_network', 'network_id'),
    )

    def __repr__(self):
        return f'<StatusHistoryEntry device={self.device_id} online={self.online}>'
