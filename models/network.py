from sqlalchemy.orm import validates

from extensions import db
from utils.helpers import utcnow


class Network(db.Model):
    __tablename__ = 'network'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    first_seen = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_seen = db.Column(db.DateTime, nullable=False, default=utcnow)
    alerting_delay = db.Column(db.Integer, nullable=False, default=300)  # seconds
    email_address = db.Column(db.String(1000), nullable=True)
    active_alert_id = db.Column(db.Integer, nullable=True)
    configuration = db.Column(db.Text, nullable=False, default='{}')
    reporting_interval_ema = db.Column(db.Integer, nullable=False, default=0)  # seconds
    back_online_time = db.Column(db.DateTime, nullable=True)

    devices = db.relationship('Device', backref='network', lazy=True)

    @validates('email_address')
    def _trim_email(self, key, value):
        return value.strip() if value is not None else None

    def __repr__(self):
        return f'<Network {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'first_seen': self.first_seen.isoformat() if self.first_seen else None,
            'last_seen': self.last_seen.isoformat() if self.last_seen else None,
            'alerting_delay': self.alerting_delay,
            'email_address': self.email_address,
            'active_alert_id': self.active_alert_id,
            'reporting_interval_ema': self.reporting_interval_ema,
            'back_online_time': self.back_online_time.isoformat() if self.back_online_time else None,
        }
