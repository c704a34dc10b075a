import logging

from flask import Flask

from config import Config
from extensions import db


def configure_logging(config):
    logging.basicConfig(
        filename=config.get('LOG_FILE') or None,
        level=getattr(logging, str(config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )


def create_app(test_config=None, notifier=None):
    app = Flask(__name__)
    app.config.from_object(Config)

    if test_config:
        app.config.update(test_config)

    # ---------------------------
    # Initialize extensions
    # ---------------------------
    db.init_app(app)

    # ---------------------------
    # SQLite tuning (WAL Mode + Busy Timeout)
    # ---------------------------
    from sqlalchemy import event
    with app.app_context():
        @event.listens_for(db.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            if app.config['SQLALCHEMY_DATABASE_URI'].startswith("sqlite"):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
                cursor.execute("PRAGMA busy_timeout=30000")  # 30s timeout
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    # ---------------------------
    # Database setup
    # ---------------------------
    with app.app_context():
        from models import AlertRecord, Device, Network, StatusHistoryEntry  # noqa: F401
        db.create_all()

    # ---------------------------
    # Core services
    # ---------------------------
    from services.alert_manager import AlertManager
    from services.email_service import EmailNotifier
    from services.network_locks import NetworkLockRegistry
    from services.presence_reconciler import PresenceReconciler
    from services.store import SqlAlchemyStore
    from thresholds.evaluator import ThresholdEvaluator

    store = SqlAlchemyStore(db.session, default_alerting_delay=app.config['DEFAULT_ALERTING_DELAY'])
    alert_manager = AlertManager(
        store,
        notifier or EmailNotifier.from_config(app.config),
        locks=NetworkLockRegistry(),
        retries=app.config['NOTIFY_RETRIES'],
        retry_delay=app.config['NOTIFY_RETRY_DELAY'],
    )
    app.extensions['alert_manager'] = alert_manager
    app.extensions['presence_reconciler'] = PresenceReconciler(
        store, alert_manager, ema_weight=app.config['REPORTING_INTERVAL_EMA_WEIGHT']
    )
    app.extensions['threshold_evaluator'] = ThresholdEvaluator(
        store,
        alert_manager,
        max_margin_seconds=app.config['HYSTERESIS_MAX_SECONDS'],
        margin_divisor=app.config['HYSTERESIS_DIVISOR'],
    )

    # ---------------------------
    # Register blueprints
    # ---------------------------
    from routes.ingest import ingest_bp
    app.register_blueprint(ingest_bp)

    return app


# ---------------------------
# Main entry point
# ---------------------------
if __name__ == "__main__":
    from services.scheduler import MonitoringScheduler

    app = create_app()
    configure_logging(app.config)
    logger = logging.getLogger("netmon")

    scheduler = MonitoringScheduler(
        app,
        app.extensions['threshold_evaluator'],
        interval_seconds=app.config['EVALUATOR_INTERVAL_SECONDS'],
        initial_delay_seconds=app.config['EVALUATOR_INITIAL_DELAY_SECONDS'],
    )
    try:
        logger.info("Starting network presence monitor on port 5001")
        scheduler.start_scheduled_monitoring()
        app.run(
            host="0.0.0.0",
            port=5001,
            debug=False,
            use_reloader=False
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        scheduler.stop_scheduled_monitoring()
