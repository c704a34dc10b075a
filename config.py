import os


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///netmon.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Ingest Settings
    API_KEY = os.environ.get('API_KEY', 'change-this-api-key')

    # Evaluator Settings
    EVALUATOR_INTERVAL_SECONDS = int(os.environ.get('EVALUATOR_INTERVAL_SECONDS', 20))
    EVALUATOR_INITIAL_DELAY_SECONDS = int(os.environ.get('EVALUATOR_INITIAL_DELAY_SECONDS', 30))
    DEFAULT_ALERTING_DELAY = int(os.environ.get('DEFAULT_ALERTING_DELAY', 300))  # seconds
    HYSTERESIS_MAX_SECONDS = int(os.environ.get('HYSTERESIS_MAX_SECONDS', 30))
    HYSTERESIS_DIVISOR = int(os.environ.get('HYSTERESIS_DIVISOR', 10))
    REPORTING_INTERVAL_EMA_WEIGHT = float(os.environ.get('REPORTING_INTERVAL_EMA_WEIGHT', 0.2))

    # Email Settings (empty SMTP_SERVER = log instead of send)
    SMTP_SERVER = os.environ.get('SMTP_SERVER', '')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', 587))
    SMTP_USERNAME = os.environ.get('SMTP_USERNAME', '')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
    SMTP_STARTTLS = _env_bool('SMTP_STARTTLS', True)
    SMTP_TIMEOUT = int(os.environ.get('SMTP_TIMEOUT', 10))
    ALERT_FROM_EMAIL = os.environ.get('ALERT_FROM_EMAIL', 'netmon@localhost')
    ALERT_FROM_NAME = os.environ.get('ALERT_FROM_NAME', 'Network Monitor')
    NOTIFY_RETRIES = int(os.environ.get('NOTIFY_RETRIES', 2))
    NOTIFY_RETRY_DELAY = float(os.environ.get('NOTIFY_RETRY_DELAY', 1.0))  # seconds

    # Logging Settings
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')
