"""
Snapshot ingest API.
Accepts the scanner's "who is online" message for a topic and hands it to the
presence reconciler.
"""
import hmac
import logging

from flask import Blueprint, current_app, jsonify, request

from services.errors import ParseError
from services.snapshot_parser import parse_snapshot

logger = logging.getLogger(__name__)

ingest_bp = Blueprint('ingest_bp', __name__, url_prefix='/api/snapshots')


def _authorized():
    expected = current_app.config.get('API_KEY') or ''
    supplied = request.headers.get('X-API-Key', '')
    return bool(expected) and hmac.compare_digest(supplied, expected)


# ============================================================
# POST /api/snapshots/<topic>
# ============================================================
@ingest_bp.route('/<path:topic>', methods=['POST'])
def ingest_snapshot(topic):
    """
    Reconcile one snapshot.
    Body: { hostname, timestamp, devices: [{ ip, mac }, ...] }
    """
    if not _authorized():
        return jsonify({'error': 'Unauthorized'}), 401

    try:
        snapshot = parse_snapshot(topic, request.get_data())
    except ParseError as e:
        logger.warning("Dropping malformed snapshot from topic %s: %s", topic, e)
        return jsonify({'error': str(e)}), 400

    reconciler = current_app.extensions['presence_reconciler']
    try:
        result = reconciler.handle_snapshot(snapshot)
    except Exception:
        logger.exception("Error processing snapshot from topic %s", topic)
        return jsonify({'error': 'Snapshot processing failed'}), 500

    return jsonify(result.to_dict())
