import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from services.errors import ParseError
from utils.helpers import to_naive_utc

logger = logging.getLogger(__name__)

# fromisoformat before 3.11 only takes 3 or 6 fraction digits
_FRACTION = re.compile(r"\.(\d+)")


@dataclass
class ReportedDevice:
    mac: Optional[str]
    ip: Optional[str]


@dataclass
class Snapshot:
    """One 'who is online' message for a network."""
    network_name: str
    timestamp: datetime
    hostname: Optional[str] = None
    devices: List[ReportedDevice] = field(default_factory=list)


def extract_network_name(topic):
    """
    Take the segment just before the last one:
    'netmon/site/MaliGrdi/scan' -> 'MaliGrdi'.
    Topics with fewer than two segments are used whole.
    """
    right = topic.rfind('/')
    if right > 0:
        left = topic.rfind('/', 0, right)
        return topic[left + 1:right]

    logger.warning("Topic does not follow expected format, using entire topic as network name: %s", topic)
    return topic


def parse_timestamp(value):
    if not isinstance(value, str) or not value.strip():
        raise ParseError(f"Invalid snapshot timestamp: {value!r}")
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    text = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text, count=1)
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise ParseError(f"Invalid snapshot timestamp: {value!r}") from e


def parse_snapshot(topic, payload):
    """
    Turn a raw message into a Snapshot.

    Args:
        topic: Originating topic/path, used to derive the network name.
        payload: JSON text/bytes, or an already decoded dict.

    Raises:
        ParseError: The payload is not a well-formed snapshot.
    """
    if not topic or not topic.strip():
        raise ParseError("Snapshot topic is empty")

    data = payload
    if isinstance(payload, (bytes, bytearray)):
        try:
            data = payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ParseError("Snapshot payload is not valid UTF-8") from e
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse JSON message: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Snapshot payload must be a JSON object")

    devices = data.get('devices')
    if devices is None:
        devices = []
    if not isinstance(devices, list):
        raise ParseError("'devices' must be a list")

    reported = []
    for entry in devices:
        if not isinstance(entry, dict):
            raise ParseError(f"Device entry must be an object, got {entry!r}")
        mac, ip = entry.get('mac'), entry.get('ip')
        for key, value in (('mac', mac), ('ip', ip)):
            if value is not None and not isinstance(value, str):
                raise ParseError(f"Device {key} must be a string, got {value!r}")
        reported.append(ReportedDevice(mac=mac, ip=ip))

    hostname = data.get('hostname')
    return Snapshot(
        network_name=extract_network_name(topic.strip()),
        timestamp=parse_timestamp(data.get('timestamp')),
        hostname=hostname if isinstance(hostname, str) else None,
        devices=reported,
    )
