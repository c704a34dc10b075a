"""
Persisted enumerations.

The integer values are stored in the database and must never be renumbered.
Every column holding one of these enums goes through ``CodedEnum`` so the
mapping lives only here.
"""
from enum import IntEnum

from sqlalchemy.types import Integer, TypeDecorator

ENUM_MAPPING_VERSION = 1


class AlertType(IntEnum):
    NETWORK_DOWN = 0         # network has not reported within its alerting delay
    DEVICE_DOWN = 1          # an ALWAYS_ON device went offline
    DEVICE_UNAUTHORIZED = 2  # an UNAUTHORIZED device is on the network


class DeviceOperationMode(IntEnum):
    UNAUTHORIZED = 0  # not allowed on the network
    AUTHORIZED = 1    # allowed, uptime not monitored
    ALWAYS_ON = 2     # must stay online


class CodedEnum(TypeDecorator):
    """Stores an IntEnum member as its integer code."""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(self.enum_class(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_class(value)
