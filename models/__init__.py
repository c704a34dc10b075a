# Import all models here to make them available
from .enums import AlertType, DeviceOperationMode
from .network import Network
from .device import Device
from .alert import AlertRecord
from .status_history import StatusHistoryEntry

__all__ = [
    'AlertType', 'DeviceOperationMode',
    'Network', 'Device', 'AlertRecord', 'StatusHistoryEntry'
]
