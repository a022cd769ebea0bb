from .delegate import TaskDelegate
from .manager import NetworkManager
from .mock import MockProtocol, MockServer
from .streams import AsyncBytes
from .transport import AsyncInterceptingTransport, ProtocolHandler

__all__ = [
    "AsyncBytes",
    "AsyncInterceptingTransport",
    "MockProtocol",
    "MockServer",
    "NetworkManager",
    "ProtocolHandler",
    "TaskDelegate",
]
