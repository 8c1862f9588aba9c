from hotstats.client import StatsdClient
from hotstats.meta.config import Config
from hotstats.meta.config import ConfigurationError
from hotstats.transport.base import TransportError

__all__ = [
    'Config',
    'ConfigurationError',
    'StatsdClient',
    'TransportError',
]
