from hotstats.transport.base import MockTransport
from hotstats.transport.base import Transport
from hotstats.transport.base import TransportError
from hotstats.transport.tcp import TCPTransport
from hotstats.transport.udp import UDPTransport


def create_transport(config):
    """
    Create the transport described by a client configuration.

    :param config: Config instance.
    :return: Transport instance; a MockTransport in mock mode, otherwise one matching the
             configured protocol.
    """
    if config.mock:
        return MockTransport(config.host, config.port)

    if config.protocol == 'tcp':
        return TCPTransport(config.host, config.port)

    return UDPTransport(config.host, config.port)


__all__ = [
    'MockTransport',
    'TCPTransport',
    'Transport',
    'TransportError',
    'UDPTransport',
    'create_transport',
]
