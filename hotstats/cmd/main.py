import argparse
import asyncio
import logging

from hotstats.client import StatsdClient
from hotstats.meta.config import Config
from hotstats.meta.config import ConfigurationError
from hotstats.transport.framing import serve

EMISSIONS = ('increment', 'decrement', 'timing', 'histogram', 'gauge', 'set', 'distribution')


def parse_value(raw):
    """
    Interpret a command-line metric value.

    :param raw: Value as typed on the command line.
    :return: An int or float if the value is numeric; the raw string otherwise (set members).
    """
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            pass

    return raw


async def send(config, args):
    async with StatsdClient(config) as client:
        emit = getattr(client, args.emission)

        return await emit(
            args.stat,
            parse_value(args.value),
            sample_rate=args.sample_rate,
            tags=args.tag,
        )


async def listen(host, port):
    def on_line(line):
        print(line, flush=True)

    server = await serve(host, port, on_line)
    logging.getLogger('hotstats').info('listening for metrics: addr={}'.format(
        ', '.join(str(sock.getsockname()) for sock in server.sockets),
    ))

    async with server:
        await server.serve_forever()


def main(argv=None):
    # Logging configuration
    logging.basicConfig(format='%(asctime)s - %(module)s - %(levelname)s: %(message)s')
    logger = logging.getLogger('hotstats')

    # Command-line arguments
    parser = argparse.ArgumentParser()
    parser.add_argument(
        '--config',
        default=None,
        help='path to the config file; defaults are used if omitted',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='count',
        default=0,
        help='control output logging verbosity: error, warn, info, debug',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    send_parser = subparsers.add_parser('send', help='emit a single metric')
    send_parser.add_argument('emission', choices=EMISSIONS, help='metric operation')
    send_parser.add_argument('stat', help='stat name')
    send_parser.add_argument('value', help='metric value')
    send_parser.add_argument(
        '--tag',
        action='append',
        default=[],
        help='tag to attach to the metric; may be repeated',
    )
    send_parser.add_argument('--sample-rate', type=float, default=None, help='sample rate')

    listen_parser = subparsers.add_parser('listen', help='print metric lines received over tcp')
    listen_parser.add_argument('--host', default='127.0.0.1', help='address to bind to')
    listen_parser.add_argument('--port', type=int, default=8125, help='port to bind to')

    args = parser.parse_args(argv)

    logger.setLevel(
        [logging.ERROR, logging.WARN, logging.INFO, logging.DEBUG][min(args.verbose, 3)],
    )

    if args.command == 'listen':
        try:
            asyncio.run(listen(args.host, args.port))
        except KeyboardInterrupt:
            logger.info('stopped listening')

        return 0

    try:
        config = Config.load(args.config) if args.config else Config()
    except ConfigurationError as e:
        logger.error('invalid config: exception={}'.format(e))
        return 1

    logger.debug('loaded valid config: config={}'.format(config))

    error, num_bytes = asyncio.run(send(config, args))
    if error is not None:
        logger.error('metric emission failed: exception={}'.format(error))
        return 1

    logger.info('metric emitted: num_bytes={}'.format(num_bytes))

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
