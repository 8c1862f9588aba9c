from collections.abc import Mapping
from numbers import Real

import yaml

PROTOCOLS = ('udp', 'tcp')

# Map of directives to their default values. Every recognized option has a default; options not
# listed here are rejected.
CONFIG_DEFAULTS = {
    'host': 'localhost',
    'port': 8125,
    'protocol': 'udp',
    'prefix': '',
    'suffix': '',
    'global_tags': (),
    'default_sample_rate': 1,
    # If enabled, render tags inline after the stat name in InfluxDB/Telegraf style
    'telegraf': False,
    # If enabled, record lines in memory instead of sending them
    'mock': False,
}


class ConfigurationError(Exception):
    """
    Raised when the supplied client options are invalid.
    """
    pass


class Config(object):
    """
    Immutable set of client options.
    """

    def __init__(self, options=None, **kwargs):
        """
        Initialize and validate client options.

        :param options: Mapping of option names to values.
        :param kwargs: Additional options; these take precedence over the mapping.
        """
        supplied = dict(options or {}, **kwargs)

        unknown = sorted(set(supplied) - set(CONFIG_DEFAULTS))
        if unknown:
            raise ConfigurationError('Unrecognized options: {}.'.format(', '.join(unknown)))

        config = dict(CONFIG_DEFAULTS, **supplied)
        config['global_tags'] = self._freeze_tags(config['global_tags'])
        self._config = config

        self._validate()

    @classmethod
    def load(cls, path):
        """
        Read options from a YAML file with a top-level `hotstats` node.

        :param path: Path to the YAML configuration.
        :return: Config instance.
        """
        try:
            with open(path) as f:
                document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError('Unable to read config `{}`: {}'.format(path, e)) from e

        if not isinstance(document, Mapping) or 'hotstats' not in document:
            raise ConfigurationError('Top-level `hotstats` node missing.')

        return cls(document['hotstats'] or {})

    def get(self, directive):
        """
        Read the value of a configuration directive.

        :param directive: Option name.
        :return: Configured value, or the default if the option was not supplied.
        """
        if directive not in self._config:
            raise ConfigurationError('Directive `{}` does not exist.'.format(directive))

        return self._config[directive]

    def as_dict(self):
        """
        Copy the effective options, defaults included.

        :return: Dictionary of option names to values.
        """
        return dict(self._config)

    @property
    def host(self):
        return self._config['host']

    @property
    def port(self):
        return self._config['port']

    @property
    def protocol(self):
        return self._config['protocol']

    @property
    def prefix(self):
        return self._config['prefix']

    @property
    def suffix(self):
        return self._config['suffix']

    @property
    def global_tags(self):
        return self._config['global_tags']

    @property
    def default_sample_rate(self):
        return self._config['default_sample_rate']

    @property
    def telegraf(self):
        return self._config['telegraf']

    @property
    def mock(self):
        return self._config['mock']

    def __repr__(self):
        return 'Config({})'.format(
            ', '.join('{}={!r}'.format(key, value) for key, value in self._config.items()),
        )

    @staticmethod
    def _freeze_tags(tags):
        """
        Copy the global tags into an immutable container, preserving order.

        :param tags: Sequence of tag strings or mapping of tag names to values.
        :return: Tuple of tag strings, or a tuple of (key, value) pairs for a mapping.
        """
        if isinstance(tags, Mapping):
            return tuple(tags.items())

        if isinstance(tags, (str, bytes)) or not isinstance(tags, (list, tuple)):
            raise ConfigurationError('Option `global_tags` must be a list or mapping of tags.')

        return tuple(tags)

    def _validate(self):
        """
        Validate the supplied options. Raises an exception if they are found to be invalid;
        noops otherwise.
        """
        if self.protocol not in PROTOCOLS:
            raise ConfigurationError(
                'Unrecognized protocol `{}`; expected one of: {}.'.format(
                    self.protocol,
                    ', '.join(PROTOCOLS),
                ),
            )

        if not isinstance(self.host, str) or not self.host:
            raise ConfigurationError('Option `host` must be a non-empty string.')

        if isinstance(self.port, bool) or not isinstance(self.port, int) or \
                not 0 <= self.port <= 65535:
            raise ConfigurationError('Option `port` must be an integer in [0, 65535].')

        for directive in ('prefix', 'suffix'):
            if not isinstance(self.get(directive), str):
                raise ConfigurationError('Option `{}` must be a string.'.format(directive))

        rate = self.default_sample_rate
        if isinstance(rate, bool) or not isinstance(rate, Real) or not 0 < rate <= 1:
            raise ConfigurationError('Option `default_sample_rate` must be a number in (0, 1].')

        for tag in self.global_tags:
            if isinstance(tag, tuple):
                if not isinstance(tag[0], str):
                    raise ConfigurationError('Global tag names must be strings.')
            elif not isinstance(tag, str):
                raise ConfigurationError('Global tags must be strings.')

        for directive in ('telegraf', 'mock'):
            if not isinstance(self.get(directive), bool):
                raise ConfigurationError('Option `{}` must be a boolean.'.format(directive))
