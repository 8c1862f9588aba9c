import re
from collections import namedtuple
from collections.abc import Mapping
from decimal import Decimal

COUNTER = 'counter'
TIMING = 'timing'
HISTOGRAM = 'histogram'
GAUGE = 'gauge'
SET = 'set'
DISTRIBUTION = 'distribution'

# Wire protocol type code for each metric type.
TYPE_TAGS = {
    COUNTER: 'c',
    TIMING: 'ms',
    HISTOGRAM: 'h',
    GAUGE: 'g',
    SET: 's',
    DISTRIBUTION: 'd',
}

# Characters reserved by the line protocol that may not appear in tag keys or values.
RESERVED_TAG_CHARS = re.compile(r'[|,:@#\n]')


MetricRecord = namedtuple('MetricRecord', [
    'stat_names',
    'value',
    'type',
    'sample_rate',
    'tags',
])
MetricRecord.__doc__ = """
Single logical metric emission, fanned out over one or more stat names.
"""


def format_value(value):
    """
    Render a number in its canonical decimal form, without rounding. Integral floats are rendered
    without a fractional part.

    :param value: Numeric value.
    :return: String representation of the value.
    """
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))

        text = repr(value)
        if 'e' in text:
            # Fixed-point form of the shortest round-trip representation
            return format(Decimal(text), 'f')

        return text

    return str(value)


def sanitize_tag(part):
    """
    Replace line protocol reserved characters in a tag key or value with underscores.

    :param part: Tag key or value.
    :return: Sanitized string.
    """
    return RESERVED_TAG_CHARS.sub('_', str(part))


def normalize_tags(tags):
    """
    Flatten caller-supplied tags into an ordered list.

    :param tags: None, a sequence of tag strings, or a mapping of tag keys to values.
    :return: List whose items are tag strings or (key, value) pairs, in input order.
    """
    if not tags:
        return []

    if isinstance(tags, Mapping):
        return list(tags.items())

    return list(tags)


def merge_tags(tags, global_tags):
    """
    Build the effective tag list of an emission: caller tags first, then global tags. Duplicates
    are retained.

    :param tags: Caller-supplied tags.
    :param global_tags: Tags configured on the client.
    :return: Ordered list of tags.
    """
    return normalize_tags(tags) + normalize_tags(global_tags)


def render_tags(tags, tag_delimiter=':'):
    """
    Serialize tags to their wire form.

    :param tags: Ordered list of tag strings or (key, value) pairs.
    :param tag_delimiter: Tag key-value delimiter; ':' for Datadog-style metrics, '=' for
                          InfluxDB/Telegraf-style metrics.
    :return: List of serialized tag strings.
    """
    rendered = []

    for tag in tags:
        if isinstance(tag, tuple):
            key, value = tag
            rendered.append('{}{}{}'.format(sanitize_tag(key), tag_delimiter, sanitize_tag(value)))
        elif tag_delimiter != ':':
            rendered.append(tag.replace(':', tag_delimiter))
        else:
            rendered.append(tag)

    return rendered


def format_line(prefix, stat, suffix, value, type_tag, sample_rate=1, tags=(), telegraf=False):
    """
    Format a single StatsD protocol line.

    The line takes the form `<prefix><stat><suffix>:<value>|<type>[|@<rate>][|#<tags>]`. In
    Telegraf mode the tags are instead attached to the stat name:
    `<prefix><stat><suffix>,<tags>:<value>|<type>[|@<rate>]`.

    :param prefix: String prepended to the stat name.
    :param stat: Stat name.
    :param suffix: String appended to the stat name.
    :param value: Numeric value; already negated for decrements.
    :param type_tag: Wire protocol type code, e.g. `c` or `ms`.
    :param sample_rate: Sample rate; omitted from the line unless below 1.
    :param tags: Ordered list of tag strings or (key, value) pairs.
    :param telegraf: True to render tags in Telegraf style.
    :return: Formatted line, without a trailing newline.
    """
    name = '{}{}{}'.format(prefix, stat, suffix)

    if telegraf and tags:
        name = '{},{}'.format(name, ','.join(render_tags(tags, tag_delimiter='=')))

    line = '{}:{}|{}'.format(name, format_value(value), type_tag)

    if sample_rate < 1:
        line = '{}|@{}'.format(line, format_value(sample_rate))

    if tags and not telegraf:
        line = '{}|#{}'.format(line, ','.join(render_tags(tags)))

    return line
