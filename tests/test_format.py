"""Tests for metric line formatting."""

import pytest

from hotstats.metrics.format import TYPE_TAGS
from hotstats.metrics.format import format_line
from hotstats.metrics.format import format_value
from hotstats.metrics.format import merge_tags
from hotstats.metrics.format import render_tags


class TestFormatValue:
    """Tests for numeric value rendering."""

    @pytest.mark.parametrize('value, expected', [
        (42, '42'),
        (-42, '-42'),
        (42.0, '42'),
        (0.5, '0.5'),
        (3.14159, '3.14159'),
        (0.1 + 0.2, '0.30000000000000004'),
        (10 ** 20, '100000000000000000000'),
        (5e-05, '0.00005'),
        (1.5e-07, '0.00000015'),
        (-2.5e-06, '-0.0000025'),
        (1e+22, '10000000000000000000000'),
    ])
    def test_canonical_decimal(self, value, expected):
        assert format_value(value) == expected

    def test_small_sample_rate_renders_fixed_point(self):
        assert format_line('', 'test', '', 1, 'c', 5e-05, []) == 'test:1|c|@0.00005'

    def test_string_values_pass_through(self):
        assert format_value('alice') == 'alice'


class TestFormatLine:
    """Tests for the line grammar."""

    def test_counter_without_tags(self):
        assert format_line('', 'test', '', 1, 'c', 1, []) == 'test:1|c'

    def test_counter_with_tags_in_order(self):
        line = format_line('', 'test', '', 1, 'c', 1, ['tag2', 'tag1'])
        assert line == 'test:1|c|#tag2,tag1'

    def test_prefix_and_suffix(self):
        assert format_line('foo.', 'test', '.bar', 42, 'ms', 1, []) == 'foo.test.bar:42|ms'

    def test_sample_rate_below_one_is_rendered(self):
        line = format_line('foo.', 'test', '.bar', 42, 'ms', 0.5, [])
        assert line == 'foo.test.bar:42|ms|@0.5'

    def test_sample_rate_of_one_is_omitted(self):
        assert format_line('', 'test', '', 42, 'g', 1.0, []) == 'test:42|g'

    def test_sample_rate_precedes_tags(self):
        line = format_line('', 'test', '', 42, 'h', 0.25, ['foo', 'bar'])
        assert line == 'test:42|h|@0.25|#foo,bar'

    def test_negative_value(self):
        assert format_line('', 'test', '', -42, 'c', 1, []) == 'test:-42|c'

    def test_mapping_tags_use_colon_delimiter(self):
        line = format_line('', 'test', '', 1, 'c', 1, [('env', 'prod'), 'solo'])
        assert line == 'test:1|c|#env:prod,solo'

    def test_telegraf_tags_attach_to_name(self):
        line = format_line('', 'test', '', 1, 'c', 0.5, [('env', 'prod'), 'a:b'], telegraf=True)
        assert line == 'test,env=prod,a=b:1|c|@0.5'

    def test_telegraf_without_tags(self):
        assert format_line('', 'test', '', 1, 'c', 1, [], telegraf=True) == 'test:1|c'

    @pytest.mark.parametrize('metric_type, code', sorted(TYPE_TAGS.items()))
    def test_type_codes(self, metric_type, code):
        assert format_line('', 'test', '', 42, TYPE_TAGS[metric_type], 1, []) == \
            'test:42|{}'.format(code)


class TestTags:
    """Tests for tag merging and rendering."""

    @pytest.mark.parametrize('tags, global_tags, expected', [
        (None, (), []),
        (['foo'], (), ['foo']),
        (None, ('gtag',), ['gtag']),
        (['foo', 'gtag'], ('gtag',), ['foo', 'gtag', 'gtag']),
        (['b', 'a'], ('d', 'c'), ['b', 'a', 'd', 'c']),
    ])
    def test_caller_tags_precede_global_tags(self, tags, global_tags, expected):
        assert merge_tags(tags, global_tags) == expected

    def test_mapping_tags_keep_insertion_order(self):
        assert merge_tags({'b': 1, 'a': 2}, (('g', 'x'),)) == [('b', 1), ('a', 2), ('g', 'x')]

    def test_reserved_characters_are_sanitized(self):
        assert render_tags([('a|b', 'c,d:e@f#g\nh')]) == ['a_b:c_d_e_f_g_h']

    def test_string_tags_are_not_sanitized(self):
        assert render_tags(['env:prod']) == ['env:prod']
