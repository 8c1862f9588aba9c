"""Tests for TCP stream framing on the receiving side."""

from hotstats.transport.framing import LineBuffer

STREAM = b'a:42|ms\nb:42|ms\n'


class TestLineBuffer:
    """Tests for LineBuffer."""

    def test_single_line(self):
        assert LineBuffer().feed(b'test:1|c\n') == ['test:1|c']

    def test_concatenated_lines_in_one_read(self):
        assert LineBuffer().feed(STREAM) == ['a:42|ms', 'b:42|ms']

    def test_partial_line_is_retained(self):
        buffer = LineBuffer()

        assert buffer.feed(b'test:1') == []
        assert buffer.pending == b'test:1'
        assert buffer.feed(b'|c\nnext') == ['test:1|c']
        assert buffer.pending == b'next'

    def test_empty_lines_are_dropped(self):
        assert LineBuffer().feed(b'\n\na:1|c\n\n') == ['a:1|c']

    def test_any_chunk_boundary_reconstructs_lines(self):
        for offset in range(len(STREAM) + 1):
            buffer = LineBuffer()
            lines = buffer.feed(STREAM[:offset]) + buffer.feed(STREAM[offset:])

            assert lines == ['a:42|ms', 'b:42|ms'], offset
            assert buffer.pending == b''

    def test_byte_at_a_time(self):
        buffer = LineBuffer()
        lines = []
        for i in range(len(STREAM)):
            lines.extend(buffer.feed(STREAM[i:i + 1]))

        assert lines == ['a:42|ms', 'b:42|ms']

    def test_multibyte_character_split_across_reads(self):
        data = 'café:1|c\n'.encode('utf-8')
        buffer = LineBuffer()

        assert buffer.feed(data[:4]) == []
        assert buffer.feed(data[4:]) == ['café:1|c']
