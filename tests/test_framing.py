"""Unit tests for the streaming decoders."""
import json

from hypothesis import given
from hypothesis import strategies as st

from parley.llm.framing import (
    DoneFrame,
    FrameError,
    JSONFrame,
    NDJSONDecoder,
    SSEDecoder,
    is_truncated,
)


def _error_for(text: str) -> json.JSONDecodeError:
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        return e
    raise AssertionError(f"{text!r} is valid JSON")


def _feed_in_pieces(decoder, data: bytes, cuts: list[int]):
    frames = []
    start = 0
    for cut in sorted(set(cuts)):
        frames.extend(decoder.feed(data[start:cut]))
        start = cut
    frames.extend(decoder.feed(data[start:]))
    frames.extend(decoder.flush())
    return frames


class TestIsTruncated:
    """Tests for telling truncated JSON from malformed JSON."""

    def test_cut_inside_object(self):
        assert is_truncated(_error_for('{"choices": [{"delta": '))

    def test_cut_inside_string(self):
        assert is_truncated(_error_for('{"content": "Hel'))

    def test_cut_inside_literal(self):
        assert is_truncated(_error_for('{"done": tr'))

    def test_garbage_is_not_truncation(self):
        assert not is_truncated(_error_for("{not json"))

    def test_trailing_garbage_is_not_truncation(self):
        assert not is_truncated(_error_for('{"a": 1} x'))


class TestSSEDecoder:
    """Tests for the data: line decoder."""

    def test_complete_line(self):
        decoder = SSEDecoder()
        frames = decoder.feed(b'data: {"a": 1}\n\n')
        assert frames == [JSONFrame({"a": 1})]
        assert decoder.buffered == 0

    def test_done_marker(self):
        decoder = SSEDecoder()
        assert decoder.feed(b"data: [DONE]\n\n") == [DoneFrame()]

    def test_partial_line_waits_for_newline(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"a"') == []
        assert decoder.feed(b": 1}\n") == [JSONFrame({"a": 1})]

    def test_data_without_space(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data:{"a": 1}\n') == [JSONFrame({"a": 1})]

    def test_crlf_line_endings(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"a": 1}\r\n\r\n') == [JSONFrame({"a": 1})]

    def test_comments_and_other_fields_ignored(self):
        decoder = SSEDecoder()
        frames = decoder.feed(b': keep-alive\nevent: message\ndata: {"a": 1}\n\n')
        assert frames == [JSONFrame({"a": 1})]

    def test_truncated_payload_prefixed_to_next_line(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"content": "Hel\n') == []
        assert decoder.buffered > 0
        assert decoder.feed(b'data: lo"}\n') == [JSONFrame({"content": "Hello"})]
        assert decoder.buffered == 0

    def test_comment_between_pieces_keeps_payload(self):
        decoder = SSEDecoder()
        frames = decoder.feed(b'data: {"a": \n: keep-alive\nevent: message\ndata: 1}\n')
        assert frames == [JSONFrame({"a": 1})]

    def test_done_marker_not_merged_into_held_payload(self):
        decoder = SSEDecoder()
        frames = decoder.feed(b"data: n\n\ndata: [DONE]\n\n")
        assert len(frames) == 2
        assert isinstance(frames[0], FrameError)
        assert "middle of a message" in frames[0].message
        assert frames[1] == DoneFrame()
        assert decoder.buffered == 0

    def test_done_marker_split_across_reads_after_held_payload(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"content": "Hi\n\ndata: [DO') == []
        frames = decoder.feed(b"NE]\n\n")
        assert isinstance(frames[0], FrameError)
        assert frames[-1] == DoneFrame()

    def test_malformed_payload_reports_once_and_clears(self):
        decoder = SSEDecoder()
        frames = decoder.feed(b'data: {not json\n\ndata: {"a": 1}\n')
        assert len(frames) == 1
        assert isinstance(frames[0], FrameError)
        assert "Malformed" in frames[0].message
        assert decoder.buffered == 0

    def test_decoding_continues_after_error(self):
        decoder = SSEDecoder()
        decoder.feed(b"data: {not json\n")
        assert decoder.feed(b'data: {"a": 1}\n') == [JSONFrame({"a": 1})]

    def test_split_utf8_sequence(self):
        decoder = SSEDecoder()
        data = 'data: {"content": "héllo"}\n'.encode()
        cut = data.index("é".encode()) + 1
        assert decoder.feed(data[:cut]) == []
        assert decoder.feed(data[cut:]) == [JSONFrame({"content": "héllo"})]

    def test_flush_decodes_unterminated_tail(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"a": 1}') == []
        assert decoder.flush() == [JSONFrame({"a": 1})]

    def test_flush_reports_incomplete_message(self):
        decoder = SSEDecoder()
        decoder.feed(b'data: {"a": \n')
        frames = decoder.flush()
        assert len(frames) == 1
        assert isinstance(frames[0], FrameError)

    def test_reset_drops_everything(self):
        decoder = SSEDecoder()
        decoder.feed(b'data: {"a": \n data: {"b"')
        decoder.reset()
        assert decoder.buffered == 0
        assert decoder.flush() == []

    @given(st.lists(st.integers(min_value=0, max_value=200), max_size=20))
    def test_split_points_do_not_change_frames(self, cuts: list[int]):
        """Property test: any byte-level split decodes to the same frames."""
        data = (
            'data: {"choices": [{"delta": {"content": "Grüße"}}]}\n\n'
            'data: {"choices": [{"delta": {"content": " und 🙂"}}]}\n\n'
            "data: [DONE]\n\n"
        ).encode()
        cuts = [c for c in cuts if c <= len(data)]

        whole = _feed_in_pieces(SSEDecoder(), data, [])
        pieces = _feed_in_pieces(SSEDecoder(), data, cuts)

        assert pieces == whole
        assert whole[-1] == DoneFrame()


class TestNDJSONDecoder:
    """Tests for the newline-delimited JSON decoder."""

    def test_one_object_per_line(self):
        decoder = NDJSONDecoder()
        frames = decoder.feed(b'{"a": 1}\n{"b": 2}\n')
        assert frames == [JSONFrame({"a": 1}), JSONFrame({"b": 2})]

    def test_partial_line_buffered(self):
        decoder = NDJSONDecoder()
        assert decoder.feed(b'{"a"') == []
        assert decoder.buffered == 4
        assert decoder.feed(b": 1}\n") == [JSONFrame({"a": 1})]

    def test_malformed_line_does_not_stop_decoding(self):
        decoder = NDJSONDecoder()
        frames = decoder.feed(b'oops\n{"a": 1}\n')
        assert isinstance(frames[0], FrameError)
        assert frames[1] == JSONFrame({"a": 1})

    def test_flush_decodes_last_line_without_newline(self):
        decoder = NDJSONDecoder()
        decoder.feed(b'{"done": true}')
        assert decoder.flush() == [JSONFrame({"done": True})]

    def test_blank_lines_ignored(self):
        decoder = NDJSONDecoder()
        assert decoder.feed(b"\n\n") == []
        assert decoder.flush() == []

    @given(st.lists(st.integers(min_value=0, max_value=80), max_size=10))
    def test_split_points_do_not_change_frames(self, cuts: list[int]):
        """Property test: any byte-level split decodes to the same frames."""
        data = '{"message": {"content": "Hi ✓"}}\n{"done": true}\n'.encode()
        cuts = [c for c in cuts if c <= len(data)]
        assert _feed_in_pieces(NDJSONDecoder(), data, cuts) == _feed_in_pieces(NDJSONDecoder(), data, [])
