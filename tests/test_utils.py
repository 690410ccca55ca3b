"""
Tests for utils/utils.py — card text parsing and command arguments.
"""
import pytest

from utils.utils import parse_cap_args, parse_text, truncate


class TestParseText:
    # ── Pipe separator ────────────────────────────────────────

    def test_pipe_basic(self):
        r = parse_text("hond | dog")
        assert r == {'front': 'hond', 'back': 'dog'}

    def test_pipe_strips_whitespace(self):
        r = parse_text("  hond  |  dog  ")
        assert r == {'front': 'hond', 'back': 'dog'}

    def test_pipe_splits_on_first_only(self):
        r = parse_text("a | b | c")
        assert r['front'] == 'a'
        assert r['back'] == 'b | c'

    def test_pipe_empty_back(self):
        assert parse_text("front |")['back'] == ''

    def test_pipe_wins_over_newline(self):
        r = parse_text("a | b\nc")
        assert r['front'] == 'a'
        assert r['back'] == 'b\nc'

    # ── Newline separator ─────────────────────────────────────

    def test_newline_two_lines(self):
        assert parse_text("hond\ndog") == {'front': 'hond', 'back': 'dog'}

    def test_newline_multiple_back_lines_joined(self):
        r = parse_text("hond\nLine 2\nLine 3")
        assert r['back'] == 'Line 2\nLine 3'

    def test_newline_ignores_blank_lines(self):
        assert parse_text("\n\nhond\n\ndog\n\n") == {'front': 'hond', 'back': 'dog'}

    # ── Single line (no back) ─────────────────────────────────

    def test_single_line_gives_empty_back(self):
        assert parse_text("  Just a front ") == {'front': 'Just a front', 'back': ''}

    def test_blank_gives_empty_front(self):
        assert parse_text("   ")['front'] == ''


class TestTruncate:
    def test_short_untouched(self):
        assert truncate('abc', 5) == 'abc'

    def test_long_gets_ellipsis(self):
        assert truncate('abcdefgh', 5) == 'abcd…'
        assert len(truncate('abcdefgh', 5)) == 5


class TestParseCapArgs:
    def test_number_and_deck(self):
        assert parse_cap_args(['15', 'Dutch', 'verbs']) == (15, 'Dutch verbs')

    @pytest.mark.parametrize('args', [[], ['15'], ['many', 'Dutch'], ['-1', 'Dutch']])
    def test_bad_args(self, args):
        with pytest.raises(ValueError):
            parse_cap_args(args)
