"""
Tests for the longest-match tokenizer.
"""

import pytest

from recurtext.tokens import (
    PERIOD_KINDS,
    RECOGNIZERS,
    Token,
    TokenKind,
    Tokenizer,
    UnparsableInputError,
)


class TestLongestMatch:
    """Overlapping kinds resolve to the longest recognizer match."""

    @pytest.mark.parametrize("text, kind, matched", [
        ("day of the week", TokenKind.DAY_OF_WEEK, "day of the week"),
        ("days of the year", TokenKind.DAY_OF_YEAR, "days of the year"),
        ("day instance", TokenKind.DAY_INSTANCE, "day instance"),
        ("day of the month", TokenKind.DAY, "day of the month"),
        ("days", TokenKind.DAY, "days"),
        ("months", TokenKind.MONTH, "months"),
        ("weeks of the month", TokenKind.WEEK_OF_MONTH, "weeks of the month"),
        ("week", TokenKind.WEEK_OF_YEAR, "week"),
        ("minutes", TokenKind.MINUTE, "minutes"),
        ("sec", TokenKind.SECOND, "sec"),
    ])
    def test_period_nouns(self, text, kind, matched):
        """Period nouns that share prefixes pick the longest form."""
        token = Tokenizer(text).peek(PERIOD_KINDS)
        assert token.kind == kind
        assert token.text == matched

    def test_on_the_beats_on(self):
        """'on the' is one token, not 'on' followed by 'the'."""
        token = Tokenizer("on the 5th").peek([TokenKind.ON, TokenKind.ON_THE])
        assert token.kind == TokenKind.ON_THE
        assert token.end == 6

    def test_everyday_beats_every(self):
        """'everyday' is not read as 'every' + 'day'."""
        token = Tokenizer("everyday").peek([TokenKind.EVERY, TokenKind.EVERYDAY])
        assert token.kind == TokenKind.EVERYDAY

    def test_first_requested_kind_wins_ties(self):
        """On equal lengths the kind requested first is returned."""
        assert Tokenizer("2012").peek([TokenKind.YEAR, TokenKind.RANK]).kind == TokenKind.YEAR
        assert Tokenizer("2012").peek([TokenKind.RANK, TokenKind.YEAR]).kind == TokenKind.RANK

    def test_clock_time_beats_rank(self):
        """'10:00 am' is one clock token, longer than the rank '10'."""
        token = Tokenizer("10:00 am on").peek([TokenKind.RANK, TokenKind.CLOCK_TIME])
        assert token.kind == TokenKind.CLOCK_TIME
        assert token.text == "10:00 am"

    def test_clock_time_before_and(self):
        """The 'a' of 'and' is not taken as a meridiem."""
        token = Tokenizer("10:00 and").peek([TokenKind.RANK, TokenKind.CLOCK_TIME])
        assert token.kind == TokenKind.CLOCK_TIME
        assert token.text == "10:00"

    @pytest.mark.parametrize("text", [
        "every 5 minutes between the 1st and 30th minute",
        "on the 15-20th day of march-dec",
        "at 10:00 am on tues of may in 2012",
        "days of the week",
        "weekdays and weekends",
    ])
    def test_returned_token_is_never_shorter_than_a_candidate(self, text):
        """At every offset the winner is at least as long as any other match."""
        kinds = list(TokenKind)
        tokenizer = Tokenizer(text)
        for offset in range(len(text)):
            tokenizer.cursor.position = offset
            token = tokenizer.peek(kinds)
            start = tokenizer.skip_whitespace(offset)
            for kind in kinds:
                match = RECOGNIZERS[kind].match(tokenizer.text, start)
                if match is not None:
                    assert token is not None
                    assert token.end - token.start >= match.end() - start


class TestPeekAndScan:
    """Cursor handling of peek, scan and accept."""

    def test_peek_skips_whitespace_without_moving(self):
        """Leading whitespace is skipped but the cursor stays put."""
        tokenizer = Tokenizer("   every")
        token = tokenizer.peek(TokenKind.EVERY)
        assert token == Token(start=3, end=8, text="every", kind=TokenKind.EVERY)
        assert tokenizer.position == 0

    def test_peek_returns_none_without_match(self):
        """No requested kind matches."""
        assert Tokenizer("hello").peek(TokenKind.EVERY) is None

    def test_scan_advances(self):
        """scan moves the cursor to the end of the token."""
        tokenizer = Tokenizer("every 5")
        tokenizer.scan(TokenKind.EVERY)
        assert tokenizer.position == 5
        token = tokenizer.scan(TokenKind.RANK)
        assert token.text == "5"
        assert tokenizer.position == 7

    def test_accept_cannot_move_backwards(self):
        """The cursor only moves forward."""
        tokenizer = Tokenizer("every 5")
        tokenizer.scan(TokenKind.EVERY)
        with pytest.raises(ValueError):
            tokenizer.accept(Token(start=0, end=1, text="e", kind=TokenKind.EVERY))

    def test_end_of_input_after_trailing_space(self):
        """End of input is a zero-length token past trailing whitespace."""
        token = Tokenizer("every  ").peek([TokenKind.END_OF_INPUT])
        assert token is None
        tokenizer = Tokenizer("every  ")
        tokenizer.scan(TokenKind.EVERY)
        token = tokenizer.peek(TokenKind.END_OF_INPUT)
        assert token.start == token.end == 7
        assert token.text == ""

    def test_input_is_lowercased(self):
        """Matching is case-insensitive."""
        tokens = Tokenizer("Every MONDAY").tokenize([TokenKind.EVERY, TokenKind.DAY_NAME])
        assert [t.kind for t in tokens] == [TokenKind.EVERY, TokenKind.DAY_NAME]
        assert tokens[1].text == "monday"

    def test_dash_range(self):
        """A dash between ranks is a range closer."""
        tokens = Tokenizer("15-20th").tokenize([TokenKind.RANK, TokenKind.THROUGH])
        assert [t.text for t in tokens] == ["15", "-", "20th"]

    def test_word_at_is_unclassified(self):
        """word_at reports the raw word for error messages."""
        token = Tokenizer("every foo bar").word_at(5)
        assert token == Token(start=6, end=9, text="foo", kind=None)


class TestRecognizers:
    """Individual recognizers."""

    @pytest.mark.parametrize("text, expected", [
        ("a minute", "a"),
        ("an hour", "an"),
        ("22nd", "22nd"),
        ("3", "3"),
    ])
    def test_rank(self, text, expected):
        assert Tokenizer(text).peek(TokenKind.RANK).text == expected

    @pytest.mark.parametrize("text", ["at", "and", "after"])
    def test_rank_needs_word_boundary(self, text):
        """'a' inside a word is not a rank."""
        assert Tokenizer(text).peek(TokenKind.RANK) is None

    @pytest.mark.parametrize("text", [
        "sun", "mon", "tues", "wednesday", "thurs", "thursday", "fri", "saturdays",
    ])
    def test_day_names(self, text):
        assert Tokenizer(text).peek(TokenKind.DAY_NAME).text == text

    @pytest.mark.parametrize("text", [
        "jan", "february", "mar", "may", "jun", "july", "sept", "september", "dec",
    ])
    def test_month_names(self, text):
        assert Tokenizer(text).peek(TokenKind.MONTH_NAME).text == text

    @pytest.mark.parametrize("text", ["1pm", "9:30p", "10:00 am", "17:45", "0:15", "12a"])
    def test_clock_times(self, text):
        assert Tokenizer(text).peek(TokenKind.CLOCK_TIME).text == text

    @pytest.mark.parametrize("text", ["between", "between the", "from"])
    def test_between(self, text):
        assert Tokenizer(text).peek(TokenKind.BETWEEN).text == text

    @pytest.mark.parametrize("text", ["-", "to", "through", "thru", "until", "til"])
    def test_through(self, text):
        assert Tokenizer(text).peek(TokenKind.THROUGH).text == text

    def test_starting_on_the(self):
        assert Tokenizer("starting on the 5th").peek(TokenKind.START).text == "starting on the"


class TestUnparsableInputError:

    def test_message_names_offending_word(self):
        error = UnparsableInputError(6, Token(start=6, end=9, text="foo"))
        assert error.offset == 6
        assert "'foo'" in str(error)
        assert isinstance(error, ValueError)
