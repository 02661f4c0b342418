"""Tests for the message cleaner state machine and line filters."""

import pytest

from boardcorpus.cleaning import (
    MessageCleaner,
    has_no_alphanumeric,
    is_article_reference,
    is_attribution,
    is_quoted_text,
)

from conftest import CRYPTO_MESSAGES, SPACE_MESSAGES


def test_header_is_dropped_and_first_blank_line_kept() -> None:
    lines = ["From: a@b.c", "Subject: hi", "", "Body text here."]

    assert MessageCleaner().clean(lines) == ["", "Body text here."]


def test_signature_and_everything_after_it_is_dropped() -> None:
    lines = ["Header: x", "", "First line.", "-- ", "Signature", "More body?"]

    assert MessageCleaner().clean(lines) == ["", "First line."]


def test_message_without_blank_line_has_empty_body() -> None:
    lines = ["From: a@b.c", "Subject: no separator", "Text that looks like body."]

    assert MessageCleaner().clean(lines) == []


def test_blank_lines_in_body_are_kept() -> None:
    lines = ["H: 1", "", "Para one.", "", "Para two."]

    assert MessageCleaner().clean(lines) == ["", "Para one.", "", "Para two."]


def test_quote_attribution_and_reference_lines_are_dropped() -> None:
    lines = [
        "H: 1",
        "",
        "In article <abc@host.edu> joe@host.edu writes:",
        "joe@host.edu (Joe) writes...",
        "> quoted text from joe",
        ">>",
        "=====",
        "My reply keeps this line.",
    ]

    assert MessageCleaner().clean(lines) == ["", "My reply keeps this line."]


@pytest.mark.parametrize(
    "line, expected",
    [
        (">>>", True),
        ("> >", True),
        ("----", True),
        ("> some text", False),
        ("plain text", False),
    ],
)
def test_has_no_alphanumeric(line: str, expected: bool) -> None:
    assert has_no_alphanumeric(line) is expected


def test_line_predicates() -> None:
    assert is_quoted_text("  > indented quote")
    assert not is_quoted_text("a > b")
    assert is_attribution("Joe Smith writes:")
    assert is_attribution("smith@foo.edu writes...")
    assert not is_attribution("he writes: many letters")
    assert is_article_reference("In article <C5u7@x.com>, y@x.com says")
    assert not is_article_reference("in article <lowercase")


def test_filters_are_configurable() -> None:
    cleaner = MessageCleaner(filters=['attribution'])
    lines = ["H: 1", "", "> quoted kept now", "joe writes:"]

    assert cleaner.clean(lines) == ["", "> quoted kept now"]

    cleaner.add_filter('quoted_text', position=0)
    assert cleaner.filter_names == ['quoted_text', 'attribution']
    assert cleaner.clean(lines) == [""]

    cleaner.remove_filter('attribution')
    assert cleaner.filter_names == ['quoted_text']


def test_unknown_filter_is_rejected() -> None:
    with pytest.raises(ValueError):
        MessageCleaner(filters=['no_such_filter'])


def test_header_and_signature_never_leak_into_body() -> None:
    cleaner = MessageCleaner()
    for lines in SPACE_MESSAGES + CRYPTO_MESSAGES:
        body = cleaner.clean(lines)
        header = lines[:lines.index("")]
        assert not set(header) & set(body)
        if "--" in lines:
            after_signature = lines[lines.index("--"):]
            assert not [line for line in body if line in after_signature and line]


def test_iter_clean_streams_lines() -> None:
    def lines():
        yield "H: 1"
        yield ""
        yield "streamed body"

    assert list(MessageCleaner().iter_clean(lines())) == ["", "streamed body"]
