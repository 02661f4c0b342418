"""Shared fixtures: a tiny two-board corpus and a toy lexicon."""

import pytest

from boardcorpus import Corpus, Lexicon, MessageCleaner, Tokenizer

STOPWORDS = frozenset({'the', 'a', 'is', 'and', 'of', 'to', 'it', 'not', 'i', 'in', 'this'})

SPACE_MESSAGES = [
    [
        "From: pilot@nasa.gov",
        "Subject: lunar orbit",
        "",
        "The lunar orbit insertion burn is scheduled.",
        "The orbit of the probe is stable and the launch was good.",
        "--",
        "Pilot, NASA",
    ],
    [
        "From: fan@space.org",
        "Subject: Re: lunar orbit",
        "",
        "In article <1993.1@nasa.gov> pilot@nasa.gov writes:",
        "> The lunar orbit insertion burn is scheduled.",
        "Great news, the launch and the orbit look good.",
    ],
    [
        "From: skeptic@space.org",
        "Subject: launch costs",
        "",
        "Launch costs are not good, the orbit program is a bad deal.",
    ],
]

CRYPTO_MESSAGES = [
    [
        "From: alice@crypto.org",
        "Subject: cipher",
        "",
        "The cipher key is weak and the key schedule is bad.",
        "A stronger cipher needs a longer key.",
    ],
    [
        "From: bob@crypto.org",
        "Subject: Re: cipher",
        "",
        "alice@crypto.org (Alice) writes:",
        ">> The cipher key is weak",
        "The key escrow cipher is not good and not safe.",
    ],
    [
        "From: eve@crypto.org",
        "Subject: clipper",
        "",
        "Clipper key escrow is a bad cipher idea.",
    ],
]


def build_records():
    records = []
    for i, lines in enumerate(SPACE_MESSAGES):
        records.append({'group_id': 'sci.space', 'message_id': str(100 + i), 'lines': lines})
    for i, lines in enumerate(CRYPTO_MESSAGES):
        records.append({'group_id': 'sci.crypt', 'message_id': str(200 + i), 'lines': lines})
    return records


@pytest.fixture
def stopwords():
    return STOPWORDS


@pytest.fixture
def tokenizer(stopwords):
    return Tokenizer(stopwords)


@pytest.fixture
def corpus(tokenizer):
    return Corpus.from_records(build_records(), cleaner=MessageCleaner(), tokenizer=tokenizer)


@pytest.fixture
def lexicon():
    return Lexicon({'good': 2, 'great': 3, 'bad': -2, 'weak': -1, 'safe': 1, 'stable': 1},
                   name='toy')
