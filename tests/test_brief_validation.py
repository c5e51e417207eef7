import json
import logging

import pytest

from lecture_briefs.config import BriefSettings
from lecture_briefs.errors import BriefParseError, BriefShapeError
from lecture_briefs.models import ENGLISH, Batch, PageText
from lecture_briefs.services.brief_validation import (
    clean_summary,
    clean_title,
    contains_html_or_css,
    count_words,
    is_topic_list,
    parse_and_validate,
    strip_html,
)


def _batch(count, start_index=0, first_source=1):
    pages = [PageText(index=first_source + offset, content=f"Page body {offset}") for offset in range(count)]
    return Batch(pages=pages, start_index=start_index, batch_number=2)


SENTENCE = "Enzymes lower the activation energy of a reaction so that it runs quickly at body temperature. "
LONG_SUMMARY = "## Enzymes\n\n" + SENTENCE * 13


def _reply(entries):
    return json.dumps({"pageSummaries": entries})


def test_valid_reply_is_numbered_by_position():
    raw = _reply([
        {"pageNumber": 40, "title": "Enzymes and Catalysis", "summary": LONG_SUMMARY},
        {"title": "Reaction Rates", "summary": LONG_SUMMARY},
    ])

    result = parse_and_validate(raw, _batch(2, start_index=12, first_source=15), ENGLISH)

    assert [page.page_number for page in result.page_summaries] == [13, 14]
    assert [page.source_index for page in result.page_summaries] == [15, 16]
    assert result.page_summaries[1].title == "Reaction Rates"


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"pageSummaries": []},
        {"pageSummaries": "nope"},
        {"other": []},
        {"pageSummaries": ["text"]},
        {"pageSummaries": [{"title": "", "summary": "Body"}]},
        {"pageSummaries": [{"title": "Title", "summary": "   "}]},
        {"pageSummaries": [{"title": "Title"}]},
        {"pageSummaries": [{"title": 5, "summary": "Body"}]},
    ],
)
def test_bad_shapes_raise_shape_error(payload):
    with pytest.raises(BriefShapeError):
        parse_and_validate(json.dumps(payload), _batch(1), ENGLISH)


def test_unparseable_reply_raises_parse_error():
    with pytest.raises(BriefParseError):
        parse_and_validate("Sorry, I cannot help with that.", _batch(1), ENGLISH)


def test_extra_entries_are_dropped():
    entries = [{"title": f"Topic Number {n}", "summary": LONG_SUMMARY} for n in range(4)]

    result = parse_and_validate(_reply(entries), _batch(2), ENGLISH)

    assert [page.title for page in result.page_summaries] == ["Topic Number 0", "Topic Number 1"]


def test_missing_entries_become_placeholders():
    entries = [{"title": "Only One Topic", "summary": LONG_SUMMARY}]

    result = parse_and_validate(_reply(entries), _batch(3), ENGLISH, BriefSettings())

    assert [page.fallback for page in result.page_summaries] == [False, True, True]
    assert [page.page_number for page in result.page_summaries] == [1, 2, 3]
    assert "200-280 word" in result.page_summaries[1].summary


def test_html_in_fields_is_stripped():
    entries = [{
        "title": "<h1>Cell Membranes</h1>",
        "summary": '<p class="text-gray-900">Lipids form a <b>bilayer</b> &amp; proteins float in it.</p> ' + LONG_SUMMARY,
    }]

    page = parse_and_validate(_reply(entries), _batch(1), ENGLISH).page_summaries[0]

    assert page.title == "Cell Membranes"
    assert page.summary.startswith("Lipids form a bilayer & proteins float in it. ## Enzymes")
    assert not page.fallback


def test_short_summary_becomes_placeholder(caplog):
    caplog.set_level(logging.WARNING, logger="lecture_briefs")
    short = " ".join(["Enzymes speed up reactions."] * 10) + " They are proteins and they can be reused many times."
    assert count_words(short) == 50

    page = parse_and_validate(_reply([{"title": "Enzymes", "summary": short}]), _batch(1), ENGLISH).page_summaries[0]

    assert page.fallback is True
    assert page.title != "Enzymes"
    assert "200-280 word" in page.summary
    events = [json.loads(record.getMessage()) for record in caplog.records]
    assert {"event": "brief_summary_too_short", "batch": 2, "page": 1, "words": 50, "min_words": 200, "reason": "too_short"} in events


def test_topic_list_summary_becomes_placeholder():
    listing = "Key concepts include " + ", ".join(["enzyme kinetics and substrate binding"] * 45) + "."
    assert count_words(listing) >= 200

    page = parse_and_validate(_reply([{"title": "Enzymes", "summary": listing}]), _batch(1), ENGLISH).page_summaries[0]

    assert page.fallback is True


def test_long_run_on_summary_counts_as_topic_list():
    run_on = "## Enzymes\n\n" + " ".join(["enzymes bind substrates"] * 70) + "."

    assert count_words(run_on) > 200
    assert is_topic_list(run_on)
    assert not is_topic_list(LONG_SUMMARY)


def test_full_length_summary_is_kept(caplog):
    caplog.set_level(logging.DEBUG, logger="lecture_briefs")

    page = parse_and_validate(_reply([{"title": "Enzymes", "summary": LONG_SUMMARY}]), _batch(1), ENGLISH).page_summaries[0]

    assert count_words(LONG_SUMMARY) >= 200
    assert page.fallback is False
    assert page.summary == LONG_SUMMARY.strip()
    messages = [record.getMessage() for record in caplog.records]
    assert not any("brief_summary_too_short" in message for message in messages)
    assert any("brief_summary_below_target" in message for message in messages)


def test_overlong_summary_is_kept_and_logged(caplog):
    caplog.set_level(logging.INFO, logger="lecture_briefs")
    overlong = SENTENCE * 30

    page = parse_and_validate(_reply([{"title": "Enzymes", "summary": overlong}]), _batch(1), ENGLISH).page_summaries[0]

    assert page.summary == overlong.strip()
    over = [json.loads(record.getMessage()) for record in caplog.records if "brief_summary_over_limit" in record.getMessage()]
    assert over and over[0]["words"] == count_words(overlong)
    assert over[0]["max_words"] == 350


def test_contains_html_or_css_detection():
    assert contains_html_or_css("<div>hi</div>")
    assert contains_html_or_css('style="color: red"')
    assert contains_html_or_css("dark:text-gray-100 heading")
    assert not contains_html_or_css("## Heading\n\n- a < b and c > d")


def test_strip_html_keeps_markdown_paragraphs():
    assert strip_html("<span>## Title</span>\n\nBody") == "## Title\n\nBody"


def test_clean_title_trims_punctuation_and_length():
    assert clean_title("  Photosynthesis   Basics.  ") == "Photosynthesis Basics"
    assert clean_title("Why do leaves change colour?") == "Why do leaves change colour?"
    long_title = clean_title("Word " * 40)
    assert len(long_title) == 100
    assert long_title.endswith("...")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("This page describes how cells divide.", "How cells divide."),
        ("In this page, we cover mitosis.", "We cover mitosis."),
        ("Here we discuss meiosis in detail.", "Meiosis in detail."),
        ("Page 3: Cell cycle checkpoints.", "Cell cycle checkpoints."),
        ("## Mitosis\n\nChromosomes align.", "## Mitosis\n\nChromosomes align."),
    ],
)
def test_clean_summary_drops_meta_commentary(raw, expected):
    assert clean_summary(raw) == expected
