import pytest

from lecture_briefs.errors import BriefParseError
from lecture_briefs.services.json_repair import (
    REPAIR_STRATEGIES,
    escape_stray_quotes,
    extract_balanced_object,
    parse_json_payload,
    parse_json_with_repairs,
    strip_code_fences,
    strip_control_characters,
)


def test_valid_json_parses_without_repairs():
    payload, strategy = parse_json_with_repairs('{"pageSummaries": []}')

    assert payload == {"pageSummaries": []}
    assert strategy == "keep_as_is"


def test_code_fenced_reply_is_unwrapped():
    raw = '```json\n{"pageSummaries": [{"title": "A", "summary": "B"}]}\n```'

    payload, strategy = parse_json_with_repairs(raw)

    assert payload["pageSummaries"][0]["title"] == "A"
    assert strategy == "strip_code_fences"


def test_prose_around_object_is_dropped():
    raw = 'Here is the brief you asked for:\n{"pageSummaries": [{"title": "A {x}", "summary": "B"}]}\nHope it helps!'

    payload = parse_json_payload(raw)

    assert payload["pageSummaries"][0]["title"] == "A {x}"


def test_balanced_extraction_ignores_braces_inside_strings():
    text = 'noise {"a": "}", "b": {"c": 1}} trailing'

    assert extract_balanced_object(text) == '{"a": "}", "b": {"c": 1}}'


def test_braces_in_leading_prose_are_skipped():
    raw = 'Here is the {json} you asked for: {"pageSummaries": [{"title": "A", "summary": "B"}]}'

    payload, strategy = parse_json_with_repairs(raw)

    assert payload["pageSummaries"][0]["title"] == "A"
    assert strategy == "extract_balanced_object"


def test_unparseable_spans_keep_the_longest_for_later_repairs():
    text = 'note {x} then {"a": {"b": 1}, "c": "say "hi" now"}'

    assert extract_balanced_object(text) == '{"a": {"b": 1}, "c": "say "hi" now"}'
    assert parse_json_payload(text) == {"a": {"b": 1}, "c": 'say "hi" now'}


def test_extraction_without_object_returns_text_unchanged():
    assert extract_balanced_object("no json here") == "no json here"


def test_raw_newlines_inside_strings_are_escaped():
    raw = '{"summary": "line one\nline two\tend"}'

    assert strip_control_characters(raw) == '{"summary": "line one\\nline two\\tend"}'
    assert parse_json_payload(raw)["summary"] == "line one\nline two\tend"


def test_control_characters_outside_strings_are_dropped():
    assert strip_control_characters('{\x00"a":\x07 1}') == '{"a": 1}'


def test_stray_inner_quotes_are_escaped():
    raw = '{"title": "The "Calvin" cycle", "summary": "ok"}'

    assert escape_stray_quotes(raw) == '{"title": "The \\"Calvin\\" cycle", "summary": "ok"}'
    assert parse_json_payload(raw)["title"] == 'The "Calvin" cycle'


def test_strip_code_fences_leaves_plain_text_alone():
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


def test_trailing_comma_is_not_repaired():
    with pytest.raises(BriefParseError):
        parse_json_payload('{"pageSummaries": [{"title": "A", "summary": "B"},]}')


@pytest.mark.parametrize("raw", ["", "   ", None, "not json at all"])
def test_unrecoverable_text_raises_parse_error(raw):
    with pytest.raises(BriefParseError):
        parse_json_payload(raw)


def test_strategies_are_pure_text_functions():
    sample = '```json\n{"a": "x"}\n```'
    for strategy in REPAIR_STRATEGIES:
        assert strategy(sample) == strategy(sample)
        assert isinstance(strategy(sample), str)
