"""Progressive repair of malformed JSON returned by the model.

Each strategy is a pure ``text -> text`` function. They are applied in
order, each one to the output of the previous, and a parse is attempted
after every step. The first successful parse wins.
"""

import json
import re

from lecture_briefs.errors import BriefParseError


CODE_FENCE_RE = re.compile(r'```(?:json|JSON)?[ \t]*')


def keep_as_is(text):
    return text.lstrip('\ufeff').strip()


def strip_code_fences(text):
    return CODE_FENCE_RE.sub('', text).strip()


def _balanced_end(text, start):
    """Index just past the object opened at ``start``, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for position in range(start, len(text)):
        ch = text[position]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return position + 1
    return None


def _parses(text):
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def extract_balanced_object(text):
    """Pick the top-level ``{...}`` span that parses, skipping braces in prose.

    When none parses the longest span is kept for the later repair steps.
    """
    start = text.find('{')
    if start == -1:
        return text
    best = None
    while start != -1:
        end = _balanced_end(text, start)
        candidate = text[start:end] if end is not None else text[start:]
        if _parses(candidate):
            return candidate
        if best is None or len(candidate) > len(best):
            best = candidate
        if end is None:
            break
        start = text.find('{', end)
    return best


def strip_control_characters(text):
    """Drop control characters; raw newlines and tabs inside strings become escapes."""
    out = []
    in_string = False
    escaped = False
    for ch in text:
        code = ord(ch)
        is_control = code < 0x20 or code == 0x7F
        if in_string:
            if escaped:
                escaped = False
                out.append(ch)
            elif ch == '\\':
                escaped = True
                out.append(ch)
            elif ch == '"':
                in_string = False
                out.append(ch)
            elif ch == '\n':
                out.append('\\n')
            elif ch == '\t':
                out.append('\\t')
            elif not is_control:
                out.append(ch)
            continue
        if ch == '"':
            in_string = True
        if is_control and ch not in '\n\r\t':
            continue
        out.append(ch)
    return ''.join(out)


def _next_significant(text, position):
    while position < len(text) and text[position] in ' \t\r\n':
        position += 1
    return text[position] if position < len(text) else ''


def escape_stray_quotes(text):
    """Escape quotes that sit inside a string value instead of closing it.

    A quote closes a string only when the next significant character is a
    structural one (``,`` ``}`` ``]`` ``:``) or the end of input.
    """
    out = []
    in_string = False
    escaped = False
    for position, ch in enumerate(text):
        if not in_string:
            if ch == '"':
                in_string = True
            out.append(ch)
            continue
        if escaped:
            escaped = False
            out.append(ch)
        elif ch == '\\':
            escaped = True
            out.append(ch)
        elif ch == '"':
            if _next_significant(text, position + 1) in ('', ',', '}', ']', ':'):
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
        else:
            out.append(ch)
    return ''.join(out)


REPAIR_STRATEGIES = [
    keep_as_is,
    strip_code_fences,
    extract_balanced_object,
    strip_control_characters,
    escape_stray_quotes,
]


def parse_json_with_repairs(raw_text, strategies=None):
    """Return ``(payload, strategy_name)`` for the first repair step that parses."""
    if not raw_text or not str(raw_text).strip():
        raise BriefParseError('Model response was empty.')
    candidate = str(raw_text)
    last_error = None
    for strategy in strategies or REPAIR_STRATEGIES:
        candidate = strategy(candidate)
        try:
            return json.loads(candidate), strategy.__name__
        except json.JSONDecodeError as exc:
            last_error = exc
    raise BriefParseError(f'Could not parse model response as JSON: {last_error}')


def parse_json_payload(raw_text):
    payload, _strategy = parse_json_with_repairs(raw_text)
    return payload
