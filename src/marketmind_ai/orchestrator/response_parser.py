"""Best-effort parser for SUBJECT / BODY / VARIATIONS / CTA campaign responses.

Model output is free text, so every marker is optional. A missing marker
leaves its field empty, except ``body``, which falls back to the whole
response so a draft is never entirely blank. Parsing never raises.
"""

import re
from typing import Optional

from marketmind_ai.schemas.generation import CampaignDraft


def _marker(name: str) -> re.Pattern:
    # Tolerates markdown emphasis such as "**BODY:**"
    return re.compile(rf"\**\b{name}[ \t]*:\**", re.IGNORECASE)


_SUBJECT = _marker("SUBJECT")
_BODY = _marker("BODY")
_VARIATIONS = _marker("VARIATIONS")
_CTA = _marker("CTA")
_ANY_MARKER = re.compile(r"^\s*\**\s*(?:SUBJECT|BODY|VARIATIONS|CTA)[ \t]*:", re.IGNORECASE)

_BLANK_LINE_RUN = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")
_BULLET = re.compile(r"^\s*[-•*]+\s*")


def _clean_inline(value: str) -> str:
    return value.strip().strip("*").strip()


def _after(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if match is None:
        return None
    return text[match.end():]


def _until(text: str, *terminators: re.Pattern) -> str:
    end = len(text)
    for pattern in terminators:
        match = pattern.search(text)
        if match is not None:
            end = min(end, match.start())
    return text[:end]


def _extract_subject(text: str) -> str:
    rest = _after(_SUBJECT, text)
    if rest is None:
        return ""
    lines = rest.split("\n")
    subject = _clean_inline(lines[0])
    if not subject and len(lines) > 1 and not _ANY_MARKER.match(lines[1]):
        subject = _clean_inline(lines[1])
    return subject


def _extract_body(text: str) -> str:
    rest = _after(_BODY, text)
    if rest is None:
        return text.strip()
    body = _until(rest, _VARIATIONS, _CTA)
    return _BLANK_LINE_RUN.sub("\n\n", body).strip()


def _extract_variations(text: str) -> list[str]:
    rest = _after(_VARIATIONS, text)
    if rest is None:
        return []
    section = _until(rest, _CTA)
    variations = []
    for line in section.splitlines():
        item = _BULLET.sub("", line).strip()
        if item:
            variations.append(item)
    return variations


def _extract_call_to_action(text: str) -> str:
    rest = _after(_CTA, text)
    if rest is None:
        return ""
    return " ".join(_clean_inline(line) for line in rest.splitlines() if line.strip()).strip()


def parse_campaign_draft(text: Optional[str]) -> CampaignDraft:
    """Split a model's campaign response into a CampaignDraft."""
    if not isinstance(text, str):
        text = "" if text is None else str(text)
    text = text.replace("\r\n", "\n")

    return CampaignDraft(
        subject=_extract_subject(text),
        body=_extract_body(text),
        variations=_extract_variations(text),
        call_to_action=_extract_call_to_action(text),
    )
