"""Campaign business rules applied to generated drafts."""

from typing import List, Optional

from marketmind_ai.schemas.generation import CampaignDraft, ContentType

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
SUBJECT_MAX_LENGTH = 200
BODY_MAX_LENGTH = 50_000

CONTENT_TYPES = tuple(ct.value for ct in ContentType)


def validate_campaign(name: Optional[str], campaign_type: Optional[str], draft: CampaignDraft) -> List[str]:
    """Return every rule the campaign breaks; an empty list means valid."""
    errors = []

    if not name or not name.strip():
        errors.append("Campaign name is required")
    elif len(name.strip()) < NAME_MIN_LENGTH:
        errors.append(f"Campaign name must be at least {NAME_MIN_LENGTH} characters")
    elif len(name) > NAME_MAX_LENGTH:
        errors.append("Campaign name too long")

    if not campaign_type:
        errors.append("Campaign type is required")
    elif campaign_type not in CONTENT_TYPES:
        errors.append(f"Campaign type must be one of: {', '.join(CONTENT_TYPES)}")

    if len(draft.subject) > SUBJECT_MAX_LENGTH:
        errors.append(f"Subject line must be {SUBJECT_MAX_LENGTH} characters or less")

    if len(draft.body) > BODY_MAX_LENGTH:
        errors.append("Content body must be 50,000 characters or less")

    return errors


def derive_campaign_name(subject: str, prompt: str, limit: int = 40) -> str:
    """Subject line when there is one, otherwise the start of the prompt."""
    if subject.strip():
        return subject.strip()
    prompt = prompt.strip()
    return prompt[:limit] + "..." if len(prompt) > limit else prompt
