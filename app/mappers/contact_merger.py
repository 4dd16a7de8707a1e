from app.schemas.contact import Confidence, Contact

MIN_NAME_LENGTH = 3

# Optional fields filled first-non-empty-wins during merge
MERGE_FIELDS = (
    "email", "title", "company", "url", "phone",
    "linkedin", "instagram", "twitter", "tiktok", "followers",
)


def _is_empty(value: str | None) -> bool:
    return value is None or value.strip() == ""


def normalize_name(name: str | None) -> str:
    return (name or "").strip().casefold()


def is_valid_contact(contact: Contact) -> bool:
    return len(normalize_name(contact.name)) >= MIN_NAME_LENGTH


def merge_confidence(current: Confidence, incoming: Confidence) -> Confidence:
    """Raise to ``incoming`` only if it is high, or medium over low."""
    if incoming == Confidence.high:
        return Confidence.high
    if incoming == Confidence.medium and current == Confidence.low:
        return Confidence.medium
    return current


def merge_contacts(existing: Contact, incoming: Contact) -> Contact:
    """Fill the existing contact's empty fields from a later duplicate.

    Populated fields are never overwritten, regardless of confidence.
    """
    updates: dict[str, object] = {}
    for field in MERGE_FIELDS:
        old = getattr(existing, field)
        new = getattr(incoming, field)
        if _is_empty(old) and not _is_empty(new):
            updates[field] = new

    confidence = merge_confidence(existing.confidence, incoming.confidence)
    if confidence != existing.confidence:
        updates["confidence"] = confidence

    if not updates:
        return existing
    return existing.model_copy(update=updates)


def dedup_contacts(contacts: list[Contact]) -> list[Contact]:
    """Group by normalized name, keeping first-arrival order of groups."""
    merged: dict[str, Contact] = {}
    for contact in contacts:
        if not is_valid_contact(contact):
            continue
        key = normalize_name(contact.name)
        existing = merged.get(key)
        merged[key] = contact if existing is None else merge_contacts(existing, contact)
    return list(merged.values())


def rank_contacts(contacts: list[Contact]) -> list[Contact]:
    """Stable sort: high, then medium, then low."""
    return sorted(contacts, key=lambda c: c.confidence.rank)
