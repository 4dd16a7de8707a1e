from app.mappers.contact_merger import (
    dedup_contacts,
    is_valid_contact,
    merge_confidence,
    merge_contacts,
    rank_contacts,
)
from app.schemas.contact import Confidence, Contact


def _c(name, confidence=Confidence.low, source="test", **fields):
    return Contact(name=name, source=source, confidence=confidence, **fields)


def test_first_email_wins():
    merged = merge_contacts(_c("Jane Doe", email="j@x.com"), _c("Jane Doe", email="jane@y.com"))

    assert merged.email == "j@x.com"


def test_empty_fields_filled_from_later_duplicate():
    existing = _c("Jane Doe", email="j@x.com", title="")
    incoming = _c("Jane Doe", title="Editor", instagram="https://instagram.com/jane", followers="900")

    merged = merge_contacts(existing, incoming)

    assert merged.title == "Editor"
    assert merged.instagram == "https://instagram.com/jane"
    assert merged.followers == "900"
    assert merged.source == "test"


def test_high_confidence_does_not_overwrite_fields():
    existing = _c("Jane Doe", Confidence.low, email="j@x.com")
    incoming = _c("Jane Doe", Confidence.high, email="verified@y.com")

    merged = merge_contacts(existing, incoming)

    assert merged.email == "j@x.com"
    assert merged.confidence == Confidence.high


def test_merge_confidence_rules():
    assert merge_confidence(Confidence.low, Confidence.high) == Confidence.high
    assert merge_confidence(Confidence.medium, Confidence.high) == Confidence.high
    assert merge_confidence(Confidence.low, Confidence.medium) == Confidence.medium
    assert merge_confidence(Confidence.high, Confidence.medium) == Confidence.high
    assert merge_confidence(Confidence.medium, Confidence.low) == Confidence.medium


def test_unchanged_merge_returns_existing():
    existing = _c("Jane Doe", Confidence.high, email="j@x.com")

    assert merge_contacts(existing, _c("Jane Doe")) is existing


def test_short_names_are_invalid():
    assert not is_valid_contact(_c("  Al "))
    assert is_valid_contact(_c("Ali"))


def test_dedup_groups_by_normalized_name():
    contacts = [
        _c("Jane Doe", email="j@x.com"),
        _c("Bob Smith"),
        _c("  JANE DOE", Confidence.medium, phone="+27 11 555 0199"),
        _c("Al"),
        _c(""),
    ]

    result = dedup_contacts(contacts)

    assert [c.name for c in result] == ["Jane Doe", "Bob Smith"]
    assert result[0].phone == "+27 11 555 0199"
    assert result[0].confidence == Confidence.medium


def test_rank_is_stable_within_tier():
    contacts = [
        _c("Low A"),
        _c("High A", Confidence.high),
        _c("Mid A", Confidence.medium),
        _c("Low B"),
        _c("High B", Confidence.high),
    ]

    assert [c.name for c in rank_contacts(contacts)] == [
        "High A", "High B", "Mid A", "Low A", "Low B",
    ]
