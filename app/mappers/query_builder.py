COUNTRY_NAMES = {
    "ZA": "South Africa",
    "UK": "UK",
    "GB": "UK",
    "US": "USA",
    "USA": "USA",
    "NG": "Nigeria",
    "GH": "Ghana",
    "KE": "Kenya",
    "DE": "Germany",
    "FR": "France",
    "AU": "Australia",
    "CA": "Canada",
    "JP": "Japan",
    "BR": "Brazil",
}

# Serper "gl" parameter per country code
SEARCH_REGIONS = {
    "ZA": "za", "UK": "uk", "GB": "uk", "USA": "us", "US": "us",
    "NG": "ng", "GH": "gh", "KE": "ke",
    "DE": "de", "FR": "fr", "AU": "au",
    "CA": "ca", "JP": "jp", "BR": "br",
}

PR_TITLES = [
    "curator", "journalist", "blogger", "DJ", "A&R", "PR",
    "publicist", "editor", "manager",
]

PR_INDUSTRIES = ["Music", "Entertainment", "Media", "Publishing"]

_MUSIC_KEYWORDS = (
    "music", "artist", "rapper", "dj", "producer", "label", "song", "album",
    "genre", "playlist", "curator", "radio", "hip-hop", "amapiano", "afrobeats",
    "gqom", "r&b", "pop", "rock", "jazz", "dance", "dancer", "singer",
    "songwriter", "entertainment", "media", "press", "journalist", "blogger",
    "influencer", "content creator", "promoter", "festival", "concert",
)


def country_name(country_code: str) -> str:
    """Resolve a country code to the name used in search phrases.

    Unknown codes are returned as given.
    """
    code = (country_code or "").strip()
    return COUNTRY_NAMES.get(code.upper(), code)


def search_region(country_code: str) -> str:
    return SEARCH_REGIONS.get((country_code or "").strip().upper(), "us")


def has_music_context(query: str) -> bool:
    lower = query.lower()
    return any(k in lower for k in _MUSIC_KEYWORDS)


def build_query(*parts: str | None) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def clean_title(title: str, separators: tuple[str, ...] = (" | ", " - ")) -> str:
    """Strip trailing site-name suffixes from a search result title."""
    name = title or ""
    for sep in separators:
        name = name.split(sep)[0]
    return name.strip()


def title_suffix(title: str, separator: str = " | ") -> str | None:
    """Last segment of a title, e.g. the site or company name."""
    if separator not in (title or ""):
        return None
    suffix = title.split(separator)[-1].strip()
    return suffix or None


# Full names where the short display name differs
_FULL_COUNTRY_NAMES = {"UK": "United Kingdom", "GB": "United Kingdom", "US": "United States", "USA": "United States"}


def full_country_name(country_code: str) -> str | None:
    """Full lower-case country name for known codes, None otherwise."""
    code = (country_code or "").strip().upper()
    if code not in COUNTRY_NAMES:
        return None
    return _FULL_COUNTRY_NAMES.get(code, COUNTRY_NAMES[code]).lower()
