import asyncio
import ipaddress
import logging
import re
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from app.schemas.page import CompanyInfo, ExtractedPageData, PagePerson, SocialLinks

logger = logging.getLogger(__name__)

_MAX_BODY = 2 * 1024 * 1024  # 2 MB
_TIMEOUT = 10.0
_MAX_REDIRECTS = 5
_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MAX_BATCH = 10
MAX_TEXT_PEOPLE = 10

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

# Placeholder addresses and asset filenames that look like emails
_PLACEHOLDER_DOMAINS = frozenset({"example.com", "domain.com", "test.com", "email.com"})
_PLACEHOLDER_LOCALS = frozenset({"yourname", "name", "user"})
_ASSET_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".css", ".js")
_RETINA_MARKERS = ("@2x", "@3x")

_PHONE_RE = re.compile(r"(?:\+?\d[\d\s\-().]{7,}\d)")
_MIN_PHONE_DIGITS = 10

_ADDRESS_RE = re.compile(
    r"\b\d{1,5}\s+(?:[A-Z][a-zA-Z]+\s){1,4}"
    r"(?:Street|St|Road|Rd|Avenue|Ave|Drive|Dr|Lane|Ln|Boulevard|Blvd|Way|Place|Pl)\b"
    r"\.?(?:,\s*[A-Z][a-zA-Z ]+){0,3}"
)

# "Thandi Nkosi, Music Editor"
_PERSON_TEXT_RE = re.compile(
    r"\b([A-Z][a-z]+ [A-Z][a-z]+),\s+([A-Z][A-Za-z&]*(?: [A-Z][A-Za-z&]*){0,3})"
)

_SOCIAL_HOSTS = {
    "linkedin": ("linkedin.com",),
    "twitter": ("twitter.com", "x.com"),
    "facebook": ("facebook.com",),
}

# Tried in order, first family with a match wins
_PEOPLE_SELECTORS = (
    '[itemtype*="Person"]',
    ".team-member, .member",
    ".staff, .staff-member",
    '[class*="team"], [class*="author"], .person',
)
_NAME_SELECTOR = '[itemprop="name"], .name, h2, h3, h4, h5'
_TITLE_SELECTOR = '[itemprop="jobTitle"], .title, .position, .role, .job-title'

_BLOCKED_HOSTS = frozenset({
    "localhost", "metadata", "metadata.google", "metadata.google.internal",
})
_CGNAT = ipaddress.ip_network("100.64.0.0/10")


def is_fetchable_url(url: str) -> bool:
    """Reject non-HTTP schemes and private, loopback or metadata hosts."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    host = (parsed.hostname or "").lower()
    if not host or host in _BLOCKED_HOSTS:
        return False
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return True
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or (ip.version == 4 and ip in _CGNAT)
    )


def _is_blocked_email(email: str) -> bool:
    lower = email.lower()
    if any(marker in lower for marker in _RETINA_MARKERS):
        return True
    local, _, domain = lower.rpartition("@")
    return (
        domain in _PLACEHOLDER_DOMAINS
        or local in _PLACEHOLDER_LOCALS
        or domain.endswith(_ASSET_SUFFIXES)
    )


def _digits_only(phone: str) -> str:
    return "".join(c for c in phone if c.isdigit())


def extract_emails(*texts: str) -> list[str]:
    seen: set[str] = set()
    emails: list[str] = []
    for text in texts:
        for match in _EMAIL_RE.findall(text):
            email = match.lower().rstrip(".")
            if email not in seen and not _is_blocked_email(email):
                seen.add(email)
                emails.append(email)
    return emails


def extract_phones(*texts: str) -> list[str]:
    seen: set[str] = set()
    phones: list[str] = []
    for text in texts:
        for match in _PHONE_RE.findall(text):
            digits = _digits_only(match)
            if len(digits) < _MIN_PHONE_DIGITS or digits in seen:
                continue
            seen.add(digits)
            phones.append(match.strip())
    return phones


def _text(el: Tag | None) -> str | None:
    if el is None:
        return None
    value = " ".join(el.get_text(separator=" ").split())
    return value or None


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return tag["content"].strip() or None
    return None


class PageExtractorService:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def extract(self, url: str) -> ExtractedPageData:
        """Fetch a page and mine it for contact signals. Best-effort, never raises."""
        try:
            return await self._do_extract(url)
        except Exception:
            logger.exception("Page extraction failed for %s", url)
            return ExtractedPageData.empty(url)

    async def extract_many(self, urls: list[str]) -> dict[str, ExtractedPageData]:
        """Extract up to MAX_BATCH URLs concurrently into a url -> data map."""
        batch = list(dict.fromkeys(urls))[:MAX_BATCH]
        results = await asyncio.gather(
            *(self.extract(url) for url in batch),
            return_exceptions=True,
        )
        extracted: dict[str, ExtractedPageData] = {}
        for url, res in zip(batch, results):
            if isinstance(res, BaseException):
                logger.warning("Extraction task for %s failed: %s", url, res)
                extracted[url] = ExtractedPageData.empty(url)
            else:
                extracted[url] = res
        return extracted

    async def _do_extract(self, url: str) -> ExtractedPageData:
        html = await self._fetch_page(url)
        if not html:
            return ExtractedPageData.empty(url)
        return self.parse(url, html)

    def parse(self, url: str, html: str) -> ExtractedPageData:
        soup = BeautifulSoup(html, "html.parser")
        company_info = self._extract_company_info(soup)

        for tag in soup(["script", "style", "noscript", "iframe"]):
            tag.decompose()
        text = " ".join(soup.get_text(separator=" ").split())

        emails = self._extract_emails(soup, text, html)
        phones = self._extract_phones(soup, text)
        company_info.address = self._extract_address(text)

        data = ExtractedPageData(
            url=url,
            emails=emails,
            phones=phones,
            social_links=self._extract_social_links(soup),
            company_info=company_info,
            people=self._extract_people(soup, text),
        )
        logger.debug(
            "Extracted from %s: %d emails, %d phones, %d people",
            url, len(data.emails), len(data.phones), len(data.people),
        )
        return data

    async def _fetch_page(self, url: str) -> str | None:
        """Fetch a page, return HTML string or None."""
        target = url
        # Redirects are followed by hand so every hop passes the host check
        for _ in range(_MAX_REDIRECTS + 1):
            if not is_fetchable_url(target):
                logger.warning("Refusing to fetch non-public URL %s", target)
                return None
            try:
                resp = await self._client.get(
                    target,
                    follow_redirects=False,
                    timeout=_TIMEOUT,
                    headers={
                        "User-Agent": _USER_AGENT,
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                        "Accept-Language": "en-US,en;q=0.5",
                    },
                )
                if resp.is_redirect:
                    location = resp.headers.get("location")
                    if not location:
                        return None
                    target = urljoin(str(resp.url), location)
                    continue
                resp.raise_for_status()
            except (httpx.HTTPError, httpx.TimeoutException):
                logger.debug("Failed to fetch %s", target)
                return None
            break
        else:
            logger.debug("Too many redirects fetching %s", url)
            return None

        content_type = resp.headers.get("content-type", "")
        if "text/html" not in content_type:
            logger.debug("Skipping non-HTML %s (content-type: %s)", url, content_type)
            return None

        if len(resp.content) > _MAX_BODY:
            logger.debug("Skipping oversized page %s (%d bytes)", url, len(resp.content))
            return None

        return resp.text

    def _extract_emails(self, soup: BeautifulSoup, text: str, html: str) -> list[str]:
        """mailto: links first, then regex over rendered text and raw markup."""
        mailtos = []
        for a in soup.find_all("a", href=True):
            href = a["href"]
            if href.lower().startswith("mailto:"):
                mailtos.append(href[7:].split("?")[0].strip())
        return extract_emails(" ".join(mailtos), text, html)

    def _extract_phones(self, soup: BeautifulSoup, text: str) -> list[str]:
        tels = [
            a["href"][4:].strip()
            for a in soup.find_all("a", href=True)
            if a["href"].lower().startswith("tel:")
        ]
        return extract_phones(*tels, text)

    def _extract_social_links(self, soup: BeautifulSoup) -> SocialLinks:
        found: dict[str, str] = {}
        for a in soup.find_all("a", href=True):
            href = a["href"].strip()
            host = (urlparse(href).hostname or "").lower()
            if not host:
                continue
            for platform, domains in _SOCIAL_HOSTS.items():
                if platform in found:
                    continue
                if any(host == d or host.endswith("." + d) for d in domains):
                    found[platform] = href
        return SocialLinks(**found)

    def _extract_company_info(self, soup: BeautifulSoup) -> CompanyInfo:
        name = (
            _meta_content(soup, property="og:site_name")
            or _meta_content(soup, name="application-name")
        )
        if not name and soup.title and soup.title.string:
            name = soup.title.string.split("|")[0].split("-")[0].strip() or None

        description = (
            _meta_content(soup, name="description")
            or _meta_content(soup, property="og:description")
        )
        return CompanyInfo(name=name, description=description)

    @staticmethod
    def _extract_address(text: str) -> str | None:
        m = _ADDRESS_RE.search(text)
        return m.group(0).strip() if m else None

    def _extract_people(self, soup: BeautifulSoup, text: str) -> list[PagePerson]:
        for selector in _PEOPLE_SELECTORS:
            people = [
                person
                for el in soup.select(selector)
                if (person := self._person_from_element(el)) is not None
            ]
            if people:
                return self._dedup_people(people)

        people = []
        for name, title in _PERSON_TEXT_RE.findall(text):
            people.append(PagePerson(name=name, title=title))
            if len(people) >= MAX_TEXT_PEOPLE:
                break
        return self._dedup_people(people)

    @staticmethod
    def _person_from_element(el: Tag) -> PagePerson | None:
        name = _text(el.select_one(_NAME_SELECTOR))
        if not name or not (3 <= len(name) < 100):
            return None

        title = _text(el.select_one(_TITLE_SELECTOR))
        if title == name:
            title = None

        email = None
        mailto = el.select_one('a[href^="mailto:"]')
        if mailto:
            email = mailto["href"][7:].split("?")[0].strip().lower() or None
            if email and _is_blocked_email(email):
                email = None

        linkedin = el.select_one('a[href*="linkedin.com"]')
        return PagePerson(
            name=name,
            title=title,
            email=email,
            linkedin_url=linkedin["href"] if linkedin else None,
        )

    @staticmethod
    def _dedup_people(people: list[PagePerson]) -> list[PagePerson]:
        seen: set[str] = set()
        unique: list[PagePerson] = []
        for person in people:
            key = person.name.casefold()
            if key not in seen:
                seen.add(key)
                unique.append(person)
        return unique
