import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from urllib.parse import urlparse

from app.mappers.query_builder import build_query, clean_title, has_music_context
from app.schemas.search import SearchResult
from app.schemas.social import DEFAULT_PLATFORMS, SocialPlatform, SocialProfile
from app.services.web_search import WebSearchService

logger = logging.getLogger(__name__)

_TITLE_SEPARATORS = (" | ", " - ", " • ")


def _segments(url: str) -> list[str]:
    try:
        path = urlparse(url).path
    except ValueError:
        return []
    return [s for s in path.split("/") if s]


def _at(segment: str | None) -> str:
    if not segment:
        return ""
    return segment if segment.startswith("@") else f"@{segment}"


def _youtube_handle(segs: list[str]) -> str:
    if not segs:
        return ""
    if segs[0].startswith("@"):
        return segs[0]
    return segs[1] if len(segs) > 1 else segs[0]


@dataclass(frozen=True)
class PlatformRule:
    scope: str  # site: operator target
    suffix: str  # appended only when the query has no music context
    is_profile: Callable[[str], bool]
    handle: Callable[[list[str]], str]
    context_suffix: str = ""  # appended when the query already has context


_RULES: dict[SocialPlatform, PlatformRule] = {
    SocialPlatform.instagram: PlatformRule(
        scope="instagram.com",
        suffix="music",
        is_profile=lambda url: not any(
            p in url for p in ("/p/", "/reel/", "/reels/", "/stories/", "/explore/")
        ),
        handle=lambda segs: _at(segs[0] if segs else None),
    ),
    SocialPlatform.tiktok: PlatformRule(
        scope="tiktok.com/@",
        suffix="music",
        is_profile=lambda url: "/@" in url and "/video/" not in url,
        handle=lambda segs: segs[0] if segs else "",
    ),
    SocialPlatform.twitter: PlatformRule(
        scope="x.com",
        suffix="music OR journalist OR curator OR blogger",
        is_profile=lambda url: "/status/" not in url,
        handle=lambda segs: _at(segs[0] if segs else None),
    ),
    SocialPlatform.youtube: PlatformRule(
        scope="youtube.com",
        suffix="music channel",
        context_suffix="channel",
        is_profile=lambda url: any(p in url for p in ("/channel/", "/c/", "/@")),
        handle=_youtube_handle,
    ),
    SocialPlatform.linkedin: PlatformRule(
        scope="linkedin.com/in",
        suffix="music entertainment PR",
        is_profile=lambda url: "/in/" in url,
        handle=lambda segs: segs[1] if len(segs) > 1 else "",
    ),
    SocialPlatform.soundcloud: PlatformRule(
        scope="soundcloud.com",
        suffix="",
        is_profile=lambda url: len(_segments(url)) == 1,
        handle=lambda segs: _at(segs[0] if segs else None),
    ),
    SocialPlatform.spotify: PlatformRule(
        scope="open.spotify.com/artist",
        suffix="",
        is_profile=lambda url: "/artist/" in url,
        handle=lambda segs: segs[1] if len(segs) > 1 else "",
    ),
}


def build_platform_query(platform: SocialPlatform, query: str) -> str:
    rule = _RULES[platform]
    suffix = rule.context_suffix if has_music_context(query) else rule.suffix
    return build_query(f"site:{rule.scope}", query, suffix)


def to_profile(platform: SocialPlatform, result: SearchResult) -> SocialProfile:
    rule = _RULES[platform]
    return SocialProfile(
        platform=platform,
        display_name=clean_title(result.title, _TITLE_SEPARATORS),
        profile_url=result.url,
        handle=rule.handle(_segments(result.url)),
        bio=result.snippet,
        source=f"Google (site:{platform})",
    )


def flatten(results: dict[SocialPlatform, list[SocialProfile]]) -> list[SocialProfile]:
    return [profile for profiles in results.values() for profile in profiles]


class SocialSearchService:
    def __init__(self, search: WebSearchService):
        self._search = search

    async def search_platform(
        self,
        platform: SocialPlatform | str,
        query: str,
        country_code: str = "ZA",
    ) -> list[SocialProfile]:
        """One domain-scoped search, filtered down to profile pages."""
        platform = SocialPlatform(platform)
        results = await self._search.search(build_platform_query(platform, query), country_code)
        rule = _RULES[platform]
        return [
            to_profile(platform, r)
            for r in results
            if rule.is_profile(r.url)
        ]

    async def search_all_platforms(
        self,
        query: str,
        country_code: str = "ZA",
        platforms: Iterable[SocialPlatform | str] = DEFAULT_PLATFORMS,
    ) -> dict[SocialPlatform, list[SocialProfile]]:
        """Search several platforms concurrently; a failing platform yields []."""
        selected: list[SocialPlatform] = []
        for p in platforms:
            try:
                platform = SocialPlatform(p)
            except ValueError:
                logger.warning("Ignoring unknown social platform %r", p)
                continue
            if platform not in selected:
                selected.append(platform)

        logger.info(
            "Social search on %s for %r in %s",
            ", ".join(selected), query, country_code,
        )
        gather_results = await asyncio.gather(
            *(self.search_platform(p, query, country_code) for p in selected),
            return_exceptions=True,
        )

        results: dict[SocialPlatform, list[SocialProfile]] = {}
        for platform, res in zip(selected, gather_results):
            if isinstance(res, BaseException):
                logger.warning("Social search on %s failed: %s", platform, res)
                results[platform] = []
            else:
                logger.info("Social search on %s: %d profiles", platform, len(res))
                results[platform] = res
        return results
