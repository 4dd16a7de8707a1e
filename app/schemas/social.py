from enum import StrEnum

from pydantic import BaseModel


class SocialPlatform(StrEnum):
    instagram = "instagram"
    tiktok = "tiktok"
    twitter = "twitter"
    youtube = "youtube"
    linkedin = "linkedin"
    soundcloud = "soundcloud"
    spotify = "spotify"


DEFAULT_PLATFORMS: tuple[SocialPlatform, ...] = (
    SocialPlatform.instagram,
    SocialPlatform.tiktok,
    SocialPlatform.twitter,
    SocialPlatform.linkedin,
)


class SocialProfile(BaseModel):
    platform: SocialPlatform
    display_name: str
    profile_url: str
    handle: str = ""  # derived from URL path, "" when not derivable
    bio: str = ""  # search snippet
    source: str  # e.g. "Google (site:instagram)"
