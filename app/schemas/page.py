from pydantic import BaseModel


class SocialLinks(BaseModel):
    linkedin: str | None = None
    twitter: str | None = None  # twitter.com or x.com
    facebook: str | None = None


class CompanyInfo(BaseModel):
    name: str | None = None
    description: str | None = None
    address: str | None = None


class PagePerson(BaseModel):
    name: str
    title: str | None = None
    email: str | None = None
    linkedin_url: str | None = None


class ExtractedPageData(BaseModel):
    url: str
    emails: list[str] = []  # lower-cased, de-duplicated, first-seen order
    phones: list[str] = []  # de-duplicated by digits
    social_links: SocialLinks = SocialLinks()
    company_info: CompanyInfo = CompanyInfo()
    people: list[PagePerson] = []

    @classmethod
    def empty(cls, url: str) -> "ExtractedPageData":
        return cls(url=url)

    @property
    def is_empty(self) -> bool:
        return not (
            self.emails
            or self.phones
            or self.people
            or any(self.social_links.model_dump().values())
            or any(self.company_info.model_dump().values())
        )
