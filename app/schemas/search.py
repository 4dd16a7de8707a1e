from pydantic import BaseModel


class SearchResult(BaseModel):
    model_config = {"frozen": True}

    title: str = ""
    url: str
    snippet: str = ""
    source: str  # "Google (Serper)" | "Tavily"
    position: int | None = None  # upstream rank, 1-based
    date: str | None = None
    image_url: str | None = None
