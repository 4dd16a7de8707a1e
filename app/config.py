from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Web search backend
    search_backend: str = "serper"  # "serper" or "tavily"
    serper_api_key: str = ""
    tavily_api_key: str = ""

    # Provider credentials (empty = fallback path)
    apollo_api_key: str = ""
    linkedin_api_key: str = ""
    zoominfo_api_key: str = ""
    phantombuster_api_key: str = ""
    phantombuster_agent_id: str = ""

    request_timeout: float = 30.0
    provider_timeout: float = 60.0  # per pipeline, 0 disables
    log_level: str = "INFO"
