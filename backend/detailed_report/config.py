import os
from typing import Optional


class Settings:
    """Simple settings wrapper that reads from environment variables.

    Kept as a plain class (no pydantic-settings) so the service only needs
    pydantic itself at runtime.
    """

    def __init__(self) -> None:
        self.app_name: str = os.getenv("APP_NAME", "Relatório Detalhado")
        self.environment: str = os.getenv("ENV", "dev")
        # Upstream distributor API. Anything that is not http(s) selects the
        # local stub data source.
        self.report_api_url: str = os.getenv("REPORT_API_URL", "stub://local")
        self.report_api_token: Optional[str] = os.getenv("REPORT_API_TOKEN")
        self.report_api_timeout: float = float(
            os.getenv("REPORT_API_TIMEOUT", "30"))
        raw_location = os.getenv("REPORT_LOCATION_ID")
        self.report_location_id: Optional[int] = (
            int(raw_location) if raw_location else None)
        self.print_settle_ms: int = int(os.getenv("PRINT_SETTLE_MS", "300"))
        self.prepared_by: str = os.getenv("PREPARED_BY", "Sistema SISGÁS")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def uses_http_source(self) -> bool:
        return bool(self.report_api_url and self.report_api_url.startswith('http'))


settings = Settings()
