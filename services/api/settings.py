# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import BaseModel, ConfigDict, Field, field_validator
import base64
from typing import List, Literal
from pathlib import Path

CsvParserName = Literal["legacy", "rfc4180"]


def tab_from_range(a1_range: str) -> str:
    """Worksheet title of an A1 range: "'My Tab'!A:D" -> "My Tab", "A:D" -> "Sheet1"."""
    if "!" not in a1_range:
        return "Sheet1"
    return a1_range.split("!", 1)[0].strip("'")


class SheetConfig(BaseModel):
    """
    Everything the fetcher / appender need to talk to the spreadsheet.
    Built from Settings once and passed in explicitly, so core code never
    reads the environment itself.
    """
    sheet_id: str
    gid: str = "0"
    append_range: str = "Sheet1!A:D"
    api_key: str = ""
    service_account_json: str = ""
    csv_parser: CsvParserName = "legacy"
    user_agent: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

    @property
    def has_write_credential(self) -> bool:
        return bool(self.api_key or self.service_account_json)

    @property
    def tab_name(self) -> str:
        return tab_from_range(self.append_range)


class Settings(BaseSettings):
    # Spreadsheet settings
    # SHEET_ID is the part between /d/ and /edit in the sheet URL
    sheet_id: str = "1Ne_97lKivp4f3zFtbY7JFbyhzwrHbEVy_TM2MZSEN_E"
    sheet_gid: str = "0"
    # The tab name used for appends and by core.sheet_setup comes from this range
    sheet_append_range: str = "Sheet1!A:D"

    # Write credentials: either an API key (REST append) or a service account
    google_api_key: str = ""
    google_sa_json: str = ""
    google_sa_json_base64: str = ""

    # false = read-only deployment (every non-GET on /api/todos answers 405)
    write_enabled: bool = True

    # "legacy" (split on commas, strip quotes) or "rfc4180" (stdlib csv reader)
    csv_parser: CsvParserName = Field(default="legacy", description="CSV tokenizer to use for the export")

    source_label: str = "Real Google Sheets"

    # CORS settings
    allowed_origins: str = "*"

    log_level: str = "INFO"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    @field_validator("csv_parser", mode="before")
    @classmethod
    def _normalize_csv_parser(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def sheet_tab_name(self) -> str:
        return tab_from_range(self.sheet_append_range)

    def resolved_google_sa_json(self) -> str:
        """
        Return the service account JSON as a path or inline JSON string.
        GOOGLE_SA_JSON_BASE64 wins over GOOGLE_SA_JSON when both are set.
        """
        if self.google_sa_json_base64:
            return base64.b64decode(self.google_sa_json_base64).decode("utf-8")
        return self.google_sa_json

    def sheet_config(self) -> SheetConfig:
        return SheetConfig(
            sheet_id=self.sheet_id,
            gid=self.sheet_gid,
            append_range=self.sheet_append_range,
            api_key=self.google_api_key,
            service_account_json=self.resolved_google_sa_json(),
            csv_parser=self.csv_parser,
        )

    def sheet_url(self) -> str:
        return f"https://docs.google.com/spreadsheets/d/{self.sheet_id}/edit"

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
