import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Site Hub"
    port: int = 3000
    log_level: str = "INFO"

    # Static page templates (homepage.html, index.html, ...)
    template_dir: str = "./site"
    # Per-run staging folders and zip archives
    publish_dir: str = "./data/publish"
    # Files copied by the fixed-set (emailed) publish; env: comma-separated or JSON list
    publish_files: Annotated[list[str], NoDecode] = ["index.html", "about.html", "contact.html", "style.css", "script.js"]
    # Bundle archives kept for download; older ones are pruned
    publish_keep: int = 5

    # "sqlite" or "supabase"
    page_store: str = "sqlite"
    database_path: str = "./data/pages.db"

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""        # anon/service_role key
    supabase_table: str = "pages"
    supabase_ca_file: str = ""    # optional CA bundle for TLS verification

    # SMTP (fixed-set publish)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = False    # implicit TLS (port 465)
    smtp_start_tls: bool = True
    smtp_timeout: int = 60
    mail_from: str = ""
    publish_recipient: str = ""

    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("publish_files", "cors_origins", mode="before")
    @classmethod
    def _split_list(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def mail_configured(self) -> bool:
        return bool(self.smtp_host and self.publish_recipient and (self.mail_from or self.smtp_username))


settings = Settings()


def get_settings() -> Settings:
    return settings
