from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Image host (Chevereto-style upload API)
    pic_api_url: str = "https://pic.in.th/api/1/upload"
    pic_api_key: str = ""
    pic_album_id: str = ""

    # Maileroo transactional email
    maileroo_api_url: str = "https://smtp.maileroo.com/api/v2/emails"
    maileroo_api_key: str = ""
    mail_from_address: str = ""
    mail_from_name: str = "My-Web"
    mail_footer: bool = True

    # Best-effort local copy of uploads
    save_local_copy: bool = False
    local_upload_dir: str = "uploads"

    upstream_timeout: Optional[float] = None
    log_level: str = "INFO"
    cors_origins: str = "*"

    class Config:
        env_file = ".env"
        frozen = True

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return settings
