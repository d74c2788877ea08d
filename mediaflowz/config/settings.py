from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BunnyStorageZone(BaseModel):
    """One Bunny.net storage zone and the vault folders routed to it."""

    name: str
    access_key: str = ""
    pull_zone_url: str = ""
    folders: list[str] = Field(default_factory=list)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    media_provider: str = "cloudinary"
    ignored_folders: list[str] = Field(default_factory=list)
    rename_with_note_prefix: bool = False

    http_timeout_seconds: int = 30
    http_video_timeout_seconds: int = 60
    http_retries: int = Field(default=2, ge=0)
    http_retry_delay_seconds: float = Field(default=1.0, ge=0)

    cloudflare_api_base_url: str = "https://api.cloudflare.com/client/v4"
    cloudflare_account_id: str = ""
    cloudflare_images_token: str = ""
    cloudflare_stream_token: str = ""
    cloudflare_custom_domain: str = ""
    cloudflare_default_variant: str = "public"
    cloudflare_delivery_hash: str = ""
    cloudflare_stream_customer_code: str = ""

    bunny_storage_host: str = "https://storage.bunnycdn.com"
    bunny_storage_zones: list[BunnyStorageZone] = Field(default_factory=list)
    bunny_default_storage_zone: str = ""
    bunny_use_folder_mapping: bool = True
    bunny_custom_cdns: dict[str, str] = Field(default_factory=dict)

    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_upload_preset: str = ""

    twicpics_domain: str = ""
    twicpics_api_key: str = ""
