"""Configuration management for the Fivetran automation toolkit."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .pagination import DEFAULT_PAGE_SIZE, check_page_size


class Settings(BaseSettings):
    """Configuration settings for the Fivetran API client."""

    # Fivetran credentials
    fivetran_api_key: str = Field(
        ...,
        description="API key generated for a Fivetran user"
    )
    fivetran_api_secret: str = Field(
        ...,
        description="API secret paired with the API key"
    )

    # API settings
    fivetran_api_version: int = Field(
        default=1,
        description="Version sent in the Accept header (application/json;version=N)"
    )
    fivetran_base_url: str = Field(
        default="https://api.fivetran.com/v1",
        description="Base URL of the Fivetran REST API"
    )

    # Pagination settings
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        description="Items requested per continuation page (the first page uses the API default)"
    )

    # Transport settings
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for each HTTP request"
    )

    @field_validator("fivetran_api_key", "fivetran_api_secret")
    @classmethod
    def strip_credentials(cls, v: str) -> str:
        if v:
            return v.strip()
        return v

    @field_validator("page_size")
    @classmethod
    def page_size_in_api_range(cls, v: int) -> int:
        return check_page_size(v)

    @field_validator("fivetran_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
