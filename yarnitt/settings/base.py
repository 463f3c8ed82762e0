# yarnitt/settings/base.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class YarnittBaseSettings(BaseSettings):
    """Common loading rules: environment first, then .env in the working directory."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
