from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    epsilon: Decimal = Field(Decimal("0.01"), alias="SPLITMINT_EPSILON", ge=0)
    max_group_members: int = Field(4, alias="SPLITMINT_MAX_GROUP_MEMBERS", ge=1)
    percent_penny_correction: bool = Field(True, alias="SPLITMINT_PERCENT_PENNY_CORRECTION")
    currency: str = Field("INR", alias="SPLITMINT_CURRENCY")
    log_level: str = Field("INFO", alias="SPLITMINT_LOG_LEVEL")

    @property
    def epsilon_cents(self) -> int:
        return int((self.epsilon * 100).to_integral_value())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
