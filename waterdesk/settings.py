import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

from waterdesk.models.tariff import SystemSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="WATERDESK_", extra="ignore")

    db_url: str = "sqlite:///waterdesk.db"

    log_level: str = "INFO"
    log_json: bool = False

    utility_name: str = "AGWA Water Services"
    assistant_name: str = "Agie"
    support_hotline: str = "1627-AGWA"

    oracle_api_key: str = ""
    oracle_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    oracle_model: str = "gemini-1.5-flash"
    oracle_timeout: float = 30.0
    oracle_structured_replies: bool = True

    chat_history_window: int = 20  # messages re-sent per turn, 0 = whole transcript

    staging_backend: str = "memory"
    staging_local_path: str = "./staging"

    fcda_percentage: float = 1.29
    environmental_charge_percentage: float = 25
    sewerage_charge_percentage_commercial: float = 32.85
    government_tax_percentage: float = 2
    vat_percentage: float = 12

    def system_settings(self) -> SystemSettings:
        return SystemSettings(
            fcda_percentage=self.fcda_percentage,
            environmental_charge_percentage=self.environmental_charge_percentage,
            sewerage_charge_percentage_commercial=self.sewerage_charge_percentage_commercial,
            government_tax_percentage=self.government_tax_percentage,
            vat_percentage=self.vat_percentage,
        )


settings = Settings()
