import logging

from waterdesk.oracle.base import TextOracle
from waterdesk.settings import settings

logger = logging.getLogger(__name__)


def get_oracle() -> TextOracle:
    from waterdesk.oracle.gemini import GeminiOracle

    logger.info("Using oracle model: %s", settings.oracle_model)
    return GeminiOracle(
        api_key=settings.oracle_api_key,
        model=settings.oracle_model,
        base_url=settings.oracle_base_url,
        timeout=settings.oracle_timeout,
    )
