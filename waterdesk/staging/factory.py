import logging

from waterdesk.settings import settings
from waterdesk.staging.base import StagingArea

logger = logging.getLogger(__name__)


def get_staging_area() -> StagingArea:
    backend = settings.staging_backend

    if backend == "memory":
        from waterdesk.staging.memory import MemoryStagingArea

        logger.info("Using staging backend: memory")
        return MemoryStagingArea()

    if backend == "local":
        from waterdesk.staging.local import LocalStagingArea

        logger.info("Using staging backend: local path=%s", settings.staging_local_path)
        return LocalStagingArea(settings.staging_local_path)

    raise ValueError(f"Unsupported staging backend: {backend}")
