import os

import uvicorn

from dublinbikes.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_seed_source() -> None:
    """
    Fail fast when the snapshot seed file is missing, before uvicorn starts.
    URLs are not probed here; the store reports those on startup.
    """
    source = settings.seed_source
    if source.startswith(("http://", "https://")):
        return
    if not os.path.isfile(source):
        logger.error("Seed file %s not found; set BIKES_SEED_SOURCE to a station JSON file.", source)
        raise SystemExit(1)


if __name__ == "__main__":
    setup_logging(level=settings.log_level, service_name="dublinbikes")
    check_seed_source()

    uvicorn.run(
        "dublinbikes.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
