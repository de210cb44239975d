"""Run the learnpath API with ``python -m server``."""

import uvicorn

from learnpath.utils.logging_config import get_logger
from server.server_config import BACKEND, HOST, PORT, RELOAD

logger = get_logger(__name__)


def main() -> None:
    logger.info(
        "Starting learnpath server",
        extra={"host": HOST, "port": PORT, "backend": BACKEND, "reload": RELOAD},
    )
    if BACKEND == "memory":
        logger.warning("Memory backend selected; paths are lost when the server stops")

    # Output goes through the handlers installed by get_logger, not uvicorn's own config.
    uvicorn.run("server.main:app", host=HOST, port=PORT, reload=RELOAD, log_config=None)


if __name__ == "__main__":
    main()
