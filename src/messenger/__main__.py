"""
Run the messenger API.

Usage:
    python -m messenger

    MESSENGER_STORE_BACKEND=memory MESSENGER_PORT=9001 python -m messenger
    MESSENGER_MONGO_URI=mongodb://db:27017 python -m messenger
"""

import uvicorn

from messenger.api.app import create_app
from messenger.bootstrap import build_controller
from messenger.config import settings
from messenger.utils.logging import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    app = create_app(build_controller(settings), connect_timeout=settings.CONNECT_TIMEOUT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
