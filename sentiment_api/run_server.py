from __future__ import annotations

import logging

import uvicorn

from sentiment_api.settings import load_settings
from sentiment_api.web import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    s = load_settings()
    logging.basicConfig(
        level=s.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    app = create_app(settings=s)
    logger.info("Starting sentiment API: host=%s port=%s model=%s", s.api_host, s.api_port, s.sentiment_model_path)
    uvicorn.run(app, host=s.api_host, port=s.api_port, log_config=None)


if __name__ == "__main__":
    main()
