from __future__ import annotations

import logging

import uvicorn

from api_docs.config import get_settings


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("api_docs.server_main")

    logger.info(
        "server_process_starting host=%s port=%s app_env=%s",
        settings.server_host,
        settings.server_port,
        settings.app_env,
    )
    uvicorn.run(
        "api_docs.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
        proxy_headers=settings.rate_limit_trust_proxy_headers,
    )
    logger.info("server_process_stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
