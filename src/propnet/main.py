"""Entry point of the ``propnet`` console script."""

import uvicorn

from propnet.app import App
from propnet.config import Config
from propnet.logging import setup_logging
from propnet.web.server import create_fastapi_app


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    fastapi_app = create_fastapi_app(App(config), config)

    # log_config=None: uvicorn's loggers propagate to the handler set up above
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=None,
        proxy_headers=config.production,
        forwarded_allow_ips="*" if config.production else None,
        server_header=False,
    )


if __name__ == "__main__":
    main()
