"""Application entry point for SalesDesk backend server."""

from salesdesk.app import App
from salesdesk.config import Config
from salesdesk.logging import setup_logging
from salesdesk.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
