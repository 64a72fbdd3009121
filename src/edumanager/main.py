"""Application entry point for EduManager backend server."""

from edumanager.app import App
from edumanager.config import Config
from edumanager.logging import setup_logging
from edumanager.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
