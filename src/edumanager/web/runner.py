"""Uvicorn server runner with custom configuration."""

import copy
from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from edumanager.app import App
from edumanager.config import Config
from edumanager.web.server import create_fastapi_app

ACCESS_LOG_FORMAT = '%(asctime)s - "%(request_line)s" %(status_code)s'
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def build_log_config() -> dict[str, Any]:
    """Uvicorn logging config with compact formats, leaving uvicorn's module default untouched."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = ACCESS_LOG_FORMAT
    log_config["formatters"]["default"]["fmt"] = DEFAULT_LOG_FORMAT
    return log_config


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server with compact access log lines."""
    fastapi_app = create_fastapi_app(app, config)
    uvicorn.run(fastapi_app, host=config.host, port=config.port, log_config=build_log_config(), access_log=True)
