"""
Main entrypoint used by Docker and the ``stack-calculator`` console script.

This script:
- Loads the settings from ``CALC_*`` environment variables
- Applies host/port overrides given on the command line
- Connects both history stores and serves the HTTP API with uvicorn
"""

import argparse
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
import uvicorn

from stack_calculator.common.logger import configure_logging, logger
from stack_calculator.common.settings import Settings
from stack_calculator.server.app import build_service, create_app


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    host : str, optional
        Interface to bind, overrides ``CALC_HOST``.
    port : int, optional
        Port to listen on, overrides ``CALC_PORT``.
    """

    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)


def parse_args(argv: Optional[list[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(description="Stack calculator HTTP service")
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")

    args = parser.parse_args(argv)

    try:
        return CliArgs(host=args.host, port=args.port)
    except ValidationError as exc:
        parser.error(str(exc))


def load_settings(cli_args: CliArgs) -> Settings:
    """Read the environment settings and apply the command line overrides."""
    overrides = cli_args.model_dump(exclude_none=True)
    return Settings(**overrides)


def main() -> None:
    """
    Main function executed by Docker or the console script.
    """
    settings = load_settings(parse_args())
    configure_logging(settings.log_dir)

    app = create_app(build_service(settings))
    logger.info(f"🖥️ Starting calculator on {settings.host}:{settings.port} (id strategy: {settings.id_strategy})")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
