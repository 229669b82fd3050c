"""Logging setup for MCP Issue Board.

All modules log under the ``mcp-issueboard`` hierarchy
(``mcp-issueboard.board.lifecycle``, ``mcp-issueboard.server.board`` ...), so
configuring the application logger once sets the level for every module.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..board.config import BoardConfig

APP_LOGGER_NAME = "mcp-issueboard"
LOG_FORMAT = "%(levelname)s - %(name)s - %(message)s"
NOT_PROVIDED = "Not Provided"

# MCP framework loggers that follow the application level.
_FRAMEWORK_LOGGERS = ("mcp.server", "mcp.server.lowlevel.server")


def setup_logging(level: int = logging.WARNING) -> logging.Logger:
    """
    Route all logging through a single stream handler on the root logger.

    Handlers installed earlier (by a previous call or by a library) are
    replaced.

    Args:
        level: The minimum logging level to display (default: WARNING)

    Returns:
        The application logger
    """
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    for name in (APP_LOGGER_NAME, *_FRAMEWORK_LOGGERS):
        logging.getLogger(name).setLevel(level)
    return logging.getLogger(APP_LOGGER_NAME)


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Hide all but the first and last ``keep_chars`` characters of a secret."""
    if not value:
        return NOT_PROVIDED
    visible = keep_chars if len(value) > keep_chars * 2 else 0
    if not visible:
        return "*" * len(value)
    return value[:visible] + "*" * (len(value) - 2 * visible) + value[-visible:]


def log_board_config(logger: logging.Logger, config: "BoardConfig") -> None:
    """
    Log the settings the board was started with.

    The identity provider secret is masked.

    Args:
        logger: The logger to write to
        config: The loaded board configuration
    """
    settings = {
        "seed file": config.seed_file,
        "project key": config.project_key,
        "identity provider": config.identity_api_url,
        "identity secret key": mask_sensitive(config.identity_secret_key),
    }
    for name, value in settings.items():
        logger.info(f"Board {name}: {value or NOT_PROVIDED}")
