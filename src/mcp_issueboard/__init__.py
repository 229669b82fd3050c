import asyncio
import logging
import os
import sys

import click
from dotenv import load_dotenv

from mcp_issueboard.utils.io import is_env_truthy
from mcp_issueboard.utils.logging import setup_logging

__version__ = "0.1.0"

# Initialize logging with appropriate level
logging_level = logging.WARNING
if is_env_truthy("MCP_VERBOSE"):
    logging_level = logging.DEBUG

logger = setup_logging(logging_level)


@click.command()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="Transport type (stdio, sse, or streamable-http)",
)
@click.option(
    "--port",
    default=8000,
    help="Port to listen on for SSE or Streamable HTTP transport",
)
@click.option(
    "--host",
    default="0.0.0.0",  # noqa: S104
    help="Host to bind to for SSE or Streamable HTTP transport (default: 0.0.0.0)",
)
@click.option(
    "--path",
    default="/mcp",
    help="Path for Streamable HTTP transport (e.g., /mcp).",
)
@click.option(
    "--seed-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file preloading issues, sprints and users",
)
@click.option("--default-reporter-id", help="Reporter for issues created without one")
@click.option("--default-creator-id", help="Creator for issues created without one")
@click.option("--clerk-secret-key", help="Secret key of the identity provider")
@click.option(
    "--read-only",
    is_flag=True,
    help="Run in read-only mode (disables all write operations)",
)
@click.option(
    "--enabled-tools",
    help="Comma-separated list of tools to enable (enables all if not specified)",
)
def main(
    verbose: int,
    env_file: str | None,
    transport: str,
    port: int,
    host: str,
    path: str | None,
    seed_file: str | None,
    default_reporter_id: str | None,
    default_creator_id: str | None,
    clerk_secret_key: str | None,
    read_only: bool,
    enabled_tools: str | None,
) -> None:
    """MCP Issue Board Server - sprint backlogs and boards for MCP

    Issues live in sprints and status columns, nest under parent issues and
    are decorated with user identities from the local user store and,
    when configured, the external identity provider.
    """
    if verbose == 1:
        current_logging_level = logging.INFO
    elif verbose >= 2:  # -vv or more
        current_logging_level = logging.DEBUG
    elif is_env_truthy("MCP_VERY_VERBOSE"):
        current_logging_level = logging.DEBUG
    elif is_env_truthy("MCP_VERBOSE"):
        current_logging_level = logging.INFO
    else:
        current_logging_level = logging.WARNING

    global logger
    logger = setup_logging(current_logging_level)
    logger.debug(f"Logging level set to: {logging.getLevelName(current_logging_level)}")

    def was_option_provided(ctx: click.Context, param_name: str) -> bool:
        return ctx.get_parameter_source(param_name) not in (
            click.core.ParameterSource.DEFAULT_MAP,
            click.core.ParameterSource.DEFAULT,
        )

    if env_file:
        logger.debug(f"Loading environment from file: {env_file}")
        load_dotenv(env_file, override=True)
    else:
        logger.debug("Attempting to load environment from default .env file if it exists")
        load_dotenv(override=True)

    click_ctx = click.get_current_context(silent=True)

    # Transport precedence
    final_transport = os.getenv("TRANSPORT", "stdio").lower()
    if click_ctx and was_option_provided(click_ctx, "transport"):
        final_transport = transport
    if final_transport not in ["stdio", "sse", "streamable-http"]:
        logger.warning(
            f"Invalid transport '{final_transport}' from env/default, using 'stdio'."
        )
        final_transport = "stdio"
    logger.debug(f"Final transport determined: {final_transport}")

    # Port precedence
    final_port = 8000
    port_env = os.getenv("PORT")
    if port_env and port_env.isdigit():
        final_port = int(port_env)
    if click_ctx and was_option_provided(click_ctx, "port"):
        final_port = port

    # Host precedence
    final_host = os.getenv("HOST", "0.0.0.0")  # noqa: S104
    if click_ctx and was_option_provided(click_ctx, "host"):
        final_host = host

    # Path precedence
    final_path: str | None = os.getenv("STREAMABLE_HTTP_PATH", None)
    if click_ctx and was_option_provided(click_ctx, "path"):
        final_path = path

    # Set env vars for downstream config
    overrides = {
        "enabled_tools": ("ENABLED_TOOLS", enabled_tools),
        "seed_file": ("ISSUEBOARD_SEED_FILE", seed_file),
        "default_reporter_id": ("DEFAULT_REPORTER_ID", default_reporter_id),
        "default_creator_id": ("DEFAULT_CREATOR_ID", default_creator_id),
        "clerk_secret_key": ("CLERK_SECRET_KEY", clerk_secret_key),
        "read_only": ("READ_ONLY_MODE", str(read_only).lower()),
    }
    for param_name, (env_name, value) in overrides.items():
        if click_ctx and was_option_provided(click_ctx, param_name) and value:
            os.environ[env_name] = value

    from mcp_issueboard.servers import main_mcp

    run_kwargs = {
        "transport": final_transport,
    }

    if final_transport == "stdio":
        logger.info("Starting server with STDIO transport.")
    elif final_transport in ["sse", "streamable-http"]:
        run_kwargs["host"] = final_host
        run_kwargs["port"] = final_port
        run_kwargs["log_level"] = logging.getLevelName(current_logging_level).lower()

        if final_path is not None:
            run_kwargs["path"] = final_path

        logger.info(
            f"Starting server with {final_transport.upper()} transport on "
            f"http://{final_host}:{final_port}{final_path or ''}"
        )
    else:
        logger.error(
            f"Invalid transport type '{final_transport}' determined. Cannot start server."
        )
        sys.exit(1)

    asyncio.run(main_mcp.run_async(**run_kwargs))


__all__ = ["main", "__version__"]

if __name__ == "__main__":
    main()
