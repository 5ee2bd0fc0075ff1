"""
Loguru setup shared by the replay script and any host runtime embedding the engine.
"""

import sys

from loguru import logger

from protective_put.config.hedge_config import RuntimeConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - <level>{message}</level>"
)


def configure_logging(runtime: RuntimeConfig, verbose: bool = False) -> None:
    """
    Replace loguru's default handler with a console sink and a rotating file sink.

    Args:
        runtime: Runtime configuration (level, file path, rotation)
        verbose: Force DEBUG on the console sink
    """
    logger.remove()
    logger.configure(extra={"component": "main"})

    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else runtime.log_level,
        format=CONSOLE_FORMAT,
    )

    if runtime.log_file:
        log_config = runtime.get_log_config()
        logger.add(
            runtime.log_file,
            rotation=log_config["rotation"],
            retention=log_config["retention"],
            compression=log_config["compression"],
            level=log_config["level"],
            format=log_config["format"],
        )
