import logging
import sys

from loguru import logger
from rich.traceback import install as rich_tb_install

_LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss}</green> | '
    '<level>{level: <8}</level> | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - '
    '<level>{message}</level>'
)

_NOISEY_LOGGERS = (
    'httpx',
    'httpcore',
    'hpack',
    'asyncio',
)


class _InterceptHandler(logging.Handler):
    """
    Forwards stdlib log records (httpx, httpcore, asyncio)
    into loguru so there is a single sink to configure.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_lib_logger(
    *,
    level_name: str = "INFO",
    rich_tracebacks: bool = False,
) -> None:
    '''
    Configures logging for hostscope when it is run from the CLI,
    the resolver's per-provider and per-port failures are only
    visible here.

    Parameters
    ----------
    level_name : str, optional
        by default "INFO"
    rich_tracebacks : bool, optional
        by default False
    '''
    # loguru has levels (TRACE, SUCCESS) stdlib does not know about
    stdlib_level = logging.getLevelNamesMapping().get(level_name, logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.handlers = [_InterceptHandler()]
    root_logger.setLevel(stdlib_level)

    for handle in _NOISEY_LOGGERS:
        logging.getLogger(handle).handlers = [_InterceptHandler()]
        logging.getLogger(handle).setLevel(max(logging.WARNING, stdlib_level))

    logger.remove()
    logger.enable('hostscope')
    logger.add(
        sys.stderr,
        format=_LOG_FORMAT,
        level=level_name,
        colorize=True,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        catch=True,
    )
    if rich_tracebacks:
        rich_tb_install(show_locals=True, word_wrap=True)

    logger.debug('hostscope logger configured.')


def disable_lib_logger() -> None:
    '''
    Silences hostscope's loguru output, the default when
    it is imported as a library. `configure_lib_logger`
    turns it back on.
    '''
    logger.disable('hostscope')
