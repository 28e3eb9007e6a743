import logging
import sys

import httpx

logger = logging.getLogger("storec")


def enable_debug(level: int = logging.DEBUG) -> None:
    """Attach a stderr handler to the package logger."""
    if not any(getattr(h, "_storec", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handler._storec = True
        logger.addHandler(handler)
    logger.setLevel(level)


def _log_request(request: httpx.Request) -> None:
    logger.debug(f"> {request.method} {request.url}")


def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug(f"< {response.status_code} {request.method} {request.url}")


def debug_event_hooks() -> dict:
    """httpx event hooks tracing every request and response."""
    return {"request": [_log_request], "response": [_log_response]}
