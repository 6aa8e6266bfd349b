from locker.utils.logging import get_logger, setup_logging
from locker.utils.api_response import ok, created
from locker.utils.base import generate_secret_key


__all__= [
    "get_logger",
    "setup_logging",
    "ok",
    "created",
    "generate_secret_key",
]
