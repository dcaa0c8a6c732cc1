import logging
import re
from typing import Iterable


class RedactingFilter(logging.Filter):
    """Redact secret-bearing fields (private keys, tokens) from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = str(record.getMessage())
            msg = re.sub(
                r"(Authorization:?)\s+\S+", r"\1 ***", msg, flags=re.IGNORECASE
            )
            msg = re.sub(
                r"(private_key|token|secret|password|key)=\S+",
                r"\1=***",
                msg,
                flags=re.IGNORECASE,
            )
            record.msg = msg
            record.args = None
        except Exception:
            pass
        return True


def level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    level: int = logging.INFO,
    loggers: Iterable[str] = ("compsig_api", "uvicorn", "uvicorn.access"),
) -> None:
    logging.basicConfig(level=level)
    f = RedactingFilter()
    # logger filters do not see records propagated from child loggers
    for h in logging.getLogger().handlers:
        h.addFilter(f)
    for name in loggers:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.addFilter(f)
