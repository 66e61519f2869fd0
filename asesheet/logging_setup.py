# Terse stderr logging for the command line; initialized on import

import logging
import sys

_MARKERS = [
    (logging.CRITICAL, "💥 "),
    (logging.ERROR, "🔥 "),
    (logging.WARNING, "⚠️ "),
    (logging.INFO, ""),
]


class _LogFormatter(logging.Formatter):
    def format(self, record):
        text = record.getMessage().strip()
        if record.name != "root":
            text = f"{record.name}: {text}"
        marker = next((m for lv, m in _MARKERS if record.levelno >= lv), "🕸  ")
        lines = [marker + text]
        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            lines.append(record.exc_text)
        if record.stack_info:
            lines.append(record.stack_info)
        return "\n".join(lines)


def _sys_exception_hook(exc_type, exc_value, exc_tb):
    if issubclass(exc_type, KeyboardInterrupt):
        logging.critical("*** KeyboardInterrupt (^C)! ***")
    else:
        exc_info = (exc_type, exc_value, exc_tb)
        logging.critical("Uncaught exception", exc_info=exc_info)


def enable_debug():
    logging.getLogger().setLevel(logging.DEBUG)
    logging.getLogger("PIL").setLevel(logging.INFO)


class _StderrHandler(logging.StreamHandler):
    # Looks up sys.stderr on every write, so redirection after import works.
    def __init__(self):
        logging.Handler.__init__(self)

    @property
    def stream(self):
        return sys.stderr


_log_handler = _StderrHandler()
_log_handler.setFormatter(_LogFormatter())
logging.getLogger().addHandler(_log_handler)
logging.getLogger().setLevel(logging.INFO)
sys.excepthook = _sys_exception_hook
