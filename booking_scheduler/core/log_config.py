import logging

CONTEXT_KEYS = ("session_id", "request_id", "week_start", "slot_count", "status", "outcome", "error")


class ContextFormatter(logging.Formatter):
    """Appends booking context passed through ``extra=`` as ``key=value`` pairs."""

    def __init__(self, fmt: str | None = None, keys: tuple[str, ...] = CONTEXT_KEYS) -> None:
        super().__init__(fmt)
        self._keys = keys

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = [
            f"{key}={getattr(record, key)}"
            for key in self._keys
            if getattr(record, key, None) not in (None, "")
        ]
        if not context:
            return base
        return f"{base} | {' '.join(context)}"


def configure_logging(level: str = "INFO") -> logging.Handler:
    """Route every logger through one stream handler with the context formatter."""
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    return handler
