import logging
import os
from typing import Any, Mapping, Optional

_logger_instance: Optional["DashboardLogger"] = None


def get_logger() -> "DashboardLogger":
    """Get the global logger instance. Creates one if needed."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = DashboardLogger()
    return _logger_instance


class DashboardLogger:
    """Console logger shared by the data layer and the pages."""

    def __init__(self, name: str = "vetting_dashboard", level: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.logger.handlers.clear()

        # Console handler - respects LOG_LEVEL
        console_handler = logging.StreamHandler()
        console_handler.setLevel(self._resolve_level(level or os.getenv("LOG_LEVEL", "INFO")))
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        self.logger.addHandler(console_handler)

    @staticmethod
    def _resolve_level(level: str) -> int:
        resolved = logging.getLevelName(str(level).upper())
        return resolved if isinstance(resolved, int) else logging.INFO

    def set_level(self, level: str) -> None:
        for handler in self.logger.handlers:
            handler.setLevel(self._resolve_level(level))

    # ─── Semantic Methods (delegate to self.logger) ────────────────

    def info(self, msg: str):
        """General info message (INFO level)."""
        self.logger.info(msg)

    def debug(self, msg: str):
        """Debug message (DEBUG level)."""
        self.logger.debug(msg)

    def warning(self, msg: str):
        """Warning message (WARNING level)."""
        self.logger.warning(f"⚠️  {msg}")

    def error(self, msg: str):
        """Error message (ERROR level)."""
        self.logger.error(f"❌ {msg}")

    def success(self, msg: str):
        """Success message (INFO level)."""
        self.logger.info(f"✅ {msg}")

    def section(self, title: str):
        """Section header with dividers."""
        self.logger.info("=" * 60)
        self.logger.info(title)
        self.logger.info("=" * 60)

    # ─── Dashboard events ──────────────────────────────────────────

    def data_loaded(self, source: str, row_counts: Mapping[str, int]):
        summary = ", ".join(f"{name}={count}" for name, count in row_counts.items())
        self.info(f"📦 Loaded {source} data: {summary}")

    def filters_applied(self, table: str, filters: Mapping[str, Any], before: int, after: int):
        self.debug(f"🔎 {table}: {before} -> {after} rows with filters {dict(filters)}")

    def action_applied(self, action: str, target: str, detail: str = ""):
        suffix = f" ({detail})" if detail else ""
        self.success(f"{action} applied to {target}{suffix}")

    def action_failed(self, action: str, reason: str):
        self.warning(f"{action} rejected: {reason}")
