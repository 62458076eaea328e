"""Preferred key order for each structured log event."""

from __future__ import annotations

DEFAULT_EVENT_KEY_ORDER = ["ts", "level", "logger"]

EVENT_KEY_ORDER: dict[str, list[str]] = {
    "app_start": [
        "ts",
        "level",
        "source_file",
        "output_file",
        "log_file",
        "category",
        "prefix",
    ],
    "app_stop": [
        "ts",
        "level",
        "reason",
        "elapsed_ms",
        "error_type",
        "error",
    ],
    "entries_collected": [
        "ts",
        "level",
        "category",
        "entry_count",
    ],
    "entry_skipped": [
        "ts",
        "level",
        "node_index",
    ],
    "document_written": [
        "ts",
        "level",
        "output_file",
        "entry_count",
        "output_bytes",
    ],
}

# Path-valued fields are logged as absolute paths.
LOG_PATH_FIELDS = {
    "source_file",
    "output_file",
    "log_file",
}
