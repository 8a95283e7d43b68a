"""
Configuration helpers for the toolkit.

ToolkitConfig is owned by the embedding application. The toolkit only reads it;
defaults for unset limits are resolved per call so one instance can be shared
across concurrent requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_MAX_FILE_SIZE = 1024 * 1024 * 1024
DEFAULT_MAX_JSON_SIZE = 1024 * 1024
DEFAULT_DIR_MODE = 0o755
RANDOM_FILE_NAME_LENGTH = 25


@dataclass
class ToolkitConfig:
    """Tunable limits. Zero or None means "use the default"."""

    max_file_size: int | None = None
    allowed_file_types: list[str] = field(default_factory=list)
    max_json_size: int | None = None
    allow_unknown_fields: bool = False

    def effective_max_file_size(self) -> int:
        return self.max_file_size or DEFAULT_MAX_FILE_SIZE

    def effective_max_json_size(self) -> int:
        return self.max_json_size or DEFAULT_MAX_JSON_SIZE

    def is_allowed_type(self, content_type: str) -> bool:
        if not self.allowed_file_types:
            return True
        wanted = content_type.lower()
        return any(wanted == allowed.lower() for allowed in self.allowed_file_types)
