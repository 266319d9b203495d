"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, with typed fields
instead of string-keyed settings.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(base_path="/docs", route_cache_size=256)
    """

    # Routing
    base_path: str = ""  # Prefix applied to every registered route (not to use())
    strict_routes: bool = False  # Reject duplicate (method, pattern) registrations

    # Composed handler chains memoized per (method, path); 0 disables caching
    route_cache_size: int = 1024

    # Filesystem routes
    ignore_patterns: tuple[str, ...] = (r"[._]test\.py$",)

    # Templates
    autoescape: bool = True

    # Development
    debug: bool = False

    def __post_init__(self) -> None:
        if self.route_cache_size < 0:
            msg = f"route_cache_size must be >= 0, got {self.route_cache_size}"
            raise ValueError(msg)
