"""Configuration package for spec-mcp.

Sub-modules:
    parsing  - boolean, CSV and log-level parsing helpers
    server   - ServerConfig dataclass, get_config/set_config globals
    loader   - ServerConfig loading/validation mixin (_ServerConfigLoader)
"""

from spec_mcp.config.parsing import (  # noqa: F401
    _parse_bool,
    _parse_csv,
    _try_parse_bool,
)
from spec_mcp.config.server import (  # noqa: F401
    _PACKAGE_VERSION,
    ServerConfig,
    get_config,
    set_config,
)
