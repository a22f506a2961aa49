"""CLI command implementations for the DCA platform.

Each command module provides:
- Configuration loading and validation
- Integration with core library functions
"""

from dca_platform.commands.compare import (load_compare_config,
                                           parse_compare_config)

__all__ = [
    "load_compare_config",
    "parse_compare_config",
]
