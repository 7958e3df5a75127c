"""
clash_dash - OpenClash subscription management over LuCI RPC

Reads the router's `config_subscribe` entries from its UCI store, lets a
caller edit them as typed records, and pushes back only the `uci` commands
needed to bring the router in line with the edited record.
"""

__version__ = "0.1.0"
__license__ = "AGPLv3+"

# Version tuple for programmatic comparison
VERSION_TUPLE = (0, 1, 0)

__all__ = [
    "__version__",
    "__license__",
    "VERSION_TUPLE",
]
