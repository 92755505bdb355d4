"""CLI command groups for agent-os-cli."""

__all__ = [
    "compile",
    "install",
    "profile",
    "status",
]
