from .artifacts import command_check_layout, command_fetch
from .generation import command_generate

__all__ = [
    "command_check_layout",
    "command_fetch",
    "command_generate",
]
