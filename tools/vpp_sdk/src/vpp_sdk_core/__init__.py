from .core import *  # noqa: F401,F403
from .commands import command_check_layout, command_fetch, command_generate
from .cli import build_parser, main, main_fetch, main_generate
