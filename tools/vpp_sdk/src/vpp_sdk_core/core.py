from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_catalog import *  # noqa: F401,F403
from ._core_config import *  # noqa: F401,F403
from ._core_discovery import *  # noqa: F401,F403
from ._core_scheduler import *  # noqa: F401,F403
from ._core_codegen import *  # noqa: F401,F403
from ._core_fetch import *  # noqa: F401,F403
from ._core_extract import *  # noqa: F401,F403
from ._core_assembly import *  # noqa: F401,F403
from ._core_layout import *  # noqa: F401,F403
