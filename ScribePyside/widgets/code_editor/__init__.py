from __future__ import annotations

from .languages import *  # noqa: F401,F403
from .bracket_matching import *  # noqa: F401,F403
from .indentation import *  # noqa: F401,F403
from .code_folding import *  # noqa: F401,F403
from .syntax_highlighting import *  # noqa: F401,F403
from .components import *  # noqa: F401,F403
from .editor import *  # noqa: F401,F403


__all__ = [name for name in globals() if not name.startswith("_")]
