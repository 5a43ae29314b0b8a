"""Incremental make-style build driver for modular sources."""

from . import constants as _constants
from . import driver as _driver
from .constants import *  # noqa: F401,F403
from .driver import *  # noqa: F401,F403
from .prelude import PRELUDE_SOURCE

__all__ = []
__all__ += getattr(_constants, "__all__", [])
__all__ += getattr(_driver, "__all__", [])
__all__ += ["PRELUDE_SOURCE"]
