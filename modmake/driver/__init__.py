"""
modmake driver — incremental builds for modular sources.

  Loader → Parser gate → Scheduler (timestamps, compiler, writer)

| Stage           | Responsibility                                         |
<---------------- + ------------------------------------------------------->
| **Loader**      | Read every input eagerly, prepend the built-in Prelude |
| **Parser gate** | Parse all inputs, aggregate every failure              |
| **Scheduler**   | Dependency order, staleness, propagation               |
| **Compiler**    | Check against dependency interfaces, emit JavaScript   |
| **Actions**     | Timestamps, reads, writes and progress                 |
"""

from . import core as _core
from . import errors as _errors
from . import actions as _actions
from . import loader as _loader
from . import parser as _parser
from . import compiler as _compiler
from . import graph as _graph
from . import scheduler as _scheduler
from .cli import main, parse_args, run

from .core import *
from .errors import *
from .actions import *
from .loader import *
from .parser import *
from .compiler import *
from .graph import *
from .scheduler import *

__all__ = []
for module in (_core, _errors, _actions, _loader, _parser, _compiler, _graph, _scheduler):
    __all__.extend(getattr(module, '__all__', []))
__all__ += ['main', 'parse_args', 'run']
__all__ = list(dict.fromkeys(__all__))
