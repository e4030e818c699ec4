"""bindfx: composable reactive bindings and debounced invocation for Python UIs."""

from importlib.metadata import version as _version

__version__ = _version("bindfx")

from bindfx._tracking import get_pending_count
from bindfx.binding import (
    Bindable,
    Binding,
    ConstantBinding,
    DerivedBinding,
    create_binding,
    join_bindings,
    set_scheduler,
)
from bindfx.batch import batch, batched
from bindfx.compose import compose_bindings, is_binding, lerp_binding, map_binding, to_binding
from bindfx.numeric import Lerpable, blend, lerp, remap
from bindfx.timers import AsyncioTimers, ManualTimers, ThreadingTimers, Timers
from bindfx.debounce import (
    DebounceOptions,
    DebounceOptionsError,
    Debouncer,
    debounce,
    debounce_state,
)
from bindfx.stream import EventStream
from bindfx.events import listen
from bindfx.scope import Latest, Scope, skip_first
# textual NOT auto-imported, opt-in only

__all__ = [
    "Bindable",
    "Binding",
    "ConstantBinding",
    "DerivedBinding",
    "create_binding",
    "join_bindings",
    "set_scheduler",
    "batch",
    "batched",
    "get_pending_count",
    "is_binding",
    "to_binding",
    "map_binding",
    "compose_bindings",
    "lerp_binding",
    "Lerpable",
    "lerp",
    "remap",
    "blend",
    "Timers",
    "ThreadingTimers",
    "AsyncioTimers",
    "ManualTimers",
    "DebounceOptions",
    "DebounceOptionsError",
    "Debouncer",
    "debounce",
    "debounce_state",
    "EventStream",
    "listen",
    "Scope",
    "skip_first",
    "Latest",
]
