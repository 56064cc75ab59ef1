"""
Runtime parameter tweak engine.

Provides:
- Text codecs for numbers, byte sizes and argument lists
- Typed query/set operations for every kind of tunable
- A name-based manager over a live parameter context
"""

from paramtweak.params.buffer import OutputBuffer
from paramtweak.params.codecs import (
    UINT_MAX,
    SSIZE_MAX,
    fmt_bytes,
    parse_bytes,
    quote,
    split_args,
)
from paramtweak.params.context import (
    Heritage,
    ListenSock,
    ParamBlock,
    TweakContext,
)
from paramtweak.params.errors import TweakError
from paramtweak.params.models import (
    Identity,
    ParamSpec,
    PoolParam,
    StorageKind,
)
from paramtweak.params.tweaks import (
    tweak_bool,
    tweak_bytes,
    tweak_bytes_u,
    tweak_generic_double,
    tweak_group,
    tweak_listen_address,
    tweak_poolparam,
    tweak_string,
    tweak_timeout,
    tweak_timeout_double,
    tweak_uint,
    tweak_user,
    tweak_waiter,
)
from paramtweak.params.manager import (
    ParameterManager,
    get_parameter_manager,
    initialize_parameter_manager,
)

__all__ = [
    # Buffer and codecs
    "OutputBuffer",
    "UINT_MAX",
    "SSIZE_MAX",
    "fmt_bytes",
    "parse_bytes",
    "quote",
    "split_args",
    # Live state
    "Heritage",
    "ListenSock",
    "ParamBlock",
    "TweakContext",
    # Models
    "Identity",
    "ParamSpec",
    "PoolParam",
    "StorageKind",
    "TweakError",
    # Tweaks
    "tweak_bool",
    "tweak_bytes",
    "tweak_bytes_u",
    "tweak_generic_double",
    "tweak_group",
    "tweak_listen_address",
    "tweak_poolparam",
    "tweak_string",
    "tweak_timeout",
    "tweak_timeout_double",
    "tweak_uint",
    "tweak_user",
    "tweak_waiter",
    # Manager
    "ParameterManager",
    "get_parameter_manager",
    "initialize_parameter_manager",
]
