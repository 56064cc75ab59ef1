"""
Default parameter table.

One descriptor per tunable, bound to the tweak operation that parses and
formats it. Defaults are in text form and applied through that same
operation, so they obey the same rules as operator input.
"""

from typing import Dict, List

from paramtweak.params.codecs import UINT_MAX
from paramtweak.params.models import ParamSpec, StorageKind
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


DEFAULT_PARAMS: List[ParamSpec] = [
    # =========================================================================
    # Identity and Network
    # =========================================================================
    ParamSpec(
        name="user",
        kind=StorageKind.IDENTITY,
        priv="user",
        func=tweak_user,
        default="",
        description="The unprivileged user to run as.",
    ),
    ParamSpec(
        name="group",
        kind=StorageKind.IDENTITY,
        priv="group",
        func=tweak_group,
        default="",
        description="The unprivileged group to run as.",
    ),
    ParamSpec(
        name="listen_address",
        kind=StorageKind.ADDRESS_LIST,
        priv="listen_address",
        func=tweak_listen_address,
        default=":80",
        description="Whitespace or comma separated list of addresses to accept "
                    "client connections on, each in host:port form.",
    ),
    ParamSpec(
        name="waiter",
        kind=StorageKind.STRING,
        priv="waiter",
        func=tweak_waiter,
        default="default",
        description="Select the event-loop back end for idle connections.",
    ),

    # =========================================================================
    # Timeouts
    # =========================================================================
    ParamSpec(
        name="send_timeout",
        kind=StorageKind.UINT,
        priv="send_timeout",
        func=tweak_timeout,
        default="600",
        units="seconds",
        description="Send timeout for client connections.",
    ),
    ParamSpec(
        name="connect_timeout",
        kind=StorageKind.DOUBLE,
        priv="connect_timeout",
        func=tweak_timeout_double,
        min=0,
        max=3600,
        default="3.5",
        units="seconds",
        description="Default connection timeout for backend connections.",
    ),
    ParamSpec(
        name="default_grace",
        kind=StorageKind.DOUBLE,
        priv="default_grace",
        func=tweak_generic_double,
        min=0,
        max=1e9,
        default="10",
        units="seconds",
        description="Default grace period for cached objects.",
    ),

    # =========================================================================
    # Switches and Counts
    # =========================================================================
    ParamSpec(
        name="http_gzip_support",
        kind=StorageKind.BOOL,
        priv="http_gzip_support",
        func=tweak_bool,
        default="on",
        description="Enable gzip support.",
    ),
    ParamSpec(
        name="prefer_ipv6",
        kind=StorageKind.BOOL,
        priv="prefer_ipv6",
        func=tweak_bool,
        default="false",
        description="Prefer IPv6 address when connecting to backends.",
    ),
    ParamSpec(
        name="thread_pools",
        kind=StorageKind.UINT,
        priv="thread_pools",
        func=tweak_uint,
        min=1,
        max=64,
        default="2",
        units="pools",
        description="Number of worker thread pools.",
    ),
    ParamSpec(
        name="max_restarts",
        kind=StorageKind.UINT,
        priv="max_restarts",
        func=tweak_uint,
        min=0,
        max=UINT_MAX,
        default="4",
        units="restarts",
        description="Upper limit on how many times a request can restart.",
    ),

    # =========================================================================
    # Sizes
    # =========================================================================
    ParamSpec(
        name="vsl_space",
        kind=StorageKind.SSIZE,
        priv="vsl_space",
        func=tweak_bytes,
        min=1024 * 1024,
        max=0,
        default="80M",
        units="bytes",
        description="Size of the shared memory log.",
    ),
    ParamSpec(
        name="workspace_client",
        kind=StorageKind.UINT,
        priv="workspace_client",
        func=tweak_bytes_u,
        min=3 * 1024,
        max=UINT_MAX,
        default="64k",
        units="bytes",
        description="Bytes of workspace for client request handling.",
    ),
    ParamSpec(
        name="http_req_size",
        kind=StorageKind.UINT,
        priv="http_req_size",
        func=tweak_bytes_u,
        min=256,
        max=UINT_MAX,
        default="32k",
        units="bytes",
        description="Maximum number of bytes of HTTP client request.",
    ),

    # =========================================================================
    # Strings and Composites
    # =========================================================================
    ParamSpec(
        name="cc_command",
        kind=StorageKind.STRING,
        priv="cc_command",
        func=tweak_string,
        default="exec cc -fpic -shared -Wl,-x -o %o %s",
        description="Command used for compiling generated code.",
    ),
    ParamSpec(
        name="pool_req",
        kind=StorageKind.POOL,
        priv="pool_req",
        func=tweak_poolparam,
        min=0,
        max=UINT_MAX,
        default="10,100,10",
        description="Parameters for the request memory pool: "
                    "min_pool, max_pool and max_age.",
    ),
    ParamSpec(
        name="pool_sess",
        kind=StorageKind.POOL,
        priv="pool_sess",
        func=tweak_poolparam,
        min=0,
        max=UINT_MAX,
        default="10,100,10",
        description="Parameters for the session memory pool: "
                    "min_pool, max_pool and max_age.",
    ),
]


def get_default_specs() -> Dict[str, ParamSpec]:
    """Get the default descriptors keyed by parameter name."""
    return {spec.name: spec for spec in DEFAULT_PARAMS}
