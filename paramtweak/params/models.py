"""
Parameter Pydantic models for paramtweak.

Defines the parameter descriptor and the composite values that tweak
operations store in live slots.
"""

from enum import Enum
from typing import Any, Callable, Optional
from pydantic import BaseModel, Field, field_validator

from paramtweak.params.codecs import fmt_double


class StorageKind(str, Enum):
    """Kind of value a parameter's live slot holds."""
    UINT = "uint"
    SSIZE = "ssize"
    DOUBLE = "double"
    BOOL = "bool"
    STRING = "string"
    POOL = "pool"
    IDENTITY = "identity"
    ADDRESS_LIST = "address_list"


class ParamSpec(BaseModel):
    """
    Static description of one tunable parameter.

    ``min``/``max`` are interpreted by the tweak function: byte counts,
    unsigned counts or fractional seconds. For byte parameters ``max == 0``
    means no upper bound.
    """

    name: str = Field(description="Parameter name, used in diagnostics")
    kind: StorageKind = Field(description="Kind of the live slot")
    priv: str = Field(description="Key of the live slot in the parameter block")
    func: Optional[Callable[..., bool]] = Field(
        default=None,
        exclude=True,
        description="Tweak operation bound to this parameter"
    )
    min: float = Field(default=0.0, description="Lower bound")
    max: float = Field(default=0.0, description="Upper bound")
    default: Optional[str] = Field(
        default=None,
        description="Default value in text form"
    )
    description: str = Field(default="", description="Operator-facing help")
    units: str = Field(default="", description="Units shown next to the value")

    model_config = {"extra": "forbid", "frozen": True}


class PoolParam(BaseModel):
    """Worker pool sizing: pool size bounds and maximum idle age."""

    min_pool: int = Field(default=0, ge=0, description="Minimum pool size")
    max_pool: int = Field(default=0, ge=0, description="Maximum pool size")
    max_age: float = Field(
        default=0.0,
        ge=0,
        description="Maximum age of an idle pool member (seconds)"
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("max_pool")
    @classmethod
    def min_not_above_max(cls, v: int, info) -> int:
        if "min_pool" in info.data and info.data["min_pool"] > v:
            raise ValueError("min_pool cannot be larger than max_pool")
        return v

    def to_text(self) -> str:
        return f"{self.min_pool},{self.max_pool},{fmt_double(self.max_age)}"


class Identity(BaseModel):
    """Process identity: cached account name and its numeric id."""

    name: Optional[str] = Field(
        default=None,
        description="Account name from the last successful lookup"
    )
    id: int = Field(default=0, ge=0, description="Numeric user or group id")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("name")
    @classmethod
    def non_empty_name(cls, v: Optional[str]) -> Optional[str]:
        return v or None


def zero_value(kind: StorageKind) -> Any:
    """Get the value a fresh slot of the given kind starts out with."""
    return {
        StorageKind.UINT: 0,
        StorageKind.SSIZE: 0,
        StorageKind.DOUBLE: 0.0,
        StorageKind.BOOL: False,
        StorageKind.STRING: "",
        StorageKind.POOL: PoolParam(),
        StorageKind.IDENTITY: Identity(),
        StorageKind.ADDRESS_LIST: "",
    }[kind]
