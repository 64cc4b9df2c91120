"""LogicalVolume resource types for the current and legacy API groups."""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from fractions import Fraction
from functools import total_ordering
from typing import Any

KIND = "LogicalVolume"
KIND_LIST = "LogicalVolumeList"


@dataclass(frozen=True)
class GroupVersionKind:
    """An API group, version and kind."""

    group: str
    version: str
    kind: str

    @property
    def group_version(self) -> GroupVersion:
        return GroupVersion(self.group, self.version)

    @property
    def api_version(self) -> str:
        return str(self.group_version)


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version."""

    group: str
    version: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, kind)

    @classmethod
    def parse(cls, api_version: str) -> GroupVersion:
        """Parse an apiVersion string such as ``group/version`` or ``v1``."""
        if not api_version:
            return cls("", "")
        parts = api_version.split("/")
        if len(parts) == 1:
            return cls("", parts[0])
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        raise ValueError(f"unexpected GroupVersion string: {api_version}")


GROUP_VERSION = GroupVersion("topolvm.io", "v1")
LEGACY_GROUP_VERSION = GroupVersion("topolvm.cybozu.com", "v1")


BINARY_SI = "BinarySI"
DECIMAL_SI = "DecimalSI"
DECIMAL_EXPONENT = "DecimalExponent"
_FORMATS = (BINARY_SI, DECIMAL_SI, DECIMAL_EXPONENT)

_BINARY_SUFFIXES = ("Ki", "Mi", "Gi", "Ti", "Pi", "Ei")
_BINARY_MULTIPLIERS = {s: 1024 ** (i + 1) for i, s in enumerate(_BINARY_SUFFIXES)}
_DECIMAL_EXPONENTS = {"n": -9, "u": -6, "m": -3, "": 0, "k": 3, "M": 6, "G": 9, "T": 12, "P": 15, "E": 18}
_DECIMAL_SUFFIX_BY_EXP = {exp: suffix for suffix, exp in _DECIMAL_EXPONENTS.items()}

_NUMBER_RE = re.compile(r"([+-]?(?:\d+(?:\.\d*)?|\.\d+))(.*)\Z", re.S)
_EXPONENT_RE = re.compile(r"[eE]([+-]?\d+)\Z")


def _decimal_parts(amount: Fraction) -> tuple[int, int]:
    """Split an amount into an integer mantissa and a power-of-1000 exponent."""
    mantissa = math.ceil(amount * 10**9)
    if mantissa == 0:
        return 0, 0
    exponent = -9
    while mantissa % 1000 == 0 and exponent < 18:
        mantissa //= 1000
        exponent += 3
    return mantissa, exponent


@total_ordering
@dataclass(frozen=True, eq=False)
class Quantity:
    """An exact resource amount with its preferred textual format."""

    amount: Fraction = Fraction(0)
    format: str = DECIMAL_SI

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", Fraction(self.amount))
        if self.format not in _FORMATS:
            raise ValueError(f"unknown quantity format: {self.format!r}")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Quantity):
            return self.amount == other.amount
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Quantity):
            return self.amount < other.amount
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.amount)

    def cmp(self, other: Quantity) -> int:
        """Return -1, 0 or 1 as this quantity is less, equal or greater."""
        return (self.amount > other.amount) - (self.amount < other.amount)

    @property
    def value(self) -> int:
        """The amount as an integer, rounded up."""
        return math.ceil(self.amount)

    @property
    def milli_value(self) -> int:
        """The amount in thousandths, rounded up."""
        return math.ceil(self.amount * 1000)

    def __str__(self) -> str:
        if self.format == BINARY_SI and self.amount.denominator == 1 and abs(self.amount) >= 1024:
            number = int(self.amount)
            suffix = ""
            for candidate in _BINARY_SUFFIXES:
                if number % 1024:
                    break
                number //= 1024
                suffix = candidate
            return f"{number}{suffix}"
        mantissa, exponent = _decimal_parts(self.amount)
        if self.format == DECIMAL_EXPONENT:
            return f"{mantissa}e{exponent}" if exponent else str(mantissa)
        return f"{mantissa}{_DECIMAL_SUFFIX_BY_EXP[exponent]}"


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity such as ``1Gi``, ``300Mi``, ``500m`` or ``1e3``."""
    match = _NUMBER_RE.match(text)
    if match is None:
        raise ValueError(f"quantities must match the regular expression: {text!r}")
    number, suffix = match.groups()
    amount = Fraction(number)
    if suffix in _BINARY_MULTIPLIERS:
        return Quantity(amount * _BINARY_MULTIPLIERS[suffix], BINARY_SI)
    if suffix in _DECIMAL_EXPONENTS:
        return Quantity(amount * Fraction(10) ** _DECIMAL_EXPONENTS[suffix], DECIMAL_SI)
    exp_match = _EXPONENT_RE.match(suffix)
    if exp_match is not None:
        return Quantity(amount * Fraction(10) ** int(exp_match.group(1)), DECIMAL_EXPONENT)
    raise ValueError(f"unable to parse quantity's suffix: {text!r}")


_CODE_NAMES = {
    0: "OK",
    1: "Canceled",
    2: "Unknown",
    3: "InvalidArgument",
    4: "DeadlineExceeded",
    5: "NotFound",
    6: "AlreadyExists",
    7: "PermissionDenied",
    8: "ResourceExhausted",
    9: "FailedPrecondition",
    10: "Aborted",
    11: "OutOfRange",
    12: "Unimplemented",
    13: "Internal",
    14: "Unavailable",
    15: "DataLoss",
    16: "Unauthenticated",
}


class Code(IntEnum):
    """gRPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    def __str__(self) -> str:
        return _CODE_NAMES[self.value]


def _code_from_json(value: Any) -> Code:
    if isinstance(value, bool):
        raise TypeError(f"invalid code: {value!r}")
    if isinstance(value, int):
        return Code(value)
    if isinstance(value, str):
        try:
            return Code[value]
        except KeyError:
            raise ValueError(f"invalid code: {value!r}") from None
    raise TypeError(f"invalid code: {value!r}")


@dataclass
class LogicalVolumeSpec:
    """Desired state of a LogicalVolume."""

    name: str = ""
    node_name: str = ""
    size: Quantity = field(default_factory=Quantity)
    device_class: str = ""
    lvcreate_option_class: str = ""
    # Name of the source logical volume for snapshots and clones.
    source: str = ""
    # "ro" for snapshots, "rw" for restores and clones.
    access_type: str = ""


@dataclass
class LogicalVolumeStatus:
    """Observed state of a LogicalVolume."""

    volume_id: str = ""
    code: Code = Code.OK
    message: str = ""
    current_size: Quantity | None = None


def _spec_to_dict(spec: LogicalVolumeSpec) -> dict[str, Any]:
    data: dict[str, Any] = {"name": spec.name, "nodeName": spec.node_name, "size": str(spec.size)}
    optional = (
        ("deviceClass", spec.device_class),
        ("lvcreateOptionClass", spec.lvcreate_option_class),
        ("source", spec.source),
        ("accessType", spec.access_type),
    )
    data.update((key, value) for key, value in optional if value)
    return data


def _spec_from_dict(data: Mapping[str, Any]) -> LogicalVolumeSpec:
    size = data.get("size")
    return LogicalVolumeSpec(
        name=data.get("name", ""),
        node_name=data.get("nodeName", ""),
        size=parse_quantity(str(size)) if size is not None else Quantity(),
        device_class=data.get("deviceClass", ""),
        lvcreate_option_class=data.get("lvcreateOptionClass", ""),
        source=data.get("source", ""),
        access_type=data.get("accessType", ""),
    )


def _status_to_dict(status: LogicalVolumeStatus) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if status.volume_id:
        data["volumeID"] = status.volume_id
    if status.code:
        data["code"] = int(status.code)
    if status.message:
        data["message"] = status.message
    if status.current_size is not None:
        data["currentSize"] = str(status.current_size)
    return data


def _status_from_dict(data: Mapping[str, Any]) -> LogicalVolumeStatus:
    current = data.get("currentSize")
    return LogicalVolumeStatus(
        volume_id=data.get("volumeID", ""),
        code=_code_from_json(data.get("code", 0)),
        message=data.get("message", ""),
        current_size=parse_quantity(str(current)) if current is not None else None,
    )


def _group_version_of(data: Mapping[str, Any], expected_kind: str) -> GroupVersion:
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a mapping, got {type(data).__name__}")
    kind = data.get("kind")
    if kind is not None and kind != expected_kind:
        raise ValueError(f"expected kind {expected_kind!r}, got {kind!r}")
    api_version = data.get("apiVersion")
    return GroupVersion.parse(api_version) if api_version else GROUP_VERSION


@dataclass
class LogicalVolume:
    """A LogicalVolume resource in either the current or the legacy group."""

    metadata: dict[str, Any] = field(default_factory=dict)
    spec: LogicalVolumeSpec = field(default_factory=LogicalVolumeSpec)
    status: LogicalVolumeStatus = field(default_factory=LogicalVolumeStatus)
    group_version: GroupVersion = GROUP_VERSION

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def group_version_kind(self) -> GroupVersionKind:
        return self.group_version.with_kind(KIND)

    def is_compatible_with(self, other: LogicalVolume) -> bool:
        """Return True if name, source and size match those of ``other``."""
        return (
            self.spec.name == other.spec.name
            and self.spec.source == other.spec.source
            and self.spec.size.cmp(other.spec.size) == 0
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": str(self.group_version),
            "kind": KIND,
            "metadata": copy.deepcopy(self.metadata),
            "spec": _spec_to_dict(self.spec),
            "status": _status_to_dict(self.status),
        }


def logical_volume_from_dict(data: Mapping[str, Any]) -> LogicalVolume:
    """Build a LogicalVolume from its JSON-style mapping."""
    group_version = _group_version_of(data, KIND)
    return LogicalVolume(
        metadata=copy.deepcopy(dict(data.get("metadata") or {})),
        spec=_spec_from_dict(data.get("spec") or {}),
        status=_status_from_dict(data.get("status") or {}),
        group_version=group_version,
    )


@dataclass
class LogicalVolumeList:
    """A list of LogicalVolume resources."""

    items: list[LogicalVolume] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    group_version: GroupVersion = GROUP_VERSION

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": str(self.group_version),
            "kind": KIND_LIST,
            "metadata": copy.deepcopy(self.metadata),
            "items": [item.to_dict() for item in self.items],
        }


def logical_volume_list_from_dict(data: Mapping[str, Any]) -> LogicalVolumeList:
    """Build a LogicalVolumeList from its JSON-style mapping."""
    group_version = _group_version_of(data, KIND_LIST)
    items = []
    for item in data.get("items") or []:
        volume = logical_volume_from_dict(item)
        if "apiVersion" not in item:
            volume.group_version = group_version
        items.append(volume)
    return LogicalVolumeList(
        items=items,
        metadata=copy.deepcopy(dict(data.get("metadata") or {})),
        group_version=group_version,
    )