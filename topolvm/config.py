"""Configuration files and defaults for lvmd, the scheduler and the controller."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from .api import Quantity, parse_quantity
from .constants import DEFAULT_LVMD_SOCKET

_log = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDR = ":8000"
DEFAULT_DIVISOR = 1.0

# Physical extent size of 4Mi, doubled to leave room for metadata.
DEFAULT_MINIMUM_ALLOCATION_SIZE_BLOCK = "8Mi"
# Hard minimum enforced by XFS.
DEFAULT_MINIMUM_ALLOCATION_SIZE_XFS = "300Mi"
# Keeps more than 80% free space after formatting.
DEFAULT_MINIMUM_ALLOCATION_SIZE_EXT4 = "32Mi"
# Found safe by experiment; btrfs varies with the device and host.
DEFAULT_MINIMUM_ALLOCATION_SIZE_BTRFS = "200Mi"


def _read_yaml(path: str | os.PathLike[str]) -> Mapping[str, Any]:
    with open(path, encoding="utf-8") as stream:
        data = yaml.safe_load(stream)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{path}: configuration must be a mapping, got {type(data).__name__}")
    return data


def _string(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a string, got {value!r}")
    return value


def _mapping_list(data: Mapping[str, Any], key: str) -> list[dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
        raise ValueError(f"{key}: expected a list of mappings")
    return [dict(item) for item in value]


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected a number, got {value!r}")
    return float(value)


@dataclass
class LvmdConfig:
    """Settings read from the lvmd configuration file."""

    socket_name: str = DEFAULT_LVMD_SOCKET
    device_classes: list[dict[str, Any]] = field(default_factory=list)
    lvcreate_option_classes: list[dict[str, Any]] = field(default_factory=list)


def load_lvmd_config(path: str | os.PathLike[str]) -> LvmdConfig:
    """Load an lvmd YAML configuration file; absent keys keep their defaults."""
    data = _read_yaml(path)
    config = LvmdConfig(
        socket_name=_string(data, "socket-name", DEFAULT_LVMD_SOCKET),
        device_classes=_mapping_list(data, "device-classes"),
        lvcreate_option_classes=_mapping_list(data, "lvcreate-option-classes"),
    )
    _log.info(
        "configuration file loaded: device_classes=%s socket_name=%s file_name=%s",
        config.device_classes,
        config.socket_name,
        os.fspath(path),
    )
    return config


@dataclass
class SchedulerConfig:
    """Settings of the scheduler extender."""

    listen_addr: str = DEFAULT_LISTEN_ADDR
    divisors: dict[str, float] = field(default_factory=dict)
    default_divisor: float = DEFAULT_DIVISOR
    profiling_bind_address: str = ""


def load_scheduler_config(path: str | os.PathLike[str] | None = None) -> SchedulerConfig:
    """Load the scheduler YAML configuration; with no path, return the defaults."""
    if not path:
        return SchedulerConfig()
    data = _read_yaml(path)

    raw_divisors = data.get("divisors")
    divisors: dict[str, float] = {}
    if raw_divisors is not None:
        if not isinstance(raw_divisors, Mapping):
            raise ValueError(f"divisors: expected a mapping, got {raw_divisors!r}")
        for name, value in raw_divisors.items():
            divisors[str(name)] = _number(value, f"divisors.{name}")

    raw_default = data.get("default-divisor")
    default_divisor = DEFAULT_DIVISOR if raw_default is None else _number(raw_default, "default-divisor")

    return SchedulerConfig(
        listen_addr=_string(data, "listen", DEFAULT_LISTEN_ADDR),
        divisors=divisors,
        default_divisor=default_divisor,
        profiling_bind_address=_string(data, "profiling-bind-address", ""),
    )


@dataclass
class MinimumAllocationSettings:
    """Smallest sizes a logical volume is given, for block and per filesystem."""

    block: Quantity = field(default_factory=lambda: parse_quantity(DEFAULT_MINIMUM_ALLOCATION_SIZE_BLOCK))
    filesystem: dict[str, Quantity] = field(default_factory=dict)


def default_minimum_allocation_settings() -> MinimumAllocationSettings:
    """Return the controller's default minimum allocation sizes."""
    return MinimumAllocationSettings(
        block=parse_quantity(DEFAULT_MINIMUM_ALLOCATION_SIZE_BLOCK),
        filesystem={
            "ext4": parse_quantity(DEFAULT_MINIMUM_ALLOCATION_SIZE_EXT4),
            "xfs": parse_quantity(DEFAULT_MINIMUM_ALLOCATION_SIZE_XFS),
            "btrfs": parse_quantity(DEFAULT_MINIMUM_ALLOCATION_SIZE_BTRFS),
        },
    )