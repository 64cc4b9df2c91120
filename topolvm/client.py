"""Clients that send LogicalVolume requests to the legacy API group when it is in use."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from .api import (
    GROUP_VERSION,
    KIND,
    KIND_LIST,
    LEGACY_GROUP_VERSION,
    GroupVersion,
    GroupVersionKind,
    LogicalVolume,
    LogicalVolumeList,
    logical_volume_from_dict,
    logical_volume_list_from_dict,
)
from .constants import use_legacy

GROUP = GROUP_VERSION.group
_EMPTY_GVK = GroupVersionKind("", "", "")


class SubResourceNotSupportedError(NotImplementedError):
    """Raised for sub-resource operations the wrapped client does not offer."""


def _gvk_from(api_version: str | None, kind: str | None) -> GroupVersionKind:
    return GroupVersion.parse(api_version or "").with_kind(kind or "")


@dataclass
class Unstructured:
    """A resource held as a plain JSON-style mapping."""

    content: dict[str, Any] = field(default_factory=dict)

    @property
    def group_version_kind(self) -> GroupVersionKind:
        return _gvk_from(self.content.get("apiVersion"), self.content.get("kind"))

    @group_version_kind.setter
    def group_version_kind(self, gvk: GroupVersionKind) -> None:
        self.content["apiVersion"] = gvk.api_version
        self.content["kind"] = gvk.kind

    @property
    def metadata(self) -> dict[str, Any]:
        return self.content.setdefault("metadata", {})


@dataclass
class UnstructuredList:
    """A list of resources held as plain mappings."""

    content: dict[str, Any] = field(default_factory=dict)
    items: list[Unstructured] = field(default_factory=list)

    @property
    def group_version_kind(self) -> GroupVersionKind:
        return _gvk_from(self.content.get("apiVersion"), self.content.get("kind"))

    @group_version_kind.setter
    def group_version_kind(self, gvk: GroupVersionKind) -> None:
        self.content["apiVersion"] = gvk.api_version
        self.content["kind"] = gvk.kind

    @property
    def metadata(self) -> dict[str, Any]:
        return self.content.setdefault("metadata", {})

    def to_dict(self) -> dict[str, Any]:
        data = copy.deepcopy(self.content)
        data["items"] = [copy.deepcopy(item.content) for item in self.items]
        return data


@dataclass
class PartialObjectMetadata:
    """Only the type and object metadata of a resource."""

    api_version: str = ""
    kind: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def group_version_kind(self) -> GroupVersionKind:
        return _gvk_from(self.api_version, self.kind)

    @group_version_kind.setter
    def group_version_kind(self, gvk: GroupVersionKind) -> None:
        self.api_version = gvk.api_version
        self.kind = gvk.kind


@dataclass
class PartialObjectMetadataList:
    """A list of metadata-only resources."""

    api_version: str = ""
    kind: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    items: list[PartialObjectMetadata] = field(default_factory=list)

    @property
    def group_version_kind(self) -> GroupVersionKind:
        return _gvk_from(self.api_version, self.kind)

    @group_version_kind.setter
    def group_version_kind(self, gvk: GroupVersionKind) -> None:
        self.api_version = gvk.api_version
        self.kind = gvk.kind


def to_unstructured(obj: LogicalVolume | LogicalVolumeList) -> Unstructured | UnstructuredList:
    """Convert a typed LogicalVolume or LogicalVolumeList to its unstructured form."""
    if isinstance(obj, LogicalVolume):
        return Unstructured(obj.to_dict())
    if isinstance(obj, LogicalVolumeList):
        data = obj.to_dict()
        items = data.pop("items")
        return UnstructuredList(data, [Unstructured(item) for item in items])
    raise TypeError(f"cannot convert {type(obj).__name__} to unstructured")


def from_unstructured(u: Unstructured | UnstructuredList) -> LogicalVolume | LogicalVolumeList:
    """Convert an unstructured LogicalVolume or LogicalVolumeList to its typed form."""
    if isinstance(u, Unstructured):
        return logical_volume_from_dict(u.content)
    if isinstance(u, UnstructuredList):
        return logical_volume_list_from_dict(u.to_dict())
    raise TypeError(f"cannot convert {type(u).__name__} from unstructured")


def _gvk_of(obj: Any) -> GroupVersionKind:
    return getattr(obj, "group_version_kind", _EMPTY_GVK)


def _targets_logical_volume(obj: Any, kind: str) -> bool:
    gvk = _gvk_of(obj)
    return gvk.group == GROUP and gvk.kind == kind and use_legacy()


@contextmanager
def _legacy_kind(obj: Any, kind: str) -> Iterator[None]:
    obj.group_version_kind = LEGACY_GROUP_VERSION.with_kind(kind)
    try:
        yield
    finally:
        obj.group_version_kind = GROUP_VERSION.with_kind(kind)


def _assign_volume(target: LogicalVolume, source: LogicalVolume) -> None:
    target.metadata = source.metadata
    target.spec = source.spec
    target.status = source.status
    target.group_version = source.group_version


def _route(
    obj: Any,
    call: Callable[[Any], Any],
    *,
    swap_partial: bool,
    write_back: bool,
) -> None:
    """Send ``obj`` through ``call``, redirecting LogicalVolumes to the legacy group."""
    if isinstance(obj, Unstructured) or (swap_partial and isinstance(obj, PartialObjectMetadata)):
        if _targets_logical_volume(obj, KIND):
            with _legacy_kind(obj, KIND):
                call(obj)
            return
        call(obj)
        return
    if isinstance(obj, LogicalVolume) and use_legacy():
        u = to_unstructured(obj)
        u.group_version_kind = LEGACY_GROUP_VERSION.with_kind(KIND)
        call(u)
        if write_back:
            u.group_version_kind = GROUP_VERSION.with_kind(KIND)
            _assign_volume(obj, from_unstructured(u))
        return
    call(obj)


class WrappedReader:
    """A reader that looks LogicalVolumes up in the legacy group when it is in use."""

    def __init__(self, reader: Any) -> None:
        self._reader = reader

    def get(self, key: Any, obj: Any, *args: Any) -> None:
        _route(
            obj,
            lambda target: self._reader.get(key, target, *args),
            swap_partial=True,
            write_back=True,
        )

    def list(self, obj_list: Any, *args: Any) -> None:
        def call(target: Any) -> None:
            self._reader.list(target, *args)

        if isinstance(obj_list, (UnstructuredList, PartialObjectMetadataList)):
            if _targets_logical_volume(obj_list, KIND_LIST):
                with _legacy_kind(obj_list, KIND_LIST):
                    call(obj_list)
                return
            call(obj_list)
            return
        if isinstance(obj_list, LogicalVolumeList) and use_legacy():
            legacy = LogicalVolumeList(group_version=LEGACY_GROUP_VERSION)
            call(legacy)
            u = to_unstructured(legacy)
            u.group_version_kind = GROUP_VERSION.with_kind(KIND_LIST)
            converted = from_unstructured(u)
            obj_list.items = converted.items
            obj_list.metadata = converted.metadata
            obj_list.group_version = converted.group_version
            for item in obj_list.items:
                item.group_version = converted.group_version
            return
        call(obj_list)


class WrappedClient:
    """A client that stores LogicalVolumes in the legacy group when it is in use."""

    def __init__(self, client: Any) -> None:
        self._client = client
        self._reader = WrappedReader(client)

    def get(self, key: Any, obj: Any, *args: Any) -> None:
        self._reader.get(key, obj, *args)

    def list(self, obj_list: Any, *args: Any) -> None:
        self._reader.list(obj_list, *args)

    def create(self, obj: Any, *args: Any) -> None:
        _route(
            obj,
            lambda target: self._client.create(target, *args),
            swap_partial=False,
            write_back=True,
        )

    def delete(self, obj: Any, *args: Any) -> None:
        _route(
            obj,
            lambda target: self._client.delete(target, *args),
            swap_partial=True,
            write_back=False,
        )

    def update(self, obj: Any, *args: Any) -> None:
        _route(
            obj,
            lambda target: self._client.update(target, *args),
            swap_partial=False,
            write_back=True,
        )

    def patch(self, obj: Any, patch: Any, *args: Any) -> None:
        # Both groups define identical LogicalVolumes, so a patch built for one applies to the other.
        _route(
            obj,
            lambda target: self._client.patch(target, patch, *args),
            swap_partial=True,
            write_back=True,
        )

    def delete_all_of(self, obj: Any, *args: Any) -> None:
        _route(
            obj,
            lambda target: self._client.delete_all_of(target, *args),
            swap_partial=True,
            write_back=False,
        )

    def status(self) -> WrappedSubResourceClient:
        return self.sub_resource("status")

    def sub_resource(self, sub_resource: str) -> WrappedSubResourceClient:
        return WrappedSubResourceClient(self._client, sub_resource)

    def group_version_kind_for(self, obj: Any) -> GroupVersionKind:
        """Return the group, version and kind that requests for ``obj`` are sent to."""
        gvk = _gvk_of(obj)
        if isinstance(obj, (Unstructured, PartialObjectMetadata)):
            if _targets_logical_volume(obj, KIND):
                return LEGACY_GROUP_VERSION.with_kind(KIND)
            return gvk
        if isinstance(obj, LogicalVolume) and use_legacy():
            return LEGACY_GROUP_VERSION.with_kind(KIND)
        return gvk

    def is_object_namespaced(self, obj: Any) -> bool:
        return self._client.is_object_namespaced(obj)


class WrappedSubResourceClient:
    """Sub-resource writer that redirects LogicalVolumes to the legacy group."""

    def __init__(self, client: Any, sub_resource: str) -> None:
        self._client = client
        self._sub_resource = sub_resource

    def get(self, obj: Any, sub_resource: Any, *args: Any) -> None:
        raise SubResourceNotSupportedError("WrappedSubResourceClient.get is not implemented")

    def create(self, obj: Any, sub_resource: Any, *args: Any) -> None:
        raise SubResourceNotSupportedError("WrappedSubResourceClient.create is not implemented")

    def update(self, obj: Any, *args: Any) -> None:
        writer = self._client.sub_resource(self._sub_resource)
        _route(
            obj,
            lambda target: writer.update(target, *args),
            swap_partial=False,
            write_back=True,
        )

    def patch(self, obj: Any, patch: Any, *args: Any) -> None:
        writer = self._client.sub_resource(self._sub_resource)
        _route(
            obj,
            lambda target: writer.patch(target, patch, *args),
            swap_partial=True,
            write_back=True,
        )