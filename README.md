# topolvm

Building blocks for an LVM-backed CSI storage plugin, written in Python.

## What is in the package

- **Plugin names and keys** (`topolvm.constants`): `get_plugin_name()` and
  the keys derived from it: `get_capacity_key_prefix()`,
  `get_capacity_resource()`, `get_topology_node_key()`,
  `get_device_class_key()`, `get_lvcreate_option_class_key()`,
  `get_resize_requested_at_key()`, `get_lv_pending_deletion_key()`,
  `get_logical_volume_finalizer()` and `get_node_finalizer()`. When the
  environment variable `USE_LEGACY` holds any non-empty value
  (`use_legacy()` returns `True`), they use the legacy `topolvm.cybozu.com`
  name instead of `topolvm.io`. Fixed values such as `DEFAULT_LVMD_SOCKET`,
  `DEFAULT_CSI_SOCKET`, `DEFAULT_SIZE` and `MINIMUM_SECTOR_SIZE` live here
  too.
- **API types** (`topolvm.api`): `LogicalVolume`, `LogicalVolumeSpec`,
  `LogicalVolumeStatus` and `LogicalVolumeList`; `GroupVersion` and
  `GroupVersionKind` with `GROUP_VERSION` and `LEGACY_GROUP_VERSION`;
  exact resource quantities (`Quantity`, `parse_quantity`, accepting forms
  such as `1Gi`, `300Mi`, `500m` and `1e3`); and gRPC status codes (`Code`).
  `LogicalVolume.is_compatible_with` compares spec name, source and size.
  Objects convert to and from plain dictionaries with `to_dict`,
  `logical_volume_from_dict` and `logical_volume_list_from_dict`.
- **Legacy-aware client wrappers** (`topolvm.client`): `WrappedReader` and
  `WrappedClient` sit in front of any object offering `get`, `list`,
  `create`, `delete`, `update`, `patch`, `delete_all_of`, `sub_resource`
  and `is_object_namespaced`. In legacy mode they send `LogicalVolume`
  requests to the legacy group while the caller keeps working with the
  current group. Typed objects, `Unstructured`, `UnstructuredList`,
  `PartialObjectMetadata` and `PartialObjectMetadataList` are handled;
  `to_unstructured` and `from_unstructured` convert between typed and
  unstructured forms. `WrappedClient.status()` and `sub_resource()` return
  a `WrappedSubResourceClient`, whose `update` and `patch` are supported
  and whose `get` and `create` raise `SubResourceNotSupportedError`.
- **Access logging** (`topolvm.access_log`): `AccessLogMiddleware` wraps a
  WSGI application and logs one record with the message `"access"` per
  request. Its `fields` attribute holds the status code, method, URL, host,
  request and response sizes, response time, protocol and, when present,
  the remote address and user agent.
- **Configuration** (`topolvm.config`): `load_lvmd_config` reads an lvmd
  YAML file (`socket-name`, `device-classes`, `lvcreate-option-classes`)
  into `LvmdConfig`; `load_scheduler_config` reads a scheduler YAML file
  (`listen`, `divisors`, `default-divisor`, `profiling-bind-address`) into
  `SchedulerConfig`, or returns the defaults when given no path;
  `default_minimum_allocation_settings` returns `MinimumAllocationSettings`
  with the minimum sizes for block volumes (8Mi) and for ext4 (32Mi),
  xfs (300Mi) and btrfs (200Mi).

## Installation

```
pip install .
```

## Examples

```python
from topolvm.api import LogicalVolume, LogicalVolumeSpec, parse_quantity
from topolvm.constants import get_device_class_key, get_plugin_name

lv = LogicalVolume(
    metadata={"name": "volume-1"},
    spec=LogicalVolumeSpec(name="volume-1", node_name="node-1",
                           size=parse_quantity("1Gi")),
)
print(lv.to_dict())
print(get_plugin_name(), get_device_class_key())
```

```python
from topolvm.config import load_scheduler_config

config = load_scheduler_config("/etc/topolvm/scheduler.yaml")
print(config.listen_addr, config.default_divisor, config.divisors)
```

## What it does not do

The package has no commands and runs no services. It does not manage LVM
volume groups or logical volumes, does not serve the CSI controller or node
services, and has no scheduler HTTP server and no connection to a cluster.
The client wrappers only redirect requests; the client they wrap has to be
supplied by the caller.

## Running the tests

```
pip install .[test]
pytest
```