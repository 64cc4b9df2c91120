import pytest

from topolvm import constants


@pytest.fixture
def current_env(monkeypatch):
    monkeypatch.setenv("USE_LEGACY", "")


@pytest.fixture
def legacy_env(monkeypatch):
    monkeypatch.setenv("USE_LEGACY", "true")


def test_use_legacy_false_when_empty(current_env):
    assert constants.use_legacy() is False


def test_use_legacy_true_when_set(legacy_env):
    assert constants.use_legacy() is True


def test_use_legacy_false_when_unset(monkeypatch):
    monkeypatch.delenv("USE_LEGACY", raising=False)
    assert constants.use_legacy() is False


def test_plugin_name_current(current_env):
    assert constants.get_plugin_name() == constants.PLUGIN_NAME
    assert constants.get_plugin_name() == "topolvm.io"


def test_plugin_name_legacy(legacy_env):
    assert constants.get_plugin_name() == constants.LEGACY_PLUGIN_NAME
    assert constants.get_plugin_name() == "topolvm.cybozu.com"


@pytest.mark.parametrize(
    "envval, contained",
    [("", "topolvm.io"), ("true", "topolvm.cybozu.com")],
)
def test_keys_contain_plugin_name(monkeypatch, envval, contained):
    monkeypatch.setenv("USE_LEGACY", envval)
    keys = [
        constants.get_capacity_key_prefix(),
        constants.get_capacity_resource(),
        constants.get_topology_node_key(),
        constants.get_device_class_key(),
        constants.get_lvcreate_option_class_key(),
        constants.get_resize_requested_at_key(),
        constants.get_lv_pending_deletion_key(),
        constants.get_logical_volume_finalizer(),
        constants.get_node_finalizer(),
    ]
    assert len(keys) == 9
    for key in keys:
        assert contained in key


def test_current_keys_do_not_contain_legacy_name(current_env):
    keys = [
        constants.get_capacity_key_prefix(),
        constants.get_capacity_resource(),
        constants.get_topology_node_key(),
        constants.get_device_class_key(),
        constants.get_lvcreate_option_class_key(),
        constants.get_resize_requested_at_key(),
        constants.get_lv_pending_deletion_key(),
        constants.get_logical_volume_finalizer(),
        constants.get_node_finalizer(),
    ]
    assert [key for key in keys if "cybozu" in key] == []


def test_key_formats(current_env):
    assert constants.get_capacity_key_prefix() == "capacity.topolvm.io/"
    assert constants.get_capacity_resource() == "topolvm.io/capacity"
    assert constants.get_topology_node_key() == "topology.topolvm.io/node"
    assert constants.get_device_class_key() == "topolvm.io/device-class"
    assert constants.get_lvcreate_option_class_key() == "topolvm.io/lvcreate-option-class"
    assert constants.get_resize_requested_at_key() == "topolvm.io/resize-requested-at"
    assert constants.get_lv_pending_deletion_key() == "topolvm.io/pendingdeletion"
    assert constants.get_logical_volume_finalizer() == "topolvm.io/logicalvolume"
    assert constants.get_node_finalizer() == "topolvm.io/node"


def test_legacy_key_formats(legacy_env):
    assert constants.get_topology_node_key() == "topology.topolvm.cybozu.com/node"
    assert constants.get_node_finalizer() == "topolvm.cybozu.com/node"