import pytest
import yaml

from urcf.global_config import GlobalConfig, GlobalConfigService, Rpc, Sys
from urcf.lifecycle import LifecycleError


def test_defaults():
    config = GlobalConfigService().get()
    assert config.rpc.port == 8228
    assert config.sys.work_path == "./"
    assert config.sys.plugin_path == "./plugin"
    assert config.sys.database_path == "./database"


def test_initialize_overlays_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("rpc:\n  port: 9000\nsys:\n  work-path: /srv\n", encoding="utf-8")
    service = GlobalConfigService()
    service.initialize(str(path))
    config = service.get()
    assert config.rpc.port == 9000
    assert config.sys.work_path == "/srv"
    assert config.sys.plugin_path == Sys().plugin_path


def test_write_round_trip(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")
    service = GlobalConfigService()
    service.initialize(path)
    new = GlobalConfig(Rpc(port=7001), Sys(work_path="/w", plugin_webs="/webs"))
    service.write(new)
    assert service.get() == new
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert raw["sys"]["work-path"] == "/w"
    assert raw["rpc"]["port"] == 7001
    other = GlobalConfigService()
    other.initialize(path)
    assert other.get() == new


def test_write_without_file_raises():
    service = GlobalConfigService()
    with pytest.raises(LifecycleError):
        service.write(GlobalConfig())


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        GlobalConfigService().initialize(tmp_path / "absent.yml")


def test_non_mapping_content_raises(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        GlobalConfigService().initialize(path)


def test_invalid_port_raises(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("rpc:\n  port: 70000\n", encoding="utf-8")
    with pytest.raises(ValueError):
        GlobalConfigService().initialize(path)


def test_lifecycle(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("{}\n", encoding="utf-8")
    service = GlobalConfigService()
    service.initialize(path)
    with pytest.raises(LifecycleError):
        service.initialize(path)
    service.uninitialize()
    with pytest.raises(LifecycleError):
        service.uninitialize()
    with pytest.raises(LifecycleError):
        service.write(GlobalConfig())