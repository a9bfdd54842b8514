import pytest

from urcf.plugin_manifest import Architecture, License, Package, PluginManifest


def test_architecture_values():
    assert Architecture("AArch64") is Architecture.AARCH64
    assert Architecture("IA-64") is Architecture.IA_64


def test_full_mapping():
    manifest = PluginManifest.from_mapping(
        {
            "name": "HelloWord",
            "desc": "greets",
            "version": "1.0.0",
            "architecture": "X86_64",
            "os": "linux",
            "enter-point": "python3 plugin.py",
            "conffiles": ["a.conf", "b.conf"],
            "deps": [{"name": "core", "version": "1.2.3"}],
            "sys-deps": [{"name": "python3"}],
            "licenses": [{"name": "MIT", "desc": "LICENSE"}],
            "pre-install": ["echo pre"],
            "post-install": ["echo post"],
            "cover-file": "cover.png",
            "webs-dir": "webs",
        }
    )
    assert manifest.name == "HelloWord"
    assert manifest.architecture is Architecture.X86_64
    assert manifest.enter_point == "python3 plugin.py"
    assert manifest.conffiles == ("a.conf", "b.conf")
    assert manifest.deps == (Package("core", "1.2.3"),)
    assert manifest.sys_deps == (Package("python3", ""),)
    assert manifest.licenses == (License("MIT", "LICENSE"),)
    assert manifest.pre_install == ("echo pre",)
    assert manifest.post_install == ("echo post",)
    assert manifest.cover_file == "cover.png"
    assert manifest.webs_dir == "webs"


def test_unknown_architecture_kept_as_text():
    manifest = PluginManifest.from_mapping({"architecture": "RISCV"})
    assert manifest.architecture == "RISCV"
    assert not isinstance(manifest.architecture, Architecture)


def test_empty_mapping_gives_defaults():
    assert PluginManifest.from_mapping({}) == PluginManifest()


def test_non_mapping_raises():
    with pytest.raises(TypeError):
        PluginManifest.from_mapping(["name"])


def test_bad_list_raises():
    with pytest.raises(TypeError):
        PluginManifest.from_mapping({"deps": "core"})