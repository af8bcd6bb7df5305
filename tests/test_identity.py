"""Tests for identity capture and OS introspection."""

import pytest

from btfs_analytics import sysinfo
from btfs_analytics.errors import SensorUnavailable
from btfs_analytics.identity import build_identity


class TestBuildIdentity:
    """Tests for build_identity."""

    def test_identity_fields(self, node):
        identity = build_identity(
            node,
            "1.4.0",
            cpu_models=lambda: ["AMD EPYC 7571", "AMD EPYC 7571"],
            os_type=lambda: "linux",
            arch_type=lambda: "amd64",
            clock=lambda: 12.5,
            wall_clock=lambda: 1_700_000_000.0,
        )

        assert identity.node_id == "QmTestNode"
        assert identity.cpu_info == "AMD EPYC 7571"
        assert identity.btfs_version == "1.4.0"
        assert identity.os_type == "linux"
        assert identity.arch_type == "amd64"
        assert identity.start_time == 12.5
        assert identity.started_at == 1_700_000_000.0

    def test_first_cpu_entry_is_used(self, node):
        identity = build_identity(node, "1.0", cpu_models=lambda: ["first", "second"])

        assert identity.cpu_info == "first"

    def test_no_cpu_entries_raises(self, node):
        with pytest.raises(SensorUnavailable):
            build_identity(node, "1.0", cpu_models=lambda: [])

    def test_empty_node_id_raises(self, node):
        node.id = ""

        with pytest.raises(SensorUnavailable):
            build_identity(node, "1.0", cpu_models=lambda: ["cpu"])

    def test_real_introspection(self, node):
        """Test the default collaborators against the running machine."""
        try:
            identity = build_identity(node, "1.0")
        except SensorUnavailable:
            pytest.skip("CPU model not reported on this machine")

        assert identity.cpu_info
        assert identity.os_type
        assert identity.arch_type


class TestSysinfo:
    """Tests for the psutil/platform backed introspection helpers."""

    def test_cpu_models_from_cpuinfo(self, tmp_path):
        cpuinfo = tmp_path / "cpuinfo"
        cpuinfo.write_text(
            "processor\t: 0\n"
            "model name\t: Intel(R) Core(TM) i7-8650U CPU @ 1.90GHz\n"
            "\n"
            "processor\t: 1\n"
            "model name\t: Intel(R) Core(TM) i7-8650U CPU @ 1.90GHz\n"
        )

        models = sysinfo.cpu_models(cpuinfo)

        assert models == ["Intel(R) Core(TM) i7-8650U CPU @ 1.90GHz"] * 2

    def test_cpu_models_falls_back_to_platform(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sysinfo.platform, "processor", lambda: "arm")

        assert sysinfo.cpu_models(tmp_path / "missing") == ["arm"]

    def test_cpu_models_can_be_empty(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sysinfo.platform, "processor", lambda: "")

        assert sysinfo.cpu_models(tmp_path / "missing") == []

    @pytest.mark.parametrize(
        ("machine", "expected"),
        [("x86_64", "amd64"), ("AMD64", "amd64"), ("aarch64", "arm64"), ("i686", "386"), ("riscv64", "riscv64")],
    )
    def test_arch_tags(self, monkeypatch, machine, expected):
        monkeypatch.setattr(sysinfo.platform, "machine", lambda: machine)

        assert sysinfo.arch_type() == expected

    @pytest.mark.parametrize(("system", "expected"), [("Linux", "linux"), ("Darwin", "darwin"), ("Windows", "windows")])
    def test_os_tags(self, monkeypatch, system, expected):
        monkeypatch.setattr(sysinfo.platform, "system", lambda: system)

        assert sysinfo.os_type() == expected

    def test_process_readings(self):
        assert sysinfo.memory_used() > 0
        assert 0.0 <= sysinfo.cpu_percent()
