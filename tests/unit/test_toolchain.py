"""Tests for per-unit toolchain selection."""

from __future__ import annotations

import pytest

from slipway.core.toolchain import (
    LEGACY_FRAMEWORK_MONIKERS,
    ToolchainSelector,
    is_legacy_moniker,
    normalize_moniker,
)
from slipway.errors import DiscoveryError
from slipway.models.units import BuildTool, TargetFrameworkKind, TargetKind


@pytest.fixture
def unit(make_unit):
    return make_unit("Lib")


@pytest.fixture
def selector(fake_reader):
    return ToolchainSelector(fake_reader)


class TestMonikers:
    @pytest.mark.parametrize(
        "raw,expected",
        [("v4.7.2", "net472"), ("V4.6.1", "net461"), ("v2.0", "net20"), (" NET8.0 ", "net8.0")],
    )
    def test_normalize(self, raw, expected):
        assert normalize_moniker(raw) == expected

    def test_legacy_set(self):
        assert "net481" in LEGACY_FRAMEWORK_MONIKERS
        assert is_legacy_moniker("v4.8")
        assert not is_legacy_moniker("net8.0")
        assert not is_legacy_moniker("netstandard2.0")
        assert not is_legacy_moniker("netcoreapp3.1")


class TestSelection:
    def test_mixed_multi_target_needs_legacy_tool(self, fake_reader, selector, unit):
        fake_reader.set_properties(unit.project_path, TargetFrameworks="net472;net8.0")
        selection = selector.select(unit)
        assert selection.tool == BuildTool.LEGACY_MSBUILD_TOOL
        assert selection.framework_kind == TargetFrameworkKind.FRAMEWORK
        assert selection.target_kind == TargetKind.SDK_STYLE
        assert selection.target_frameworks == frozenset({"net472", "net8.0"})
        assert selection.source_property == "TargetFrameworks"

    def test_modern_single_target(self, fake_reader, selector, unit):
        fake_reader.set_properties(unit.project_path, TargetFramework="net8.0")
        selection = selector.select(unit)
        assert selection.tool == BuildTool.MODERN_SDK_BUILDER
        assert selection.framework_kind == TargetFrameworkKind.CORE
        assert selection.target_kind == TargetKind.SDK_STYLE

    def test_legacy_project_version(self, fake_reader, selector, unit):
        fake_reader.set_properties(unit.project_path, TargetFrameworkVersion="v4.7.2")
        selection = selector.select(unit)
        assert selection.tool == BuildTool.LEGACY_MSBUILD_TOOL
        assert selection.target_kind == TargetKind.LEGACY_STYLE
        assert selection.target_frameworks == frozenset({"net472"})

    def test_legacy_property_takes_precedence(self, fake_reader, selector, unit):
        fake_reader.set_properties(
            unit.project_path, TargetFrameworkVersion="v4.8", TargetFramework="net8.0"
        )
        assert selector.select(unit).source_property == "TargetFrameworkVersion"

    def test_single_beats_multi(self, fake_reader, selector, unit):
        fake_reader.set_properties(
            unit.project_path, TargetFramework="net8.0", TargetFrameworks="net48;net8.0"
        )
        assert selector.select(unit).tool == BuildTool.MODERN_SDK_BUILDER

    def test_empty_values_fall_through(self, fake_reader, selector, unit):
        fake_reader.set_properties(
            unit.project_path, TargetFramework="  ", TargetFrameworks="net6.0;net8.0;"
        )
        selection = selector.select(unit)
        assert selection.source_property == "TargetFrameworks"
        assert selection.target_frameworks == frozenset({"net6.0", "net8.0"})

    def test_modern_only_multi_target(self, fake_reader, selector, unit):
        fake_reader.set_properties(unit.project_path, TargetFrameworks="netstandard2.0;net8.0")
        assert selector.select(unit).tool == BuildTool.MODERN_SDK_BUILDER

    def test_nothing_declared_is_a_discovery_error(self, selector, unit):
        with pytest.raises(DiscoveryError) as excinfo:
            selector.select(unit)
        assert excinfo.value.project_path == unit.project_path

    def test_separator_only_list_is_a_discovery_error(self, fake_reader, selector, unit):
        fake_reader.set_properties(unit.project_path, TargetFrameworks=";;")
        with pytest.raises(DiscoveryError):
            selector.select(unit)

    def test_deterministic(self, fake_reader, selector, unit):
        fake_reader.set_properties(unit.project_path, TargetFrameworks="net48;net8.0")
        assert selector.select(unit) == selector.select(unit)
