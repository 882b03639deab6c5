"""Tests for the Pydantic data models — validation, immutability, ordering."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from slipway.models.deployment import (
    Affix,
    BranchIdentity,
    DeploymentChannel,
    DeploymentInfo,
)
from slipway.models.publishing import PublishPlan, PublishTarget, PublishTargetKind
from slipway.models.stages import (
    STAGE_SEQUENCE,
    TERMINAL_STATES,
    VALID_UNIT_TRANSITIONS,
    Stage,
    UnitState,
)
from slipway.models.units import BuildUnit, PropertyKind, PropertyValue
from slipway.models.versioning import Version


class TestVersion:
    def test_full_rendering(self):
        assert Version(build=1, major=0, minor=406, revision=18434).full == "1.0.406.18434"

    def test_parse_round_trips_text(self):
        assert str(Version.parse("3.2.1.0")) == "3.2.1.0"

    @pytest.mark.parametrize("text", ["1.2.3", "1.2.3.x", "", "1.2.3.4.5"])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            Version.parse(text)

    def test_fields_bounded_to_uint16(self):
        with pytest.raises(ValidationError):
            Version(build=1, major=0, minor=65536, revision=0)

    def test_orders_field_wise(self):
        a = Version.parse("1.0.5.65535")
        b = Version.parse("1.0.6.0")
        assert a < b
        assert b >= a
        assert sorted([b, a]) == [a, b]

    def test_frozen(self):
        v = Version.parse("1.0.0.0")
        with pytest.raises(ValidationError):
            v.minor = 2


class TestDeploymentModels:
    def test_branch_identity_requires_segments(self):
        with pytest.raises(ValidationError):
            BranchIdentity(raw_name="", segments=())

    def test_branch_identity_path(self):
        ident = BranchIdentity(raw_name="feature/x", segments=("feature", "x"))
        assert ident.path == "feature/x"

    def test_is_production(self):
        info = DeploymentInfo(
            channel=DeploymentChannel.PRODUCTION,
            affix=Affix(),
            branch=BranchIdentity(raw_name="main", segments=("main",)),
        )
        assert info.is_production
        assert info.affix.suffix == ""


class TestPropertyValue:
    def test_whitespace_is_empty(self):
        assert PropertyValue.of("   ").kind == PropertyKind.EMPTY

    def test_value_is_stripped(self):
        assert PropertyValue.of("  true ").value == "true"

    def test_as_bool(self):
        assert PropertyValue.of("True").as_bool() is True
        assert PropertyValue.of("false").as_bool() is False
        assert PropertyValue.absent().as_bool() is False
        assert PropertyValue.empty().as_bool(default=True) is True


class TestBuildUnit:
    def test_key_and_names(self):
        unit = BuildUnit(
            solution_path=Path("/src/Main.sln"),
            project_path=Path("/src/Api/Api.csproj"),
        )
        assert unit.key == "Main/Api"
        assert unit.solution_name == "Main"
        assert unit.project_name == "Api"

    def test_key_includes_solution_folder_below_source_root(self):
        units = [
            BuildUnit(
                solution_path=Path(f"/repo/source/{folder}/App.sln"),
                project_path=Path(f"/repo/source/{folder}/Core/Core.csproj"),
                source_root=Path("/repo/source"),
            )
            for folder in ("a", "b")
        ]
        assert [u.key for u in units] == ["a/App/Core", "b/App/Core"]
        assert units[0].layout == Path("a", "App", "Core")

    def test_solution_outside_source_root_uses_its_name(self):
        unit = BuildUnit(
            solution_path=Path("/elsewhere/Main.sln"),
            project_path=Path("/elsewhere/Api/Api.csproj"),
            source_root=Path("/repo/source"),
        )
        assert unit.key == "Main/Api"

    def test_unresolved_until_flags_set(self):
        unit = BuildUnit(solution_path=Path("a.sln"), project_path=Path("b.csproj"))
        assert not unit.is_resolved
        resolved = unit.model_copy(
            update={"is_packable": False, "is_publishable": False, "target_kind": "sdk_style"}
        )
        assert resolved.is_resolved


class TestStageModels:
    def test_terminal_states_have_no_exits(self):
        for state in TERMINAL_STATES:
            assert VALID_UNIT_TRANSITIONS[state] == set()

    def test_every_state_has_a_transition_row(self):
        assert set(VALID_UNIT_TRANSITIONS) == set(UnitState)

    def test_sequence_restores_twice_before_build(self):
        stages = [step.stage for step in STAGE_SEQUENCE]
        assert stages[:4] == [Stage.RESTORE, Stage.CLEAN, Stage.RESTORE, Stage.BUILD]

    def test_only_test_step_is_non_fatal(self):
        non_fatal = [step.stage for step in STAGE_SEQUENCE if not step.fatal]
        assert non_fatal == [Stage.TEST]


class TestPublishPlan:
    def test_includes_by_name(self):
        plan = PublishPlan(
            channel=DeploymentChannel.DEVELOPMENT,
            targets=(
                PublishTarget(
                    name="LocalFeed",
                    kind=PublishTargetKind.LOCAL_FEED,
                    destination="/feed",
                ),
            ),
        )
        assert plan.includes("LocalFeed")
        assert not plan.includes("PublicRegistry")
        assert plan.target_names == ["LocalFeed"]
