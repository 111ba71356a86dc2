"""Rebuild-then-solve service over serializable skeletons."""
import logging
import math

import pytest
from pydantic import ValidationError

from rig2d.kinematics.schemas import (
    AngleUnit, BoneModel, SkeletonModel, SolveRequest, SolverKind,
)
from rig2d.kinematics.service import (
    KinematicsError, KinematicsService, get_kinematics_service, set_kinematics_service,
)


def _arm_model(angle_unit=AngleUnit.RADIANS, **hints):
    # children listed before parents on purpose
    bones = [
        BoneModel(id="hand", name="Hand", parent_id="forearm", length=10.0),
        BoneModel(id="forearm", name="Forearm", parent_id="upper", length=50.0, **hints),
        BoneModel(id="upper", name="Upper", parent_id="shoulder", length=50.0),
        BoneModel(id="shoulder", name="Shoulder", length=0.0),
    ]
    return SkeletonModel(id="arm", bones=bones, angle_unit=angle_unit)


def test_compute_pose_orders_parents_first():
    svc = KinematicsService()
    pose = svc.compute_pose(_arm_model())

    assert [b.id for b in pose.bones] == ["hand", "forearm", "upper", "shoulder"]
    assert pose.bone("forearm").world_position == pytest.approx([50.0, 0.0])
    assert pose.bone("hand").world_position == pytest.approx([100.0, 0.0])
    assert pose.bone("hand").tip == pytest.approx([110.0, 0.0])
    assert pose.bone("upper").parent_id == "shoulder"


def test_degrees_round_trip():
    model = SkeletonModel(
        id="deg",
        angle_unit=AngleUnit.DEGREES,
        bones=[
            BoneModel(id="a", name="A", length=10.0, rotation=90.0),
            BoneModel(id="b", name="B", parent_id="a", length=10.0, rotation=90.0),
        ],
    )
    pose = KinematicsService().compute_pose(model)

    assert pose.angle_unit == AngleUnit.DEGREES
    assert pose.bone("b").world_rotation == pytest.approx(180.0)
    assert pose.bone("b").rotation == pytest.approx(90.0)
    assert pose.bone("b").tip == pytest.approx([-10.0, 10.0])


def test_unknown_parent_becomes_root(caplog):
    model = SkeletonModel(bones=[BoneModel(id="lost", name="Lost", parent_id="nowhere")])
    svc = KinematicsService()
    with caplog.at_level(logging.WARNING):
        skel = svc.build_skeleton(model)
    assert [r.id for r in skel.roots] == ["lost"]
    assert "nowhere" in caplog.text


def test_duplicate_ids_rejected():
    model = SkeletonModel(bones=[BoneModel(id="x", name="X"), BoneModel(id="x", name="X2")])
    with pytest.raises(KinematicsError) as exc:
        KinematicsService().build_skeleton(model)
    assert exc.value.code == "skeleton.duplicate_bone"


def test_cycle_rejected():
    model = SkeletonModel(bones=[
        BoneModel(id="a", name="A", parent_id="c"),
        BoneModel(id="b", name="B", parent_id="a"),
        BoneModel(id="c", name="C", parent_id="b"),
    ])
    with pytest.raises(KinematicsError) as exc:
        KinematicsService().build_skeleton(model)
    assert exc.value.code == "skeleton.cycle"


def test_build_reuses_skeleton_instance():
    svc = KinematicsService()
    skel = svc.build_skeleton(_arm_model())
    again = svc.build_skeleton(SkeletonModel(bones=[BoneModel(id="solo", name="Solo")]), skel)
    assert again is skel
    assert list(skel.bones) == ["solo"]


def test_solve_fabrik_reports_metrics():
    request = SolveRequest(
        skeleton=_arm_model(),
        effector_id="forearm",
        chain_length=2,
        target=[60.0, 40.0],
        iterations=100,
    )
    result = KinematicsService().solve(request)

    assert result.metrics.solver == SolverKind.FABRIK
    assert result.metrics.chain == ["upper", "forearm"]
    assert 1 <= result.metrics.iterations <= 100
    assert result.metrics.reached
    assert result.pose.bone("forearm").tip == pytest.approx([60.0, 40.0], abs=1e-3)


def test_solve_unreachable_stretches():
    request = SolveRequest(skeleton=_arm_model(), effector_id="forearm", target=[0.0, 500.0])
    result = KinematicsService().solve(request)

    assert result.metrics.iterations == 1
    assert not result.metrics.reached
    assert result.metrics.distance == pytest.approx(400.0)
    assert result.pose.bone("forearm").tip == pytest.approx([0.0, 100.0], abs=1e-9)


def test_solve_analytical_two_bone():
    request = SolveRequest(
        skeleton=_arm_model(),
        effector_id="forearm",
        chain_length=2,
        target=[50.0, 50.0],
        solver=SolverKind.ANALYTICAL,
    )
    result = KinematicsService().solve(request)

    assert result.metrics.iterations == 1
    assert result.metrics.reached
    assert result.pose.bone("forearm").rotation == pytest.approx(math.pi / 2)


def test_solve_analytical_rejects_long_chain():
    request = SolveRequest(
        skeleton=_arm_model(), effector_id="hand", target=[10.0, 10.0], solver=SolverKind.ANALYTICAL
    )
    with pytest.raises(KinematicsError) as exc:
        KinematicsService().solve(request)
    assert exc.value.code == "solver.chain_length_mismatch"


def test_solve_unknown_effector():
    request = SolveRequest(skeleton=_arm_model(), effector_id="tail", target=[1.0, 1.0])
    with pytest.raises(KinematicsError) as exc:
        KinematicsService().solve(request)
    assert exc.value.code == "chain.effector_not_found"
    assert exc.value.resource_kind == "chain"


def test_short_override_arrays_rejected():
    request = SolveRequest(
        skeleton=_arm_model(),
        effector_id="hand",
        target=[30.0, 30.0],
        min_angles=[-1.0],
        max_angles=[1.0],
    )
    with pytest.raises(KinematicsError) as exc:
        KinematicsService().solve(request)
    assert exc.value.code == "chain.constraint_length"


def test_bone_hints_drive_fabrik_constraints():
    request = SolveRequest(
        skeleton=_arm_model(angle_unit=AngleUnit.DEGREES, bend_direction=-1),
        effector_id="forearm",
        chain_length=2,
        target=[60.0, 40.0],
    )
    result = KinematicsService().solve(request)
    assert result.pose.bone("forearm").rotation <= 0.0


def test_use_constraints_false_ignores_hints():
    hinted = _arm_model(min_angle=0.0, max_angle=0.0)
    base = dict(effector_id="forearm", chain_length=2, target=[60.0, 40.0], spring_factor=1.0)
    free = KinematicsService().solve(SolveRequest(skeleton=hinted, use_constraints=False, **base))
    held = KinematicsService().solve(SolveRequest(skeleton=hinted, **base))

    assert held.pose.bone("forearm").rotation == pytest.approx(0.0)
    assert free.pose.bone("forearm").rotation != pytest.approx(0.0)


def test_ccd_applies_hard_limits():
    request = SolveRequest(
        skeleton=_arm_model(min_angle=-0.1, max_angle=0.1),
        effector_id="forearm",
        chain_length=2,
        target=[20.0, 60.0],
        solver=SolverKind.CCD,
        iterations=50,
    )
    result = KinematicsService().solve(request)
    assert -0.1 <= result.pose.bone("forearm").rotation <= 0.1


def test_config_defaults_used(monkeypatch):
    monkeypatch.setenv("RIG2D_FABRIK_ITERATIONS", "2")
    monkeypatch.setenv("RIG2D_FABRIK_TOLERANCE", "1e-12")
    request = SolveRequest(skeleton=_arm_model(), effector_id="forearm", chain_length=2, target=[60.0, 40.0])
    result = KinematicsService().solve(request)
    assert result.metrics.iterations == 2


def test_request_validation():
    with pytest.raises(ValidationError):
        SolveRequest(skeleton=_arm_model(), effector_id="hand", target=[1.0])
    with pytest.raises(ValidationError):
        SolveRequest(skeleton=_arm_model(), effector_id="hand", target=[1.0, 1.0], min_angles=[0.0])
    with pytest.raises(ValidationError):
        SolveRequest(skeleton=_arm_model(), effector_id="hand", target=[1.0, 1.0], bend_directions=[2])
    with pytest.raises(ValidationError):
        SolveRequest(skeleton=_arm_model(), effector_id="hand", target=[1.0, float("nan")])
    with pytest.raises(ValidationError):
        BoneModel(id="b", name="B", length=-1.0)
    with pytest.raises(ValidationError):
        BoneModel(id="b", name="B", min_angle=1.0, max_angle=0.0)


def test_angle_limits_must_be_finite_and_ordered():
    base = dict(skeleton=_arm_model(), effector_id="forearm", target=[1.0, 1.0])
    with pytest.raises(ValidationError):
        BoneModel(id="b", name="B", min_angle=float("nan"))
    with pytest.raises(ValidationError):
        BoneModel(id="b", name="B", max_angle=float("inf"))
    with pytest.raises(ValidationError):
        SolveRequest(min_angles=[float("nan"), -1.0], max_angles=[1.0, 1.0], **base)
    with pytest.raises(ValidationError):
        SolveRequest(min_angles=[-1.0, -1.0], max_angles=[float("inf"), 1.0], **base)
    with pytest.raises(ValidationError):
        SolveRequest(min_angles=[-1.0, 1.0], max_angles=[1.0, -1.0], **base)

    ok = SolveRequest(min_angles=[-1.0, 0.5], max_angles=[1.0, 0.5], **base)
    assert ok.max_angles == [1.0, 0.5]
    assert BoneModel(id="b", name="B", min_angle=-0.5).min_angle == -0.5


def test_service_singleton_swap():
    original = get_kinematics_service()
    custom = KinematicsService()
    set_kinematics_service(custom)
    try:
        assert get_kinematics_service() is custom
    finally:
        set_kinematics_service(original)
