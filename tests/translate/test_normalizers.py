"""Tests for runvector.translate.normalizers.

Covers every category normalizer, error aggregation across categories and
the projection property (normalizing a normalized spec is a no-op).
"""

from __future__ import annotations

import pytest

from runvector.core.errors import (
    AggregateError,
    InvalidAnnotationKey,
    InvalidDevice,
    InvalidEnvKey,
    InvalidImage,
    InvalidMount,
    InvalidReadOnly,
    InvalidWorkdir,
)
from runvector.translate import (
    AnnotationDecl,
    DeploymentSpec,
    DeviceDecl,
    DevicePermission,
    EnvDecl,
    MountDecl,
    MountKind,
    MountMode,
    TranslationConfig,
    normalize_spec,
)
from runvector.translate.normalizers import (
    normalize_annotations,
    normalize_devices,
    normalize_env,
    normalize_image,
    normalize_mounts,
    normalize_read_only,
    normalize_workdir,
)


def _errors(result) -> list:
    error = result.unwrap_err()
    return list(error) if isinstance(error, AggregateError) else [error]


# ------------------------------------------------------------------ #
# Scalars
# ------------------------------------------------------------------ #


class TestScalars:
    def test_image_passthrough(self):
        assert normalize_image("library/app:1.0").unwrap() == "library/app:1.0"

    def test_image_not_string(self):
        (err,) = _errors(normalize_image(None))
        assert isinstance(err, InvalidImage)

    def test_image_bad_reference(self):
        (err,) = _errors(normalize_image("Not An Image"))
        assert isinstance(err, InvalidImage)
        assert "whitespace" in err.message

    @pytest.mark.parametrize("workdir", [None, ""])
    def test_workdir_absent(self, workdir):
        assert normalize_workdir(workdir).unwrap() is None

    def test_workdir_cleaned(self):
        assert normalize_workdir("/srv//app/./").unwrap() == "/srv/app"

    def test_workdir_relative(self):
        (err,) = _errors(normalize_workdir("srv"))
        assert isinstance(err, InvalidWorkdir)
        assert err.location == "workdir"

    def test_read_only(self):
        assert normalize_read_only(True).unwrap() is True
        (err,) = _errors(normalize_read_only("yes"))
        assert isinstance(err, InvalidReadOnly)


# ------------------------------------------------------------------ #
# Mounts
# ------------------------------------------------------------------ #


class TestMounts:
    def test_bind_paths_cleaned(self):
        (mount,) = normalize_mounts([MountDecl(source="/host//data/", target="/data/./")]).unwrap()
        assert mount == MountDecl(source="/host/data", target="/data", mode=MountMode.READ_WRITE, kind=MountKind.BIND)

    def test_mode_aliases(self):
        (mount,) = normalize_mounts([MountDecl(source="/a", target="/b", mode="read-only")]).unwrap()
        assert mount.mode is MountMode.READ_ONLY

    def test_kind_from_string(self):
        (mount,) = normalize_mounts([MountDecl(source="vol", target="/b", kind="volume")]).unwrap()
        assert mount.kind is MountKind.VOLUME
        assert mount.source == "vol"

    def test_volume_absolute_source(self):
        (mount,) = normalize_mounts([MountDecl(source="/srv//vol", target="/b", kind=MountKind.VOLUME)]).unwrap()
        assert mount.source == "/srv/vol"

    def test_tmpfs_drops_source(self):
        (mount,) = normalize_mounts([MountDecl(source="ignored", target="/scratch", kind=MountKind.TMPFS)]).unwrap()
        assert mount.source is None

    def test_sorted_by_target(self):
        mounts = normalize_mounts(
            [MountDecl(source="/z", target="/z"), MountDecl(source="/a", target="/a")]
        ).unwrap()
        assert [m.target for m in mounts] == ["/a", "/z"]

    def test_relative_target(self):
        (err,) = _errors(normalize_mounts([MountDecl(source="/a", target="data")]))
        assert isinstance(err, InvalidMount)
        assert err.location == "mounts[0].target"

    def test_bind_relative_source(self):
        (err,) = _errors(normalize_mounts([MountDecl(source="data", target="/data")]))
        assert err.field == "source"

    def test_comma_rejected(self):
        (err,) = _errors(normalize_mounts([MountDecl(source="/a,b", target="/data")]))
        assert "','" in err.message

    def test_bad_mode_and_kind_both_reported(self):
        errors = _errors(normalize_mounts([MountDecl(source="/a", target="/b", mode="rwx", kind="nfs")]))
        assert {e.field for e in errors} == {"mode", "kind"}

    def test_bad_volume_name(self):
        (err,) = _errors(normalize_mounts([MountDecl(source="bad name", target="/b", kind=MountKind.VOLUME)]))
        assert err.field == "source"

    def test_volume_name_trailing_newline(self):
        (err,) = _errors(normalize_mounts([MountDecl(source="cache\n", target="/c", kind=MountKind.VOLUME)]))
        assert isinstance(err, InvalidMount)
        assert err.field == "source"

    def test_not_a_mount(self):
        (err,) = _errors(normalize_mounts(["/a:/b"]))
        assert isinstance(err, InvalidMount)
        assert err.index == 0

    def test_every_bad_mount_reported(self):
        errors = _errors(
            normalize_mounts(
                [
                    MountDecl(source="/ok", target="/ok"),
                    MountDecl(source="/a", target="rel1"),
                    MountDecl(source="/b", target="rel2"),
                ]
            )
        )
        assert [e.index for e in errors] == [1, 2]


# ------------------------------------------------------------------ #
# Devices
# ------------------------------------------------------------------ #


class TestDevices:
    def test_container_path_defaults_to_host(self):
        (device,) = normalize_devices([DeviceDecl(host_path="/dev/fuse")]).unwrap()
        assert device.container_path == "/dev/fuse"
        assert device.permissions == frozenset({DevicePermission.READ, DevicePermission.WRITE})
        assert device.permission_string == "rw"

    def test_permissions_from_string(self):
        (device,) = normalize_devices([DeviceDecl("/dev/sda", "/dev/xvda", "mwr")]).unwrap()
        assert device.permission_string == "rwm"

    def test_permissions_from_names(self):
        (device,) = normalize_devices([DeviceDecl("/dev/sda", None, ["read"])]).unwrap()
        assert device.permission_string == "r"

    def test_cdi_device(self):
        (device,) = normalize_devices([DeviceDecl(host_path="nvidia.com/gpu=all")]).unwrap()
        assert device.container_path is None
        assert device.key == "nvidia.com/gpu=all"

    def test_cdi_device_with_container_path_rejected(self):
        (err,) = _errors(normalize_devices([DeviceDecl("nvidia.com/gpu=all", "/dev/gpu")]))
        assert isinstance(err, InvalidDevice)

    def test_cdi_name_trailing_newline(self):
        (err,) = _errors(normalize_devices([DeviceDecl(host_path="nvidia.com/gpu=all\n")]))
        assert isinstance(err, InvalidDevice)
        assert err.field == "host_path"

    def test_relative_host(self):
        (err,) = _errors(normalize_devices([DeviceDecl(host_path="dev/fuse")]))
        assert err.field == "host_path"

    def test_empty_permissions(self):
        (err,) = _errors(normalize_devices([DeviceDecl("/dev/fuse", None, "")]))
        assert err.field == "permissions"

    def test_unknown_permission(self):
        (err,) = _errors(normalize_devices([DeviceDecl("/dev/fuse", None, "rx")]))
        assert err.value == "x"

    def test_non_iterable_permissions(self):
        (err,) = _errors(normalize_devices([DeviceDecl("/dev/fuse", None, 7)]))
        assert err.field == "permissions"

    def test_colon_in_container_path(self):
        (err,) = _errors(normalize_devices([DeviceDecl("/dev/fuse", "/dev/a:b")]))
        assert err.field == "container_path"


# ------------------------------------------------------------------ #
# Env / annotations
# ------------------------------------------------------------------ #


class TestEnv:
    def test_mapping_and_sorting(self):
        env = normalize_env(DeploymentSpec(image="a", env={"B": "2", "A": "1"}).env).unwrap()
        assert env == (EnvDecl("A", "1"), EnvDecl("B", "2"))

    def test_key_trimmed_value_untouched(self):
        (decl,) = normalize_env([EnvDecl("  KEY ", "  spaced value ")]).unwrap()
        assert decl == EnvDecl("KEY", "  spaced value ")

    def test_empty_value_allowed(self):
        (decl,) = normalize_env([EnvDecl("EMPTY", "")]).unwrap()
        assert decl.value == ""

    @pytest.mark.parametrize("key", ["", "   ", "A B", "A=B", "A\x00"])
    def test_bad_keys(self, key):
        (err,) = _errors(normalize_env([EnvDecl(key, "v")]))
        assert isinstance(err, InvalidEnvKey)
        assert err.field == "key"

    def test_non_string_value(self):
        (err,) = _errors(normalize_env([EnvDecl("PORT", 8080)]))
        assert err.field == "value"

    def test_duplicates_survive_normalization(self):
        env = normalize_env([EnvDecl("A", "1"), EnvDecl("A", "2")]).unwrap()
        assert len(env) == 2


class TestAnnotations:
    @pytest.mark.parametrize("key", ["com.example.tier", "io.podman/hooks", "example.com/x"])
    def test_namespaced_keys(self, key):
        (decl,) = normalize_annotations([AnnotationDecl(key, "v")]).unwrap()
        assert decl.key == key

    @pytest.mark.parametrize("key", ["tier", ".tier", "com.", "a//b", "a b.c"])
    def test_bad_keys(self, key):
        (err,) = _errors(normalize_annotations([AnnotationDecl(key, "v")]))
        assert isinstance(err, InvalidAnnotationKey)


# ------------------------------------------------------------------ #
# Whole spec
# ------------------------------------------------------------------ #


class TestNormalizeSpec:
    def test_success(self, full_spec):
        resources = normalize_spec(full_spec).unwrap()
        assert resources.workdir == "/srv/app"
        assert resources.read_only is True
        assert [e.key for e in resources.env] == ["ALPHA", "ZETA"]

    def test_errors_from_every_category_in_field_order(self):
        spec = DeploymentSpec(
            image="",
            mounts=[MountDecl(source="/a", target="rel")],
            env={"A B": "x"},
            workdir="rel",
            read_only="no",
        )
        errors = _errors(normalize_spec(spec))
        assert [type(e) for e in errors] == [InvalidImage, InvalidMount, InvalidEnvKey, InvalidWorkdir, InvalidReadOnly]

    def test_projection(self, full_spec):
        once = normalize_spec(full_spec).unwrap()
        twice = normalize_spec(once.to_spec()).unwrap()
        assert twice == once

    def test_parallel_matches_sequential(self, full_spec):
        sequential = normalize_spec(full_spec, TranslationConfig())
        parallel = normalize_spec(full_spec, TranslationConfig(parallel=True, max_workers=3))
        assert parallel == sequential

    def test_parallel_error_order(self):
        spec = DeploymentSpec(image="", workdir="rel")
        errors = _errors(normalize_spec(spec, TranslationConfig(parallel=True)))
        assert [type(e) for e in errors] == [InvalidImage, InvalidWorkdir]
