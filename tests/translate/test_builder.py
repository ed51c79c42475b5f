"""Tests for the ordering policy and the argument vector builder."""

from __future__ import annotations

import pytest

from runvector.translate import (
    ArgumentVector,
    CATEGORY_ORDER,
    DeviceDecl,
    EnvDecl,
    FlagCategory,
    FlagGroup,
    MountDecl,
    MountKind,
    MountMode,
    NormalizedResources,
    build_argument_vector,
    order_resources,
)
from runvector.translate.builder import device_value, mount_value
from runvector.translate.models import DevicePermission


class TestOrderResources:
    def test_image_only(self):
        groups = order_resources(NormalizedResources(image="app", workdir=None, read_only=False))
        assert groups == (FlagGroup(FlagCategory.IMAGE, ("app",)),)

    def test_category_sequence(self):
        resources = NormalizedResources(
            image="app",
            workdir="/srv",
            read_only=True,
            env=(EnvDecl("A", "1"),),
            mounts=(MountDecl(source="/h", target="/d"),),
            devices=(DeviceDecl("/dev/fuse", "/dev/fuse"),),
        )
        categories = [g.category for g in order_resources(resources)]
        assert categories == [
            FlagCategory.WORKDIR,
            FlagCategory.READ_ONLY,
            FlagCategory.ENV,
            FlagCategory.MOUNTS,
            FlagCategory.DEVICES,
            FlagCategory.IMAGE,
        ]
        assert CATEGORY_ORDER[-1] is FlagCategory.IMAGE

    def test_entries_sorted_regardless_of_input_order(self):
        resources = NormalizedResources(
            image="app",
            workdir=None,
            read_only=False,
            env=(EnvDecl("B", "2"), EnvDecl("A", "1")),
        )
        (env_group, _) = order_resources(resources)
        assert env_group.entries == (EnvDecl("A", "1"), EnvDecl("B", "2"))


class TestTemplates:
    def test_bind_mount(self):
        assert mount_value(MountDecl(source="/h", target="/d")) == "source=/h,target=/d,mode=rw"

    def test_volume_mount(self):
        mount = MountDecl(source="cache", target="/c", mode=MountMode.READ_ONLY, kind=MountKind.VOLUME)
        assert mount_value(mount) == "type=volume,source=cache,target=/c,ro=true"

    def test_tmpfs_mount(self):
        mount = MountDecl(source=None, target="/tmp", kind=MountKind.TMPFS)
        assert mount_value(mount) == "type=tmpfs,target=/tmp"

    def test_read_only_tmpfs_mount(self):
        mount = MountDecl(source=None, target="/cache", mode=MountMode.READ_ONLY, kind=MountKind.TMPFS)
        assert mount_value(mount) == "type=tmpfs,target=/cache,ro=true"

    def test_device_triple(self):
        device = DeviceDecl("/dev/sda", "/dev/xvda", frozenset({DevicePermission.MKNOD, DevicePermission.READ}))
        assert device_value(device) == "/dev/sda:/dev/xvda:rm"

    def test_cdi_device(self):
        assert device_value(DeviceDecl("nvidia.com/gpu=all")) == "nvidia.com/gpu=all"


class TestBuildArgumentVector:
    def test_tokens(self):
        groups = (
            FlagGroup(FlagCategory.WORKDIR, ("/srv",)),
            FlagGroup(FlagCategory.READ_ONLY, (True,)),
            FlagGroup(FlagCategory.ENV, (EnvDecl("MODE", "prod"),)),
            FlagGroup(FlagCategory.IMAGE, ("app:1",)),
        )
        vector = build_argument_vector(groups)
        assert vector.to_list() == ["--workdir", "/srv", "--read-only", "--env", "MODE=prod", "app:1"]

    def test_value_with_spaces_is_one_token(self):
        groups = (
            FlagGroup(FlagCategory.ENV, (EnvDecl("GREETING", "hello world"),)),
            FlagGroup(FlagCategory.IMAGE, ("app",)),
        )
        assert build_argument_vector(groups).to_list() == ["--env", "GREETING=hello world", "app"]

    def test_empty_value_keeps_key_token(self):
        groups = (FlagGroup(FlagCategory.ENV, (EnvDecl("EMPTY", ""),)), FlagGroup(FlagCategory.IMAGE, ("app",)))
        assert build_argument_vector(groups).to_list() == ["--env", "EMPTY=", "app"]

    def test_image_must_be_last(self):
        with pytest.raises(ValueError):
            build_argument_vector((FlagGroup(FlagCategory.WORKDIR, ("/srv",)),))
        with pytest.raises(ValueError):
            build_argument_vector(())


class TestArgumentVector:
    def test_rejects_empty_tokens(self):
        with pytest.raises(ValueError):
            ArgumentVector(("--env", ""))

    def test_rejects_non_strings(self):
        with pytest.raises(ValueError):
            ArgumentVector(("--read-only", None))

    def test_sequence_protocol(self):
        vector = ArgumentVector(("--read-only", "app"))
        assert len(vector) == 2
        assert vector[-1] == "app"
        assert vector[:1] == ("--read-only",)
        assert list(vector) == ["--read-only", "app"]
        assert (vector + ["sh"]).to_list() == ["--read-only", "app", "sh"]

    def test_render_quotes_for_display_only(self):
        vector = ArgumentVector(("--env", "A=b c", "app"))
        assert vector.render() == "--env 'A=b c' app"
        assert vector.tokens[1] == "A=b c"
