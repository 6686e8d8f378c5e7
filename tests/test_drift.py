"""Tests for the Drift Detector."""

import logging

from lifecycle_kernel.drift.detector import DriftDetector
from lifecycle_kernel.models.kyma import Kyma, ModuleStatus, TemplateInfo
from lifecycle_kernel.models.template import ModuleTemplate, ResolvedTemplate


def _make_resolved(
    channel: str = "regular",
    version: str = "1.0.0",
    generation: int = 3,
    name: str = "warden",
) -> ResolvedTemplate:
    return ResolvedTemplate(
        template=ModuleTemplate(
            name=name,
            generation=generation,
            spec={"channel": channel, "descriptor": {"name": name, "version": version}},
        )
    )


def _make_status(
    channel: str = "regular",
    version: str = "1.0.0",
    generation: int = 3,
    fqdn: str = "warden",
) -> ModuleStatus:
    return ModuleStatus(
        fqdn=fqdn,
        channel=channel,
        version=version,
        template=TemplateInfo(name=fqdn, generation=generation),
    )


class TestDriftDetector:
    def setup_method(self):
        self.detector = DriftDetector()

    def test_no_skew_is_fresh(self):
        resolved = _make_resolved()
        assert self.detector.check(resolved, _make_status()) is False
        assert resolved.outdated is False

    def test_generation_skew_is_outdated(self):
        resolved = _make_resolved(generation=4)
        assert self.detector.check(resolved, _make_status(generation=3)) is True
        assert resolved.outdated is True

    def test_generation_skew_ignores_versions(self):
        """A lower template version never suppresses a generation skew."""
        resolved = _make_resolved(channel="regular", version="1.0.0", generation=5)
        status = _make_status(channel="fast", version="2.0.0", generation=4)
        assert self.detector.check(resolved, status) is True

    def test_channel_skew_upgrade_is_outdated(self):
        resolved = _make_resolved(channel="fast", version="2.0.0")
        status = _make_status(channel="regular", version="1.0.0")
        assert self.detector.check(resolved, status) is True
        assert resolved.outdated is True

    def test_channel_skew_same_version_is_outdated(self):
        resolved = _make_resolved(channel="fast", version="1.0.0")
        status = _make_status(channel="regular", version="1.0.0")
        assert self.detector.check(resolved, status) is True

    def test_channel_skew_downgrade_is_suppressed(self, caplog):
        resolved = _make_resolved(channel="regular", version="1.0.0")
        status = _make_status(channel="fast", version="2.0.0")
        with caplog.at_level(logging.INFO, logger="lifecycle_kernel.drift.detector"):
            assert self.detector.check(resolved, status) is False
        assert resolved.outdated is False
        assert "ignore channel skew" in caplog.text

    def test_prerelease_compares_lower(self):
        resolved = _make_resolved(channel="fast", version="2.0.0-rc.1")
        status = _make_status(channel="regular", version="2.0.0")
        assert self.detector.check(resolved, status) is False

    def test_named_prerelease_upgrade_is_outdated(self):
        resolved = _make_resolved(channel="experimental", version="2.0.0-experimental")
        status = _make_status(channel="regular", version="1.0.0")
        assert self.detector.check(resolved, status) is True

    def test_build_metadata_does_not_count_as_higher(self):
        """1.0.0+build.5 and 1.0.0 have the same precedence."""
        resolved = _make_resolved(channel="fast", version="1.0.0")
        status = _make_status(channel="regular", version="1.0.0+build.5")
        assert self.detector.check(resolved, status) is True

    def test_v_prefix_and_short_versions(self):
        resolved = _make_resolved(channel="regular", version="v1.2")
        status = _make_status(channel="fast", version="v1.3.0")
        assert self.detector.check(resolved, status) is False

    def test_invalid_status_version_leaves_fresh(self, caplog):
        resolved = _make_resolved(channel="fast", version="2.0.0")
        status = _make_status(channel="regular", version="not-a-version")
        with caplog.at_level(logging.ERROR, logger="lifecycle_kernel.drift.detector"):
            assert self.detector.check(resolved, status) is False
        assert "status contains invalid version" in caplog.text

    def test_invalid_template_version_leaves_fresh(self, caplog):
        resolved = _make_resolved(channel="fast", version="latest")
        status = _make_status(channel="regular", version="1.0.0")
        with caplog.at_level(logging.ERROR, logger="lifecycle_kernel.drift.detector"):
            assert self.detector.check(resolved, status) is False
        assert "template contains invalid version" in caplog.text

    def test_unparsable_descriptor_leaves_fresh(self):
        resolved = ResolvedTemplate(
            template=ModuleTemplate(
                name="warden", generation=3,
                spec={"channel": "fast", "descriptor": {"version": "2.0.0"}},
            )
        )
        status = _make_status(channel="regular")
        assert self.detector.check(resolved, status) is False


class TestCheckAll:
    def setup_method(self):
        self.detector = DriftDetector()

    def test_only_modules_with_status_are_checked(self):
        templates = {
            "warden": _make_resolved(name="warden", generation=4),
            "istio": _make_resolved(name="istio", generation=9),
        }
        kyma = Kyma(
            name="kyma-sample",
            status={"modules": [_make_status(fqdn="warden", generation=3).model_dump()]},
        )
        self.detector.check_all(kyma, templates)
        assert templates["warden"].outdated is True
        assert templates["istio"].outdated is False

    def test_status_matched_by_fqdn(self):
        templates = {"warden": _make_resolved(generation=4)}
        kyma = Kyma(
            name="kyma-sample",
            status={"modules": [_make_status(fqdn="warden-other", generation=1).model_dump()]},
        )
        self.detector.check_all(kyma, templates)
        assert templates["warden"].outdated is False

    def test_empty_mapping(self):
        kyma = Kyma(name="kyma-sample", status={"modules": [_make_status().model_dump()]})
        self.detector.check_all(kyma, {})
