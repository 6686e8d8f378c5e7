"""
Drift Detector — decides which resolved templates are outdated.

Compares every resolved template with the status the caller recorded for the
same module during the last reconciliation:
  1. Generation skew: always outdated. Generations only move on a version
     bump or a channel reassignment, and downgrades of a template's version
     are rejected before they reach the catalog.
  2. Channel skew with the same generation: outdated, unless the recorded
     version is higher than the one the new channel offers. Downgrades are
     never applied automatically; crossing one requires an uninstall and a
     reinstall of the module.
  3. Otherwise the template is fresh.

Version parse failures are logged and leave the flag untouched. They never
fail the pass.
"""

import logging
from typing import Dict, Optional

import semver

from lifecycle_kernel.errors import ResolutionError
from lifecycle_kernel.models.kyma import Kyma, ModuleStatus
from lifecycle_kernel.models.template import ResolvedTemplate

logger = logging.getLogger(__name__)


def _parse_version(raw: str) -> Optional[semver.Version]:
    """Parse a semantic version, tolerating a leading "v" and a missing minor or patch."""
    if raw[:1] in ("v", "V"):
        raw = raw[1:]
    try:
        return semver.Version.parse(raw, optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


class DriftDetector:
    """Flags resolved templates as outdated. Holds no state between calls."""

    def check_all(self, kyma: Kyma, templates: Dict[str, ResolvedTemplate]) -> None:
        """Check every resolved module that has a recorded status."""
        for module_name, resolved in templates.items():
            if resolved is None:
                continue
            for status in kyma.status.modules:
                if status.fqdn == module_name:
                    self.check(resolved, status)

    def check(self, resolved: ResolvedTemplate, status: ModuleStatus) -> bool:
        """Set and return the outdated flag of one resolved template."""
        context = (
            status.fqdn,
            resolved.name,
            resolved.generation,
            status.template.generation,
            resolved.channel,
            status.channel,
        )

        if resolved.generation != status.template.generation:
            logger.info(
                "outdated ModuleTemplate: generation skew "
                "(module=%s template=%s generation %d -> %d channel %s -> %s)",
                status.fqdn, resolved.name, status.template.generation,
                resolved.generation, status.channel, resolved.channel,
            )
            resolved.outdated = True
            return True

        if resolved.channel == status.channel:
            return resolved.outdated

        logger.info(
            "outdated ModuleTemplate: channel skew "
            "(module=%s template=%s generation %d/%d channel %s/%s)",
            *context,
        )

        try:
            descriptor = resolved.template.spec.get_descriptor()
        except ResolutionError as e:
            logger.error(
                "could not handle channel skew for module %s as descriptor "
                "from template cannot be fetched: %s",
                status.fqdn, e,
            )
            return resolved.outdated

        version_in_template = _parse_version(descriptor.version)
        if version_in_template is None:
            logger.error(
                "could not handle channel skew for module %s as descriptor "
                "from template contains invalid version %r",
                status.fqdn, descriptor.version,
            )
            return resolved.outdated

        version_in_status = _parse_version(status.version)
        if version_in_status is None:
            logger.error(
                "could not handle channel skew for module %s as status "
                "contains invalid version %r",
                status.fqdn, status.version,
            )
            return resolved.outdated

        # Build metadata does not take part in precedence
        if version_in_status.compare(version_in_template) > 0:
            logger.info(
                "ignore channel skew for module %s, as a higher version (%s) of the "
                "module was previously installed than channel %s offers (%s)",
                status.fqdn, version_in_status, resolved.channel, version_in_template,
            )
            return resolved.outdated

        resolved.outdated = True
        return True
