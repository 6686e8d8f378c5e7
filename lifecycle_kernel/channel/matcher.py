"""
Template Matcher — finds the one template that governs a module in a channel.

A template is a candidate when it is published in the desired channel and it
identifies as the module through one of three strategies, tried in order:
  1. the module-name label
  2. the template's own name
  3. the component name in its descriptor

Behavioral Contract:
- Each template counts at most once, however many strategies it satisfies
- Zero candidates is NO_CANDIDATE, more than one is AMBIGUOUS_CANDIDATES
- Duplicates are never resolved by preference; the operator fixes the catalog
- A descriptor that cannot be parsed aborts the whole match
"""

import logging
from typing import List, Sequence

from lifecycle_kernel.channel.selector import select_channel
from lifecycle_kernel.errors import ResolutionError, ResolutionErrorKind
from lifecycle_kernel.models.kyma import ModuleReference
from lifecycle_kernel.models.resolver import DEFAULT_CHANNEL, MODULE_NAME_LABEL
from lifecycle_kernel.models.template import ModuleTemplate, ResolvedTemplate

logger = logging.getLogger(__name__)


def _identifies_as(
    template: ModuleTemplate,
    module_identifier: str,
    module_name_label: str,
) -> bool:
    """Check the three identity strategies, cheapest first."""
    if template.labels.get(module_name_label) == module_identifier:
        return True
    if template.name == module_identifier:
        return True
    try:
        descriptor = template.spec.get_descriptor()
    except ResolutionError as e:
        raise ResolutionError(
            ResolutionErrorKind.INVALID_DESCRIPTOR,
            f"invalid ModuleTemplate descriptor in template {template.name}",
            channel=template.spec.channel or None,
        ) from e
    return descriptor.name == module_identifier


def match_template(
    catalog: Sequence[ModuleTemplate],
    module_identifier: str,
    desired_channel: str,
    module_name_label: str = MODULE_NAME_LABEL,
) -> ModuleTemplate:
    """Return the unique template for (module_identifier, desired_channel)."""
    candidates: List[ModuleTemplate] = []
    for template in catalog:
        if template.spec.channel != desired_channel:
            continue
        if _identifies_as(template, module_identifier, module_name_label):
            candidates.append(template)

    if len(candidates) > 1:
        raise ResolutionError(
            ResolutionErrorKind.AMBIGUOUS_CANDIDATES,
            f"more than one module template found for module {module_identifier}",
            channel=desired_channel,
            candidates=[c.name for c in candidates],
        )
    if not candidates:
        raise ResolutionError(
            ResolutionErrorKind.NO_CANDIDATE,
            f"no templates found in channel {desired_channel} for module {module_identifier}",
            channel=desired_channel,
        )
    return candidates[0]


class TemplateLookup:
    """
    Resolves one module reference against one catalog snapshot.

    The identifier defaults to the module's own name. The resolver passes the
    remote template reference instead when the module points into the remote
    catalog; the module reference itself is never modified.
    """

    def __init__(
        self,
        catalog: Sequence[ModuleTemplate],
        module: ModuleReference,
        default_channel: str,
        system_default_channel: str = DEFAULT_CHANNEL,
        module_name_label: str = MODULE_NAME_LABEL,
    ):
        self.catalog = catalog
        self.module = module
        self.default_channel = default_channel
        self.system_default_channel = system_default_channel
        self.module_name_label = module_name_label

    def desired_channel(self) -> str:
        return select_channel(
            self.module, self.default_channel, self.system_default_channel
        )

    def lookup(self, module_identifier: str = "") -> ResolvedTemplate:
        identifier = module_identifier or self.module.name
        desired_channel = self.desired_channel()

        try:
            template = match_template(
                self.catalog, identifier, desired_channel, self.module_name_label
            )
        except ResolutionError as e:
            raise e.with_module(self.module.name)

        actual_channel = template.spec.channel

        # ModuleTemplates without a channel are not allowed
        if not actual_channel:
            raise ResolutionError(
                ResolutionErrorKind.NO_DEFAULT_CHANNEL_ALLOWED,
                f"no channel found on template {template.name}",
                module=self.module.name,
            )

        if actual_channel != self.default_channel:
            logger.info(
                "using %s (instead of %s) for module %s",
                actual_channel, self.default_channel, self.module.name,
            )
        else:
            logger.debug("using %s for module %s", actual_channel, self.module.name)

        return ResolvedTemplate(template=template.model_copy(deep=True), outdated=False)
