"""Lifecycle Kernel data models."""

from lifecycle_kernel.models.kyma import (
    Kyma,
    KymaSpec,
    KymaStatus,
    ModuleReference,
    ModuleStatus,
    Sync,
    TemplateInfo,
)
from lifecycle_kernel.models.resolver import (
    DEFAULT_CHANNEL,
    MODULE_NAME_LABEL,
    ResolverConfig,
)
from lifecycle_kernel.models.template import (
    Descriptor,
    ModuleTemplate,
    ModuleTemplateSpec,
    ResolvedTemplate,
)

__all__ = [
    "DEFAULT_CHANNEL",
    "Descriptor",
    "Kyma",
    "KymaSpec",
    "KymaStatus",
    "MODULE_NAME_LABEL",
    "ModuleReference",
    "ModuleStatus",
    "ModuleTemplate",
    "ModuleTemplateSpec",
    "ResolvedTemplate",
    "ResolverConfig",
    "Sync",
    "TemplateInfo",
]
