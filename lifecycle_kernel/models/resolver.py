"""Resolver configuration."""

from pydantic import BaseModel, Field

DEFAULT_CHANNEL = "regular"
MODULE_NAME_LABEL = "operator.kyma-project.io/module-name"


class ResolverConfig(BaseModel):
    """Configuration for the Module Set Resolver."""

    default_channel: str = DEFAULT_CHANNEL          # System-wide fallback channel
    module_name_label: str = MODULE_NAME_LABEL
    max_concurrency: int = Field(ge=1, default=4)   # Parallel lookups in resolve_all_async
