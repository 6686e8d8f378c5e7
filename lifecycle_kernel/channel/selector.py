"""Channel Selector — picks the release channel a module is resolved against."""

from lifecycle_kernel.models.kyma import ModuleReference
from lifecycle_kernel.models.resolver import DEFAULT_CHANNEL


def select_channel(
    module: ModuleReference,
    kyma_default_channel: str,
    system_default_channel: str = DEFAULT_CHANNEL,
) -> str:
    """
    Precedence, highest first:
      1. the channel declared on the module itself
      2. the Kyma-wide default channel
      3. the system default channel
    """
    if module.channel:
        return module.channel
    if kyma_default_channel:
        return kyma_default_channel
    return system_default_channel
