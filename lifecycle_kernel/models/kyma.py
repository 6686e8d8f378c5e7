"""Kyma — the desired-state object declaring which modules should be active."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ModuleReference(BaseModel):
    """A module declared in the Kyma spec."""

    name: str
    channel: str = ""                               # Overrides the Kyma default when set
    remote_module_template_ref: str = ""            # Template identifier in the remote catalog


class Sync(BaseModel):
    """Cross-cluster synchronisation settings."""

    enabled: bool = False


class KymaSpec(BaseModel):
    channel: str = ""                               # Kyma-wide default channel
    modules: List[ModuleReference] = []
    sync: Sync = Sync()


class TemplateInfo(BaseModel):
    """Which template (and which revision of it) a module was last applied from."""

    name: Optional[str] = None
    generation: int = Field(ge=0, default=0)


class ModuleStatus(BaseModel):
    """Last recorded resolution of a module, taken from the previous reconciliation."""

    fqdn: str                                       # Module identifier the status was recorded for
    name: Optional[str] = None
    channel: str = ""
    version: str = ""
    template: TemplateInfo = TemplateInfo()


class KymaStatus(BaseModel):
    modules: List[ModuleStatus] = []


class Kyma(BaseModel):
    """The desired-state object. Supplied fresh by the caller on every pass."""

    name: str
    namespace: str = "default"
    spec: KymaSpec = KymaSpec()
    status: KymaStatus = KymaStatus()
