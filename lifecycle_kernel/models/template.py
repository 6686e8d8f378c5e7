"""Module Template — a versioned, channel-tagged deployment specification."""

from typing import Dict

from pydantic import BaseModel, Field, ValidationError

from lifecycle_kernel.errors import ResolutionError, ResolutionErrorKind


class Descriptor(BaseModel):
    """The component descriptor embedded in a template."""

    name: str                               # e.g., "kyma-project.io/module/warden"
    version: str                            # Semantic version, e.g., "1.2.0"


class ModuleTemplateSpec(BaseModel):
    """Stored spec of a template. Rewriting it bumps the template generation."""

    channel: str = ""                       # Release track, e.g., "regular", "fast"
    descriptor: dict = {}                   # Raw component descriptor

    def get_descriptor(self) -> Descriptor:
        """Parse the raw descriptor. Raises ResolutionError if it is unusable."""
        try:
            return Descriptor.model_validate(self.descriptor)
        except ValidationError as e:
            raise ResolutionError(
                ResolutionErrorKind.INVALID_DESCRIPTOR,
                f"invalid ModuleTemplate descriptor: {e.error_count()} validation error(s)",
                channel=self.channel or None,
            ) from e


class ModuleTemplate(BaseModel):
    """A catalog entry. Immutable once created; new versions reuse the same name."""

    name: str
    namespace: str = "default"
    labels: Dict[str, str] = {}
    generation: int = Field(ge=1, default=1)
    spec: ModuleTemplateSpec


class ResolvedTemplate(BaseModel):
    """
    Result wrapper for one resolved module.

    `outdated` starts False and is only ever set by the Drift Detector.
    """

    template: ModuleTemplate
    outdated: bool = False

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def generation(self) -> int:
        return self.template.generation

    @property
    def channel(self) -> str:
        return self.template.spec.channel
