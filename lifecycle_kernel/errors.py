"""
Resolution errors.

Every failure of a resolution pass is raised as a ResolutionError carrying a
ResolutionErrorKind. Callers branch on the kind, never on the message.
"""

from enum import Enum
from typing import List, Optional


class ResolutionErrorKind(str, Enum):
    NO_CANDIDATE = "no_candidate"                               # Nothing in the catalog matched
    AMBIGUOUS_CANDIDATES = "ambiguous_candidates"               # More than one template matched
    NO_DEFAULT_CHANNEL_ALLOWED = "no_default_channel_allowed"   # Matched template has no channel
    INVALID_REMOTE_MODULE_CONFIGURATION = "invalid_remote_module_configuration"
    INVALID_DESCRIPTOR = "invalid_descriptor"                   # Descriptor cannot be parsed
    CATALOG_UNAVAILABLE = "catalog_unavailable"                 # Catalog read failed


class ResolutionError(Exception):
    """Raised when a resolution pass cannot produce a complete mapping."""

    def __init__(
        self,
        kind: ResolutionErrorKind,
        message: str,
        module: Optional[str] = None,
        channel: Optional[str] = None,
        candidates: Optional[List[str]] = None,
    ):
        self.kind = kind
        self.message = message
        self.module = module
        self.channel = channel
        self.candidates = list(candidates or [])
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [f"{self.kind.value}: {self.message}"]
        if self.module:
            parts.append(f"module={self.module}")
        if self.channel:
            parts.append(f"channel={self.channel}")
        if self.candidates:
            parts.append(f"candidates={self.candidates}")
        return ", ".join(parts)

    def with_module(self, module: str) -> "ResolutionError":
        """Attach the module name if the error was raised without one."""
        if self.module is None:
            self.module = module
            self.args = (self._format(),)
        return self

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "module": self.module,
            "channel": self.channel,
            "candidates": self.candidates,
        }
