"""
Template Catalog — read access to the ModuleTemplates visible to a cluster.

Two readers exist at runtime: the local catalog and, when cross-cluster sync
is enabled, the remote one. The resolver only ever calls list_templates().

Behavioral Contract:
- list_templates() returns a point-in-time snapshot with no ordering guarantee
- The in-memory catalog owns template generations: 1 on create, +1 on every
  spec rewrite, never decreasing
"""

import logging
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from lifecycle_kernel.models.template import ModuleTemplate

logger = logging.getLogger(__name__)


@runtime_checkable
class CatalogReader(Protocol):
    """Read-only view of a template catalog."""

    def list_templates(self) -> List[ModuleTemplate]:
        ...


class InMemoryCatalog:
    """
    In-memory template catalog for the prototype and for tests.
    Production would read ModuleTemplates from the cluster API.

    Safe to read and write from several threads at once.
    """

    def __init__(self, templates: Optional[List[ModuleTemplate]] = None):
        self._templates: Dict[str, ModuleTemplate] = {}
        self._lock = threading.Lock()
        for template in templates or []:
            self.upsert(template)

    def upsert(self, template: ModuleTemplate) -> ModuleTemplate:
        """
        Insert or rewrite a template. The stored generation is assigned here,
        whatever the caller put on the object.
        """
        with self._lock:
            existing = self._templates.get(template.name)
            if existing is None:
                generation = 1
            elif existing.spec == template.spec:
                generation = existing.generation
            else:
                generation = existing.generation + 1

            stored = template.model_copy(update={"generation": generation}, deep=True)
            self._templates[stored.name] = stored
        logger.debug("Stored template %s at generation %d", stored.name, generation)
        return stored.model_copy(deep=True)

    def get(self, name: str) -> Optional[ModuleTemplate]:
        """Get a specific template by name."""
        with self._lock:
            template = self._templates.get(name)
        return template.model_copy(deep=True) if template else None

    def remove(self, name: str) -> bool:
        """Remove a template from the catalog."""
        with self._lock:
            return self._templates.pop(name, None) is not None

    def list_templates(self) -> List[ModuleTemplate]:
        """Snapshot of every template. Callers get copies, never the stored objects."""
        with self._lock:
            stored = list(self._templates.values())
        return [t.model_copy(deep=True) for t in stored]

    def count(self) -> int:
        """Total number of templates."""
        with self._lock:
            return len(self._templates)
