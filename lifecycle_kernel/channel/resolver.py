"""
Module Set Resolver — resolves every module a Kyma declares.

Behavioral Contract:
- One ResolvedTemplate per declared module, keyed by the module's local name
- Modules with a remote template reference are looked up in the remote
  catalog under that reference; this requires sync to be enabled
- Fail-fast: any error aborts the pass and no partial mapping is returned
- The complete mapping goes through the Drift Detector before it is returned
- Read-only against both catalogs; no retries at this layer
"""

import asyncio
import logging
from typing import Dict, List, Optional

from lifecycle_kernel.catalog.store import CatalogReader
from lifecycle_kernel.channel.matcher import TemplateLookup
from lifecycle_kernel.drift.detector import DriftDetector
from lifecycle_kernel.errors import ResolutionError, ResolutionErrorKind
from lifecycle_kernel.models.kyma import Kyma, ModuleReference
from lifecycle_kernel.models.resolver import ResolverConfig
from lifecycle_kernel.models.template import ResolvedTemplate

logger = logging.getLogger(__name__)

ResolutionMapping = Dict[str, ResolvedTemplate]


class _LookupJob:
    """Where and under which identifier one module is looked up."""

    def __init__(self, module: ModuleReference, reader: CatalogReader, identifier: str):
        self.module = module
        self.reader = reader
        self.identifier = identifier


class ModuleSetResolver:
    """
    Resolves the module set of a Kyma against the local catalog and,
    for remote template references, the remote catalog.

    Both readers are injected; the resolver never decides cluster topology.
    """

    def __init__(
        self,
        local_reader: CatalogReader,
        remote_reader: Optional[CatalogReader] = None,
        config: Optional[ResolverConfig] = None,
        drift_detector: Optional[DriftDetector] = None,
    ):
        self.local_reader = local_reader
        self.remote_reader = remote_reader
        self.config = config or ResolverConfig()
        self.drift_detector = drift_detector or DriftDetector()

    def resolve_all(self, kyma: Kyma) -> ResolutionMapping:
        """Resolve modules one by one, in declared order."""
        jobs = self._plan(kyma)

        templates: ResolutionMapping = {}
        for job in jobs:
            templates[job.module.name] = self._resolve(kyma, job)

        self.drift_detector.check_all(kyma, templates)
        return templates

    async def resolve_all_async(self, kyma: Kyma) -> ResolutionMapping:
        """
        Resolve modules concurrently, at most config.max_concurrency at a time.

        The first failure cancels every lookup still in flight and is raised.
        Cancelling the caller cancels the whole pass.
        """
        jobs = self._plan(kyma)
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def run(job: _LookupJob) -> ResolvedTemplate:
            async with semaphore:
                return await asyncio.to_thread(self._resolve, kyma, job)

        tasks = [asyncio.ensure_future(run(job)) for job in jobs]
        if not tasks:
            return {}

        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_EXCEPTION
            )
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        # Report the first failure in declared order
        for task in tasks:
            if task in done and not task.cancelled() and task.exception() is not None:
                raise task.exception()

        templates: ResolutionMapping = {}
        for job, task in zip(jobs, tasks):
            templates[job.module.name] = task.result()

        self.drift_detector.check_all(kyma, templates)
        return templates

    def _plan(self, kyma: Kyma) -> List[_LookupJob]:
        """Pick a catalog and identifier for every module before any lookup runs."""
        jobs = []
        for module in kyma.spec.modules:
            if not module.remote_module_template_ref:
                jobs.append(_LookupJob(module, self.local_reader, module.name))
                continue

            if not kyma.spec.sync.enabled:
                raise ResolutionError(
                    ResolutionErrorKind.INVALID_REMOTE_MODULE_CONFIGURATION,
                    f"enable sync to use a remote module template for {module.name}",
                    module=module.name,
                )
            if self.remote_reader is None:
                raise ResolutionError(
                    ResolutionErrorKind.INVALID_REMOTE_MODULE_CONFIGURATION,
                    f"no remote catalog available for module {module.name}",
                    module=module.name,
                )
            jobs.append(
                _LookupJob(module, self.remote_reader, module.remote_module_template_ref)
            )
        return jobs

    def _resolve(self, kyma: Kyma, job: _LookupJob) -> ResolvedTemplate:
        try:
            catalog = job.reader.list_templates()
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(
                ResolutionErrorKind.CATALOG_UNAVAILABLE,
                f"listing module templates failed: {e}",
                module=job.module.name,
            ) from e

        lookup = TemplateLookup(
            catalog,
            job.module,
            kyma.spec.channel,
            system_default_channel=self.config.default_channel,
            module_name_label=self.config.module_name_label,
        )
        resolved = lookup.lookup(job.identifier)
        if job.identifier != job.module.name:
            logger.debug(
                "resolved module %s through remote template reference %s",
                job.module.name, job.identifier,
            )
        return resolved


def get_templates(
    kyma: Kyma,
    local_reader: CatalogReader,
    remote_reader: Optional[CatalogReader] = None,
    config: Optional[ResolverConfig] = None,
) -> ResolutionMapping:
    """Resolve and drift-check every module of a Kyma in one call."""
    return ModuleSetResolver(local_reader, remote_reader, config).resolve_all(kyma)
