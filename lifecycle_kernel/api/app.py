"""
Lifecycle Kernel API — FastAPI endpoints.

A resolution preview service in front of the kernel:
- Template catalog management (local and remote)
- Dry-run resolution of a Kyma against the current catalogs

Nothing here mutates a cluster. Resolution errors are mapped to HTTP status
codes by their kind so clients can tell an empty catalog from a broken one.
"""

from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lifecycle_kernel.catalog.store import InMemoryCatalog
from lifecycle_kernel.channel.resolver import ModuleSetResolver
from lifecycle_kernel.errors import ResolutionError, ResolutionErrorKind
from lifecycle_kernel.models.kyma import Kyma
from lifecycle_kernel.models.resolver import ResolverConfig
from lifecycle_kernel.models.template import ModuleTemplate


_STATUS_BY_KIND: Dict[ResolutionErrorKind, int] = {
    ResolutionErrorKind.NO_CANDIDATE: 404,
    ResolutionErrorKind.AMBIGUOUS_CANDIDATES: 409,
    ResolutionErrorKind.NO_DEFAULT_CHANNEL_ALLOWED: 422,
    ResolutionErrorKind.INVALID_REMOTE_MODULE_CONFIGURATION: 422,
    ResolutionErrorKind.INVALID_DESCRIPTOR: 422,
    ResolutionErrorKind.CATALOG_UNAVAILABLE: 503,
}


# --- Request/Response Models ---

class TemplateUpsertRequest(BaseModel):
    name: str
    namespace: str = "default"
    labels: Dict[str, str] = {}
    channel: str
    descriptor: dict


class ResolveResponse(BaseModel):
    kyma: str
    templates: Dict[str, dict]
    outdated: List[str]


# --- Application Factory ---

def create_app(
    local_catalog: Optional[InMemoryCatalog] = None,
    remote_catalog: Optional[InMemoryCatalog] = None,
    resolver_config: Optional[ResolverConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Lifecycle Kernel API",
        description="Module template resolution and drift detection",
        version="0.1.0",
    )

    catalogs = {
        "local": local_catalog or InMemoryCatalog(),
        "remote": remote_catalog or InMemoryCatalog(),
    }
    config = resolver_config or ResolverConfig()

    app.state.catalogs = catalogs
    app.state.resolver = ModuleSetResolver(
        local_reader=catalogs["local"],
        remote_reader=catalogs["remote"],
        config=config,
    )

    @app.exception_handler(ResolutionError)
    async def resolution_error_handler(request, exc: ResolutionError):
        return JSONResponse(
            status_code=_STATUS_BY_KIND.get(exc.kind, 500),
            content={"error": exc.to_dict()},
        )

    def _catalog(source: str) -> InMemoryCatalog:
        if source not in catalogs:
            raise HTTPException(404, "Catalog not found")
        return catalogs[source]

    # === CATALOG ===

    @app.put("/catalogs/{source}/templates")
    def upsert_template(source: str, req: TemplateUpsertRequest):
        """Create or rewrite a template. The catalog assigns the generation."""
        template = ModuleTemplate(
            name=req.name,
            namespace=req.namespace,
            labels=req.labels,
            spec={"channel": req.channel, "descriptor": req.descriptor},
        )
        stored = _catalog(source).upsert(template)
        return stored.model_dump(mode="json")

    @app.get("/catalogs/{source}/templates")
    def list_templates(source: str):
        """List every template in a catalog."""
        return [t.model_dump(mode="json") for t in _catalog(source).list_templates()]

    @app.get("/catalogs/{source}/templates/{name}")
    def get_template(source: str, name: str):
        template = _catalog(source).get(name)
        if template is None:
            raise HTTPException(404, "Template not found")
        return template.model_dump(mode="json")

    @app.delete("/catalogs/{source}/templates/{name}")
    def delete_template(source: str, name: str):
        if not _catalog(source).remove(name):
            raise HTTPException(404, "Template not found")
        return {"deleted": name}

    # === RESOLUTION ===

    @app.post("/resolve", response_model=ResolveResponse)
    async def resolve(kyma: Kyma):
        """Resolve a Kyma against the current catalogs without applying anything."""
        templates = await app.state.resolver.resolve_all_async(kyma)
        return ResolveResponse(
            kyma=kyma.name,
            templates={
                name: resolved.model_dump(mode="json")
                for name, resolved in templates.items()
            },
            outdated=sorted(
                name for name, resolved in templates.items() if resolved.outdated
            ),
        )

    return app
