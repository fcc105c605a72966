import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings
from app.models.build_request import BuildRequest
from app.models.build_response import BuildResponse
from app.services.drupal import ContentSourceError
from app.services.orchestrator import StartupFetchFailure, run_build
from app.services.pages import PageGenerationError

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.post(
    "/build",
    response_model=BuildResponse,
    response_model_exclude_none=True,
    summary="Source the CMS and build the site node graph",
    description=(
        "Fetches the primary and utility navigation trees, loads every content "
        "node of the requested Drupal bundles, attaches derived fields "
        "(slug, title, breadcrumb, parents, children) and returns the node "
        "graph together with the list of pages to render.\n\n"
        "Missing breadcrumb or menu data never fails a build; a navigation, "
        "content listing or page-generation failure does."
    ),
)
@limiter.limit("2/minute")
async def build_site(request: Request, body: BuildRequest) -> BuildResponse:
    """Run one sourcing pass against the configured CMS."""
    try:
        settings = get_settings()
    except ValueError as exc:
        logger.error("CMS settings are invalid: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    logger.info(
        "Build request received",
        extra={"cms": settings.cms_base_url, "content_types": body.content_types},
    )

    try:
        result = await run_build(settings, bundles=body.content_types)
    except (StartupFetchFailure, ContentSourceError) as exc:
        logger.error("Sourcing failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))
    except PageGenerationError as exc:
        logger.error("Page generation failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    return BuildResponse(
        nav_primary=result.nav_primary,
        nav_utility=result.nav_utility,
        nodes_sourced=len(result.nodes),
        nodes=result.nodes,
        pages_created=len(result.pages),
        pages=result.pages,
    )
