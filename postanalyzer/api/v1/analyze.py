"""Post analysis endpoint."""

import logging

from fastapi import APIRouter, HTTPException, status

from postanalyzer.core.exceptions import ExternalAPIError, PostNotFoundError
from postanalyzer.dependencies import ActiveSettings, WordPress
from postanalyzer.schemas.analysis import AnalyzePostRequest, PostAnalysisReport
from postanalyzer.services.post_analyzer import PostAnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze-post", response_model=PostAnalysisReport)
async def analyze_post(
    request: AnalyzePostRequest,
    wp_client: WordPress,
    active_settings: ActiveSettings,
) -> PostAnalysisReport:
    """Build the QA/SEO report for a post."""
    logger.info(
        "Analyze post requested",
        extra={"post_id": request.post_id, "ai_platform": active_settings.platform},
    )
    service = PostAnalysisService(wp_client)
    try:
        return await service.analyze(request.post_id)
    except PostNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except ExternalAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e
