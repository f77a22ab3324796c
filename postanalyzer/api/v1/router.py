"""API v1 router aggregator."""

from fastapi import APIRouter

from postanalyzer.api.v1 import analyze, posts, settings, users

api_router = APIRouter()

api_router.include_router(analyze.router, tags=["Analysis"])
api_router.include_router(posts.router, tags=["Posts"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(settings.router, tags=["Settings"])
