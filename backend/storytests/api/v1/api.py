"""
Main API router.

This module aggregates all API routes mounted under the configured prefix.
"""

from fastapi import APIRouter

from storytests.api.v1.endpoints import generate, jira, testdata

api_router = APIRouter()

api_router.include_router(generate.router, tags=["generation"])
api_router.include_router(jira.router, prefix="/jira", tags=["jira"])
api_router.include_router(testdata.router, prefix="/testdata", tags=["testdata"])
