"""Versioned API router."""

from fastapi import APIRouter

from . import auth, branches, health, petty_cash, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(branches.router, prefix="/branches", tags=["branches"])
router.include_router(petty_cash.router, prefix="/petty-cash", tags=["petty-cash"])

__all__ = ["router"]
