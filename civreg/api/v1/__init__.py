"""API v1 routes."""

from fastapi import APIRouter

from civreg.api.v1 import actions, auth, branches, contents, events, health, hero_sliders, roles, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(actions.router, prefix="/action", tags=["actions"])
router.include_router(roles.router, prefix="/role", tags=["roles"])
router.include_router(branches.router, prefix="/branch", tags=["branches"])
router.include_router(users.router, prefix="/user", tags=["users"])
router.include_router(contents.router, prefix="/content", tags=["contents"])
router.include_router(events.router, prefix="/event", tags=["events"])
router.include_router(hero_sliders.router, prefix="/hero-slider", tags=["hero-slider"])
