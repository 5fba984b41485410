from fastapi import APIRouter

from app.api.api_v1.endpoints import (
    auth,
    users,
    courts,
    case_types,
    cases,
    hearings,
    advocates,
    case_parties,
    bookmarks,
    health,
)

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(courts.router, prefix="/courts", tags=["courts"])
api_router.include_router(case_types.router, prefix="/case-types", tags=["case-types"])
api_router.include_router(cases.router, prefix="/cases", tags=["cases"])
api_router.include_router(hearings.router, prefix="/hearings", tags=["hearings"])
api_router.include_router(advocates.router, prefix="/advocates", tags=["advocates"])
api_router.include_router(case_parties.router, prefix="/case-parties", tags=["case-parties"])
api_router.include_router(bookmarks.router, prefix="/bookmarks", tags=["bookmarks"])
