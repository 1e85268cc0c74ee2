from fastapi import APIRouter

from app.api.endpoints import ai, auth, comments, tasks, users

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(comments.router, tags=["comments"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
