from fastapi import APIRouter

from app.api.routes import auth, database, generate, utils

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(database.router)
api_router.include_router(generate.router)
api_router.include_router(utils.router)
