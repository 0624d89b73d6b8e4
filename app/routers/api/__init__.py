from fastapi import APIRouter

from . import books

router = APIRouter(prefix="/api")
router.include_router(books.router)
