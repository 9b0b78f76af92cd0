from fastapi import APIRouter

from rangecore.config import settings
from rangecore.logic import get_library, list_drill_types

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "ok",
        "version": settings.app.version,
        "drill_types": len(list_drill_types()),
        "library_templates": len(get_library().list()),
    }
