from fastapi import APIRouter

import models.schemas as schemas
from models.config import settings

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/map", response_model=schemas.MapConfig)
def get_map_config():
    """Public map settings for the complaint location picker."""
    return schemas.MapConfig(provider=settings.MAP_PROVIDER, api_key=settings.MAP_API_KEY)
