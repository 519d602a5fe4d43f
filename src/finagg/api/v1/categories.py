from fastapi import APIRouter, Depends

from finagg.api.deps import get_category_service
from finagg.schemas.category import CategoryInfo
from finagg.services.category import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryInfo])
async def list_categories(service: CategoryService = Depends(get_category_service)) -> list[CategoryInfo]:
    return await service.list_categories()


@router.get("/{category_id}", response_model=CategoryInfo)
async def get_category(category_id: int, service: CategoryService = Depends(get_category_service)) -> CategoryInfo:
    return await service.get_category(category_id)
