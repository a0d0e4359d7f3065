from fastapi import APIRouter

from app.services import lifecycle

router = APIRouter()


@router.get("")
async def facets():
    """Categories, countries, cities and grouped locations for the browse filters."""
    return await lifecycle.get_facets()
