"""Industry catalog endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.database import get_session
from ihub.db.models import Industry
from ihub.gamification.seed import seed_industries

router = APIRouter(prefix="/api/v1", tags=["Industries"])


class IndustryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None


class IndustriesResponse(BaseModel):
    industries: list[IndustryResponse]


@router.get("/industries", response_model=IndustriesResponse)
async def list_industries(db: AsyncSession = Depends(get_session)):
    """Active industries, seeding the defaults first if the table is empty."""
    await seed_industries(db)
    result = await db.execute(
        select(Industry).where(Industry.is_active.is_(True)).order_by(Industry.name)
    )
    return IndustriesResponse(
        industries=[IndustryResponse.model_validate(i) for i in result.scalars()]
    )
