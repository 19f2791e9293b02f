from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from menu_admin.db.main import get_session

router = APIRouter()

@router.get("/health")
async def health_check():
    """Basic health check without database"""
    return {
        "status": "ok",
        "service": "menu-admin-api"
    }

@router.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_session)):
    """Health check with database connection test"""
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()

        result = await db.execute(text("SELECT COUNT(*) FROM restaurants"))
        restaurants_count = result.scalar()

        return {
            "status": "ok",
            "database": "connected",
            "restaurants_count": restaurants_count
        }
    except Exception as e:
        return {
            "status": "error",
            "database": "disconnected",
            "error": str(e)
        }
