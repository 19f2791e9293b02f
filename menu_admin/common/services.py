from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase
from menu_admin.common.schemas import AppBaseModel
from typing import TypeVar, Generic, Type


ModelType = TypeVar("ModelType", bound=DeclarativeBase)
CreateSchemaType = TypeVar("CreateSchemaType", bound=AppBaseModel)

class AppService(Generic[ModelType, CreateSchemaType]):
    """
    Base service class that provides common functionality 
    like session management and constraint-violation checks.
    """
    
    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def _save(self, db_obj: ModelType) -> ModelType:
        """
        Adds, commits and refreshes a new row.
        On a database error the session is rolled back and the error re-raised,
        so the same session stays usable for the next row of a batch.
        """
        self.session.add(db_obj)
        try:
            await self.session.commit()
            await self.session.refresh(db_obj)
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        return db_obj

    def _is_foreign_key_violation(self, e: IntegrityError) -> bool:
        """
        Checks if the IntegrityError is caused by a foreign key violation.
        Supports both asyncpg (sqlstate) and psycopg2 (pgcode).
        
        Args:
            e: The IntegrityError object
            
        Returns:
            True if the IntegrityError is caused by a foreign key violation, False otherwise
        """
        # asyncpg puts sqlstate in e.orig.sqlstate
        if hasattr(e.orig, 'sqlstate') and e.orig.sqlstate == '23503':
            return True
        # psycopg2 puts pgcode in e.orig.pgcode
        if hasattr(e.orig, 'pgcode') and e.orig.pgcode == '23503':
            return True
        return False
