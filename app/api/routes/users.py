from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging
from app.core.dependencies import get_user_repository
from app.core.sql_text import SqlTextNotFoundError
from app.repositories.user_repository import UserRepository
from app.schemas.users import User

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[User])
async def get_users(
    user_repository: UserRepository = Depends(get_user_repository)
) -> List[User]:
    """
    List every user
    """
    try:
        return await user_repository.get_all_users()

    except SqlTextNotFoundError:
        # Rendered as problem details by the app-level handler
        raise
    except Exception as e:
        logger.error(f"Error retrieving users: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail="Failed to retrieve users"
        )
