# app/repositories/user_repository.py
import logging
from typing import List

from fastapi.concurrency import run_in_threadpool

from app.core.database import DatabaseManager
from app.core.sql_text import SqlTextResolver
from app.schemas.schema_helpers import validate_sql_results
from app.schemas.users import User

logger = logging.getLogger(__name__)

class UserRepository:
    def __init__(self, sql_text: SqlTextResolver, db: DatabaseManager):
        self._sql_text = sql_text
        self._db = db

    async def get_all_users(self) -> List[User]:
        """Return every user row mapped to the User schema"""
        # File reads can block, keep them off the event loop
        query = await run_in_threadpool(self._sql_text.get, "User/GetAllUsers")
        rows = await self._db.execute_query(query=query, fetch_all=True)
        return validate_sql_results(rows or [], User)
