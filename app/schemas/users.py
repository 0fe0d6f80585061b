from pydantic import Field
from .common import BaseRecord

class User(BaseRecord):
    """User item for list view - matches User/GetAllUsers.sql"""
    username: str = Field(..., description="Login name")
    email: str = Field(..., description="Email address")
