from typing import List, Optional
from pydantic import BaseModel

from .auth import UserResponse

class NavigationItem(BaseModel):
    name: str
    href: str

class SessionResponse(BaseModel):
    user_id: int
    email: str
    profile: Optional[UserResponse] = None
    roles: List[str]
    role: str
    display_name: str
    navigation: List[NavigationItem]
