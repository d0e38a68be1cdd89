from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Literal
from datetime import datetime

RoleType = Literal["admin", "manager", "cashier"]

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for account creation by an administrator
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    name: str = Field(min_length=1, max_length=100)
    role: RoleType = "cashier"
    is_active: bool = True

# Schema for account edits; password is re-hashed when present
class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: RoleType
