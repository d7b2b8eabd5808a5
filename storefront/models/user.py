# storefront/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Local mirror of a Supabase Auth account.

    - id equals the JWT "sub" claim (auth.users.id)
    - role is the storefront role: "user" (customer) or "admin"
    - credentials stay in Supabase Auth
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(primary_key=True, index=True)

    email: str = Field(unique=True, index=True)

    name: str = Field(max_length=50)

    role: str = Field(default="user", index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
