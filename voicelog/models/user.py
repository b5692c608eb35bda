"""User directory entries and session identity."""

from pydantic import BaseModel, Field


class User(BaseModel):
    """Read-only directory entry used to populate assignment choices."""

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Login email")
    display_name: str | None = Field(default=None, description="Optional username")

    @property
    def label(self) -> str:
        """Name to show in pickers, falling back to the email."""
        return self.display_name or self.email


class Session(BaseModel):
    """Identity of the signed-in user."""

    user_id: str
    email: str = ""
