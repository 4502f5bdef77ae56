from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """The caller, as resolved from the bearer token."""

    id: UUID
    email: str
    name: Optional[str] = None
    role: str = "user"

    model_config = ConfigDict(from_attributes=True)


class OrganizationSnapshot(BaseModel):
    id: UUID
    account_type: str
    name: str
    vat: Optional[str] = None
    role: str


class MyUserOut(BaseModel):
    id: UUID
    email: EmailStr
    name: Optional[str] = None
    role: str
    first_time: bool
    terms_accepted_at: Optional[datetime] = None
    bcc_terms_accepted_at: Optional[datetime] = None
    organization_accounts: List[OrganizationSnapshot] = Field(default_factory=list)


class InviteUserRequest(BaseModel):
    # Presence of name/email/role is enforced by the service (400), not here.
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    locale: Optional[str] = None
    role: Optional[str] = None


class InvitedUser(BaseModel):
    id: UUID
    role: str
    name: Optional[str] = None
    email: str


class InviteResult(BaseModel):
    role: str
    user: InvitedUser
