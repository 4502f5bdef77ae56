from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carbon_api.core.ids import normalize_country


class MemberUser(BaseModel):
    id: UUID
    email: str
    name: Optional[str] = None
    # site-level role of the user account
    role: str = "user"

    model_config = ConfigDict(from_attributes=True)


class Member(BaseModel):
    user: MemberUser
    role: str


class OrganizationModule(BaseModel):
    name: str
    submodules: List[str] = Field(default_factory=list)


class Organization(BaseModel):
    """An organization account resolved together with its members."""

    id: UUID
    name: str
    vat: Optional[str] = None
    account_type: str
    nace: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    modules: List[OrganizationModule] = Field(default_factory=list)
    members: List[Member] = Field(default_factory=list)
    children: List[UUID] = Field(default_factory=list)
    has_parent: bool = False
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None


class OrganizationAccountCreationRequest(BaseModel):
    # Blank name/VAT are rejected by the service with a 400, not by the schema.
    name: Optional[str] = None
    vat: Optional[str] = None
    sector: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None


class OrganizationAccountData(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    vat: Optional[str] = None
    account_type: Optional[str] = None
    nace: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    modules: Optional[List[OrganizationModule]] = None
    children: List[UUID] = Field(default_factory=list)

    @field_validator("country")
    @classmethod
    def validate_country(cls, v: Optional[str]) -> Optional[str]:
        return normalize_country(v)


class OrganizationAccountUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    vat: Optional[str] = None
    account_type: Optional[str] = None
    nace: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    modules: Optional[List[OrganizationModule]] = None

    @field_validator("country")
    @classmethod
    def validate_country(cls, v: Optional[str]) -> Optional[str]:
        return normalize_country(v)
