"""Profile Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.common.constants import UserRole


class ProfileBrief(BaseModel):
    """Minimal profile info embedded in leave and dashboard responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: Optional[str] = None
    id_pjlp: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileOut(BaseModel):
    """Full profile representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    role: UserRole
    name: Optional[str] = None
    id_pjlp: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Self-service profile edit. Role and email are not editable here."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, max_length=150)
    id_pjlp: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) < 3:
            raise ValueError("Nama lengkap harus diisi (minimal 3 karakter).")
        return v

    @field_validator("id_pjlp")
    @classmethod
    def id_pjlp_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("ID PJLP tidak boleh kosong.")
        return v

    @field_validator("phone")
    @classmethod
    def phone_min_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) < 10:
            raise ValueError("Nomor HP tidak valid (minimal 10 digit).")
        return v
