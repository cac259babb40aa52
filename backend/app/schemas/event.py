"""
Schémas Pydantic pour les événements (courts et catégories proposés dans le formulaire).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from app.schemas.attestation import check_label


def _clean_labels(labels: List[str], field_name: str) -> List[str]:
    """Supprime les libellés vides et les doublons en conservant l'ordre."""
    cleaned: List[str] = []
    for label in labels:
        label = label.strip()
        if not label:
            continue
        label = check_label(label, field_name)
        if label not in cleaned:
            cleaned.append(label)
    return cleaned


def _clean_name(v: str) -> str:
    if not v.strip():
        raise ValueError("Le nom de l'événement ne peut pas être vide.")
    return check_label(v, "événement")


class EventCreate(BaseModel):
    name: str
    description: Optional[str] = None
    courts: List[str] = []
    categories: List[str] = []
    active: bool = True

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("courts", "categories")
    @classmethod
    def clean_labels(cls, v: List[str], info: ValidationInfo) -> List[str]:
        return _clean_labels(v, info.field_name)


class EventUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    courts: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    active: Optional[bool] = None

    # Un null explicite viderait une colonne NOT NULL
    @field_validator("name", "courts", "categories", "active")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"Le champ {info.field_name} ne peut pas être nul.")
        return v

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("courts", "categories")
    @classmethod
    def clean_labels(cls, v: List[str], info: ValidationInfo) -> List[str]:
        return _clean_labels(v, info.field_name)


class EventResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    courts: List[str]
    categories: List[str]
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
