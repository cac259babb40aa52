"""
Schémas Pydantic pour la connexion administrateur.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    password: str
