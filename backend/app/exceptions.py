"""Exceptions métier de l'application d'attestations."""


class AttestationError(Exception):
    """Exception de base pour toutes les erreurs métier."""

    def __init__(self, message: str = "Une erreur interne est survenue."):
        super().__init__(message)
        self.message = message


class InvalidOrExpiredCodeError(AttestationError):
    """Code d'accès inconnu, déjà utilisé ou expiré."""

    def __init__(self, reason: str = "invalid"):
        messages = {
            "invalid": "Code d'accès invalide ou déjà utilisé.",
            "expired": "Code d'accès expiré.",
            "used": "Ce code d'accès a déjà été utilisé.",
        }
        super().__init__(messages.get(reason, messages["invalid"]))
        self.reason = reason


class ConflictError(AttestationError):
    """Action refusée car elle violerait un invariant (ex. deux codes actifs)."""


class NotFoundError(AttestationError):
    """Ressource introuvable."""


class UploadError(AttestationError):
    """Le stockage objet a refusé l'écriture du document."""


class StoreError(AttestationError):
    """Échec de lecture/écriture dans la base de données."""
