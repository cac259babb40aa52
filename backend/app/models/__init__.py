# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, la FK attestations.token_id → tokens.id échoue
# avec NoReferencedTableError si token.py n'est pas chargé avant attestation.py.

from app.models.client import Client  # noqa: F401 (doit précéder token)
from app.models.token import AccessToken  # noqa: F401 (doit précéder attestation)
from app.models.attestation import Attestation  # noqa: F401
from app.models.event import Event  # noqa: F401
