"""
Router de finalisation : PDF signé reçu du client, attestation completed, code retiré.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import AttestationError
from app.schemas.attestation import FinalizeRequest
from app.services import finalize_service
from app.services.storage_service import StorageService, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Finalisation"])


@router.post("/finalize-attestation", summary="Finaliser une attestation")
def finalize_attestation(
    data: FinalizeRequest,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Corps : {tokenId, attestationData, pdfBase64} (pdfBase64 en data URL).

    Succès : {success: true, pdfUrl, message}.
    Échec d'une étape (code invalide, upload refusé, base indisponible) :
    HTTP 500 {success: false, error}. Le brouillon reste intact, le client peut réessayer.
    """
    try:
        pdf_bytes = finalize_service.decode_pdf_payload(data.pdf_base64)
        attestation = finalize_service.finalize_attestation(
            db, data.token_id, data.attestation_data, pdf_bytes, storage
        )
    except AttestationError as e:
        logger.error("Finalisation refusée pour le token %s : %s", data.token_id, e.message)
        return JSONResponse(status_code=500, content={"success": False, "error": e.message})
    except Exception as e:
        logger.error("Erreur inattendue à la finalisation du token %s : %s", data.token_id, e, exc_info=True)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {
        "success": True,
        "pdfUrl": attestation.pdf_url,
        "message": "Attestation générée et envoyée avec succès.",
    }
