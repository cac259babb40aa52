"""
Tests du contrôle des champs obligatoires par étape.
"""

import pytest

from app.schemas.attestation import AttestationForm
from app.services.form_validation import validate_step


def test_etape_1_identite():
    assert validate_step(AttestationForm(nom="Dupont", prenom="Jean", adresse="Paris"), 1) == []
    assert len(validate_step(AttestationForm(), 1)) == 3


def test_etape_2_evenement_sportif_lots_complets():
    form = AttestationForm.model_validate({
        "type_prestation": "evenement_sportif",
        "evenement": "Roland-Garros",
        "lots": [{"eventDate": "2025-06-01", "court": "Court 14", "categorie": "Loge", "tickets": 2}],
    })
    assert validate_step(form, 2) == []


def test_etape_2_lot_incomplet():
    form = AttestationForm.model_validate({
        "type_prestation": "evenement_sportif",
        "evenement": "Roland-Garros",
        "lots": [{"court": "Court 14", "categorie": "", "tickets": None}],
    })
    errors = validate_step(form, 2)
    assert len(errors) == 1
    assert errors[0].startswith("Lot 1")


def test_etape_2_autre_prestation():
    assert validate_step(AttestationForm(type_prestation="autre"), 2) == []
    assert validate_step(AttestationForm(), 2) == ["Le type de prestation est obligatoire."]


def test_etape_3_paiement():
    form = AttestationForm(prix="150", mode_paiement="virement", rib="FR76300060000112345678")
    assert validate_step(form, 3) == []
    assert len(validate_step(AttestationForm(prix="0"), 3)) == 3


def test_etape_4_signature():
    assert validate_step(AttestationForm(signature="data:image/png;base64,AAAA"), 4) == []
    assert validate_step(AttestationForm(), 4) == ["La signature est obligatoire."]


def test_etape_5_lieu_et_date():
    assert validate_step(AttestationForm(ville="Paris", date="2025-06-10"), 5) == []
    assert len(validate_step(AttestationForm(ville="Paris"), 5)) == 1


def test_etape_inconnue():
    with pytest.raises(ValueError):
        validate_step(AttestationForm(), 6)
