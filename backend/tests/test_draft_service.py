"""
Tests du brouillon d'attestation : un seul brouillon par code, rechargement du formulaire.
"""

import datetime as dt
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

from app.models.attestation import Attestation
from app.models.client import Client
from app.models.token import AccessToken
from app.schemas.attestation import AttestationForm, LotForm
from app.services import draft_service


# --- Helpers ---

def make_token(session) -> AccessToken:
    client = Client(name="Alice")
    session.add(client)
    session.commit()
    token = AccessToken(
        token="DRAFT001",
        client_id=client.id,
        used=False,
        expires_at=datetime.now() + timedelta(days=7),
    )
    session.add(token)
    session.commit()
    return token


def make_form(**kwargs) -> AttestationForm:
    data = {
        "nom": "Dupont",
        "prenom": "Jean",
        "adresse": "12 rue des Lilas, 75012 Paris",
        "type_prestation": "evenement_sportif",
        "evenement": "Roland-Garros",
        "lots": [{"eventDate": "2025-06-01", "court": "Court 14", "categorie": "Catégorie 1", "tickets": 2}],
        "prix": "150.00",
        "mode_paiement": "virement",
        "rib": "FR7630006000011234567890189",
        "ville": "Paris",
        "date": "2025-06-10",
    }
    data.update(kwargs)
    return AttestationForm.model_validate(data)


def drafts_for(session, token_id):
    return session.query(Attestation).filter_by(token_id=token_id, status="draft").all()


# ============================================================
# upsert_draft
# ============================================================

def test_upsert_cree_le_brouillon(session):
    token = make_token(session)

    draft = draft_service.upsert_draft(session, token.id, token.client_id, make_form())

    assert draft.status == "draft"
    assert draft.pdf_generated is False
    assert draft.prestataire_nom == "Dupont"
    assert draft.prestation_montant == Decimal("150.00")
    assert draft.prestation_date_debut == dt.date(2025, 6, 10)


def test_upsert_successifs_un_seul_brouillon(session):
    """N sauvegardes séquentielles → une seule ligne draft, égale au dernier appel."""
    token = make_token(session)

    for prix in ("100.00", "150.00", "175.50", "200.00"):
        draft_service.upsert_draft(session, token.id, token.client_id, make_form(prix=prix))

    drafts = drafts_for(session, token.id)
    assert len(drafts) == 1
    assert drafts[0].prestation_montant == Decimal("200.00")


def test_upsert_insertion_concurrente_rejouee_en_mise_a_jour(session):
    """Une sauvegarde concurrente a déjà inséré le brouillon : l'index unique rejette
    la seconde insertion et la mise à jour s'applique à la ligne existante."""
    token = make_token(session)
    existing = draft_service.upsert_draft(session, token.id, token.client_id, make_form(prix="100.00"))

    with patch.object(draft_service, "find_draft", side_effect=[None, existing]):
        draft = draft_service.upsert_draft(session, token.id, token.client_id, make_form(prix="250.00"))

    assert draft.id == existing.id
    drafts = drafts_for(session, token.id)
    assert len(drafts) == 1
    assert drafts[0].prestation_montant == Decimal("250.00")


def test_create_initial_draft_ne_duplique_pas(session):
    token = make_token(session)

    first = draft_service.create_initial_draft(session, token)
    second = draft_service.create_initial_draft(session, token)

    assert first.id == second.id
    assert first.prestation_montant == Decimal("0")
    assert len(drafts_for(session, token.id)) == 1


# ============================================================
# Rechargement (form_from_attestation)
# ============================================================

def test_rechargement_restitue_le_formulaire(session):
    token = make_token(session)
    form = make_form(autres_precisions="Places côte à côte")
    draft = draft_service.upsert_draft(session, token.id, token.client_id, form)

    reloaded = draft_service.form_from_attestation(draft)

    assert reloaded.nom == "Dupont"
    assert reloaded.evenement == "Roland-Garros"
    assert reloaded.lots == [LotForm(event_date=dt.date(2025, 6, 1), court="Court 14",
                                     categorie="Catégorie 1", tickets=2)]
    assert reloaded.autres_precisions == "Places côte à côte"
    assert reloaded.prix == Decimal("150.00")
    assert reloaded.mode_paiement == "virement"
    assert reloaded.ville == "Paris"


def test_rechargement_ancienne_ligne_sans_details(session):
    """Sans colonne structurée, la description texte est décodée."""
    token = make_token(session)
    draft = draft_service.upsert_draft(session, token.id, token.client_id, make_form())
    draft.prestation_details = None
    session.commit()

    reloaded = draft_service.form_from_attestation(draft)

    assert reloaded.evenement == "Roland-Garros"
    assert reloaded.lots[0].court == "Court 14"
    assert reloaded.lots[0].tickets == 2
