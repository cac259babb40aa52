"""
Tests du tableau de bord admin : filtres, statistiques, compteurs clients.
"""

import datetime as dt
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.models.attestation import Attestation
from app.models.client import Client
from app.models.token import AccessToken
from app.schemas.attestation import AttestationFilters, AttestationResponse
from app.services import admin_service, client_service


# --- Helpers ---

def make_item(**kwargs) -> AttestationResponse:
    return AttestationResponse(
        id=uuid.uuid4(),
        token_id=uuid.uuid4(),
        client_id=uuid.uuid4(),
        prestataire_nom=kwargs.get("nom", "Dupont"),
        prestataire_prenom=kwargs.get("prenom", "Jean"),
        client_nom="TGZ Conciergerie",
        client_adresse="4 rue de sontay, 75116 Paris",
        prestation_description=kwargs.get("description", "Chauffeur"),
        prestation_date_debut=kwargs.get("date_debut", dt.date(2025, 6, 10)),
        prestation_montant=Decimal(kwargs.get("montant", "100.00")),
        status=kwargs.get("status", "completed"),
        pdf_generated=kwargs.get("pdf_generated", True),
        invoice_processed=False,
    )


ITEMS = [
    make_item(nom="Dupont", prenom="Jean", montant="100.00", date_debut=dt.date(2025, 6, 1),
              description="DateEvt:2025-06-01 | Tickets:2 - Roland-Garros - Court 14 - Cat 1"),
    make_item(nom="Martin", prenom="Claire", montant="250.00", date_debut=dt.date(2025, 6, 15),
              pdf_generated=False, status="draft"),
    make_item(nom="Durand", prenom="Paul", montant="400.00", date_debut=None),
]


def names(items):
    return [i.prestataire_nom for i in items]


# ============================================================
# filter_attestations
# ============================================================

def test_filtre_aucun_filtre():
    assert names(admin_service.filter_attestations(ITEMS, AttestationFilters())) == ["Dupont", "Martin", "Durand"]


@pytest.mark.parametrize("tab,expected", [
    ("completed", ["Dupont", "Durand"]),
    ("pending", ["Martin"]),
])
def test_filtre_onglet_selon_pdf_generated(tab, expected):
    assert names(admin_service.filter_attestations(ITEMS, AttestationFilters(tab=tab))) == expected


def test_filtre_recherche_nom_prenom_insensible_casse():
    result = admin_service.filter_attestations(ITEMS, AttestationFilters(search="martin cl"))
    assert names(result) == ["Martin"]


def test_filtre_dates_inclusives_sans_date_exclue():
    filters = AttestationFilters(date_start=dt.date(2025, 6, 1), date_end=dt.date(2025, 6, 15))
    assert names(admin_service.filter_attestations(ITEMS, filters)) == ["Dupont", "Martin"]


def test_filtre_montants_inclusifs():
    filters = AttestationFilters(min_amount=Decimal("100"), max_amount=Decimal("250"))
    assert names(admin_service.filter_attestations(ITEMS, filters)) == ["Dupont", "Martin"]


def test_filtre_type_evenement_sous_chaine():
    filters = AttestationFilters(event_type="roland")
    assert names(admin_service.filter_attestations(ITEMS, filters)) == ["Dupont"]


def test_filtres_vides_ignores():
    filters = AttestationFilters.model_validate({"search": "", "min_amount": "", "event_type": " "})
    assert len(admin_service.filter_attestations(ITEMS, filters)) == 3


def test_onglet_invalide():
    with pytest.raises(ValueError):
        AttestationFilters(tab="archived")


# ============================================================
# list_attestations / statistiques (SQLite)
# ============================================================

def seed(session):
    alice = Client(name="Alice")
    bob = Client(name="Bob")
    session.add_all([alice, bob])
    session.commit()

    active = AccessToken(token="ACTIVE01", client_id=alice.id, used=False,
                         expires_at=datetime.now() + timedelta(days=7))
    used = AccessToken(token="USED0001", client_id=alice.id, used=True,
                       expires_at=datetime.now() + timedelta(days=7))
    session.add_all([active, used])
    session.commit()

    session.add_all([
        Attestation(token_id=active.id, client_id=alice.id, client_nom="TGZ", client_adresse="Paris",
                    prestataire_nom="Dupont", status="draft", pdf_generated=False,
                    prestation_description="À compléter par le client", invoice_processed=False),
        Attestation(token_id=used.id, client_id=alice.id, client_nom="TGZ", client_adresse="Paris",
                    prestataire_nom="Dupont", status="completed", pdf_generated=True,
                    prestation_description="DateEvt:2025-06-01 | Tickets:2 - Roland-Garros - C - 1",
                    prestation_montant=Decimal("200.00"), invoice_processed=False),
    ])
    session.commit()
    return alice, bob


def test_list_attestations_avec_client_et_type(session):
    seed(session)

    items = admin_service.list_attestations(session)

    assert len(items) == 2
    assert {i.client.name for i in items} == {"Alice"}
    assert {i.event_type for i in items} == {"Roland-Garros", "Autre"}


def test_dashboard_stats(session):
    seed(session)

    stats = admin_service.get_dashboard_stats(session)

    assert stats.total_clients == 2
    assert stats.completed == 1
    assert stats.pending == 1
    assert stats.attestations == 2


def test_clients_avec_statistiques(session):
    alice, bob = seed(session)

    clients = {c.name: c for c in client_service.list_clients_with_stats(session)}

    assert clients["Alice"].active_tokens_count == 1
    assert clients["Alice"].active_token.token == "ACTIVE01"
    assert clients["Alice"].total_attestations_count == 2
    assert clients["Alice"].completed_attestations_count == 1
    assert clients["Alice"].pending_attestations_count == 1
    assert clients["Bob"].active_token is None
    assert clients["Bob"].total_attestations_count == 0


def test_set_invoice_processed_independant_du_statut(session):
    seed(session)
    draft = session.query(Attestation).filter_by(status="draft").one()

    result = admin_service.set_invoice_processed(session, draft.id, True)

    assert result.invoice_processed is True
    assert result.status == "draft"
    assert result.client.name == "Alice"


def test_set_invoice_processed_introuvable(session):
    assert admin_service.set_invoice_processed(session, uuid.uuid4(), True) is None


def test_delete_attestation(session):
    seed(session)
    draft = session.query(Attestation).filter_by(status="draft").one()

    assert admin_service.delete_attestation(session, draft.id) is True
    assert admin_service.delete_attestation(session, draft.id) is False
