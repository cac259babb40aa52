"""
Contrôle des champs obligatoires par étape du formulaire client.
Indicatif : sert à bloquer la navigation côté interface, jamais la finalisation.
"""

from typing import List

from app.schemas.attestation import AttestationForm

FORM_STEPS = (1, 2, 3, 4, 5)


def validate_step(form: AttestationForm, step: int) -> List[str]:
    """Retourne la liste des erreurs de l'étape (vide si l'étape est complète)."""
    if step not in FORM_STEPS:
        raise ValueError(f"Étape inconnue : {step}")

    errors = []

    if step == 1:
        if not form.nom:
            errors.append("Le nom est obligatoire.")
        if not form.prenom:
            errors.append("Le prénom est obligatoire.")
        if not form.adresse:
            errors.append("L'adresse est obligatoire.")

    elif step == 2:
        if not form.type_prestation:
            errors.append("Le type de prestation est obligatoire.")
        elif form.type_prestation == "evenement_sportif":
            if not form.evenement:
                errors.append("L'événement est obligatoire.")
            for index, lot in enumerate(form.lots, start=1):
                if not (lot.court and lot.categorie and lot.tickets):
                    errors.append(f"Lot {index} : court, catégorie et nombre de billets sont obligatoires.")

    elif step == 3:
        if not form.prix:
            errors.append("Le prix est obligatoire.")
        if form.mode_paiement != "virement":
            errors.append("Seul le paiement par virement est accepté.")
        if not form.rib:
            errors.append("Le RIB est obligatoire.")

    elif step == 4:
        if not form.signature:
            errors.append("La signature est obligatoire.")

    else:
        if not form.ville:
            errors.append("La ville est obligatoire.")
        if form.date is None:
            errors.append("La date est obligatoire.")

    return errors
