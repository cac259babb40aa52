"""
Encodage texte des détails de prestation dans la colonne prestation_description.

Format d'un lot (un segment) :
    DateEvt:2025-06-01 | Tickets:2 - Roland-Garros - Court Philippe-Chatrier - Catégorie 1

Les segments sont joints par « || » ; les précisions libres, si présentes,
forment toujours le dernier segment. Un lot émet toujours ses quatre parties,
même vides, pour que le décodage reste positionnel.

parse_description(pack_description(d)) == d pour tout PrestationDetails valide
dont l'événement est porté par au moins un lot.
"""

import datetime as dt
import re
from typing import Optional, Tuple

from pydantic import ValidationError

from app.schemas.attestation import LOT_PREFIX, LotForm, PrestationDetails

PART_SEPARATOR = " - "
SEGMENT_SEPARATOR = " || "

_LOT_HEAD = re.compile(r"^DateEvt:(\d{4}-\d{2}-\d{2}) \| Tickets:(\d*)$")


def pack_description(details: PrestationDetails) -> str:
    """Sérialise l'événement, les lots et les précisions en une seule chaîne."""
    segments = []
    for lot in details.lots:
        tickets = "" if lot.tickets is None else str(lot.tickets)
        head = f"{LOT_PREFIX}{lot.event_date.isoformat()} | Tickets:{tickets}"
        segments.append(PART_SEPARATOR.join([head, details.evenement or "", lot.court, lot.categorie]))
    if details.autres_precisions:
        segments.append(details.autres_precisions)
    return SEGMENT_SEPARATOR.join(segments)


def _parse_lot_segment(segment: str) -> Optional[Tuple[str, LotForm]]:
    """Retourne (nom d'événement, lot) ou None si le segment n'est pas un lot."""
    parts = segment.split(PART_SEPARATOR)
    if len(parts) != 4:
        return None
    match = _LOT_HEAD.match(parts[0])
    if match is None:
        return None
    try:
        event_date = dt.date.fromisoformat(match.group(1))
    except ValueError:
        return None
    tickets = int(match.group(2)) if match.group(2) else None
    try:
        lot = LotForm(event_date=event_date, court=parts[2], categorie=parts[3], tickets=tickets)
    except ValidationError:
        return None
    return parts[1], lot


def parse_description(description: Optional[str]) -> PrestationDetails:
    """
    Inverse de pack_description. Les segments en tête qui sont des lots sont décodés ;
    tout ce qui suit le premier segment non-lot constitue les précisions libres.
    Une description libre (ancien format) est donc restituée telle quelle en précisions.
    """
    if not description:
        return PrestationDetails()

    segments = description.split(SEGMENT_SEPARATOR)
    evenement = None
    lots = []
    precisions = None

    for index, segment in enumerate(segments):
        parsed = _parse_lot_segment(segment)
        if parsed is None:
            precisions = SEGMENT_SEPARATOR.join(segments[index:])
            break
        event_name, lot = parsed
        if evenement is None and event_name:
            evenement = event_name
        lots.append(lot)

    return PrestationDetails(evenement=evenement, lots=lots, autres_precisions=precisions)


def classify_event_type(description: Optional[str], featured_event: str) -> str:
    """Classe une description : nom de l'événement phare s'il y apparaît, sinon « Autre »."""
    if description and featured_event and featured_event.lower() in description.lower():
        return featured_event
    return "Autre"
