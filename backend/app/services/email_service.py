"""
Service d'envoi d'emails SMTP.
Utilisé pour transmettre l'attestation finalisée à l'administrateur
et pour envoyer un code d'accès à un client qui dispose d'une adresse email.
"""

import html
import logging
import smtplib
from datetime import date, datetime
from decimal import Decimal
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)


def _send(msg: MIMEMultipart) -> None:
    """Connexion SMTP et envoi. Lève une exception en cas d'échec SMTP."""
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)


def send_attestation_email(
    to_email: str,
    prestataire_name: str,
    amount: Decimal,
    prestation_date: Optional[date],
    pdf_bytes: bytes,
    file_name: str,
    pdf_url: str,
) -> None:
    """
    Envoie à l'administrateur l'attestation finalisée, PDF en pièce jointe.
    Lève une exception en cas d'échec SMTP.
    """
    date_label = prestation_date.strftime("%d/%m/%Y") if prestation_date else "date non renseignée"

    msg = MIMEMultipart("mixed")
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = f"Nouvelle attestation : {prestataire_name} ({amount} €)"

    safe_name = html.escape(prestataire_name)
    html_content = f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <h2 style="color: #1e293b;">{settings.ISSUER_NAME} : Attestation de prestation</h2>
        <p>Bonjour,</p>
        <p>
          <strong>{safe_name}</strong> vient de finaliser son attestation de prestation
          du <strong>{date_label}</strong> pour un montant de <strong>{amount} €</strong>.
        </p>
        <p>Le document signé est joint à ce message et reste disponible ici :
          <a href="{pdf_url}">{pdf_url}</a>
        </p>
        <hr style="border: none; border-top: 1px solid #eee;" />
        <p style="font-size: 12px; color: #888;">
          Ce message est généré automatiquement. Ne pas répondre à cet email.
        </p>
      </body>
    </html>
    """
    msg.attach(MIMEText(html_content, "html", "utf-8"))

    attachment = MIMEApplication(pdf_bytes, _subtype="pdf")
    attachment.add_header("Content-Disposition", "attachment", filename=file_name)
    msg.attach(attachment)

    _send(msg)
    logger.info("Attestation %s envoyée à %s", file_name, to_email)


def send_access_code_email(to_email: str, client_name: str, code: str, expires_at: datetime) -> None:
    """
    Envoie un code d'accès à un client, avec le lien direct vers le formulaire.
    Lève une exception en cas d'échec SMTP.
    """
    direct_link = f"{settings.PUBLIC_FORM_URL.rstrip('/')}/?code={code}"

    msg = MIMEMultipart("alternative")
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = f"Votre code d'accès {settings.ISSUER_NAME} - {code}"

    text_content = (
        f"Bonjour {client_name},\n\n"
        f"Votre code d'accès : {code}\n"
        f"Accès direct : {direct_link}\n\n"
        f"Ce code est valide pour une seule utilisation, "
        f"jusqu'au {expires_at.strftime('%d/%m/%Y')}.\n"
    )
    html_content = f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <h2 style="color: #1e293b;">{settings.ISSUER_NAME}</h2>
        <p>Bonjour {html.escape(client_name)},</p>
        <p>Vous avez reçu un code d'accès pour remplir votre attestation de prestation de service.</p>
        <p style="font-size: 24px; font-weight: bold; letter-spacing: 3px; text-align: center;">{code}</p>
        <p><a href="{direct_link}">Accéder directement à la plateforme</a></p>
        <ul>
          <li>Ce code est valide pour <strong>une seule utilisation</strong></li>
          <li>Il expire le <strong>{expires_at.strftime('%d/%m/%Y')}</strong></li>
        </ul>
      </body>
    </html>
    """
    msg.attach(MIMEText(text_content, "plain", "utf-8"))
    msg.attach(MIMEText(html_content, "html", "utf-8"))

    _send(msg)
    logger.info("Code d'accès envoyé à %s", to_email)
