from __future__ import annotations

"""Selectors and URLs for the Presto broker console and the e-SAJ portal.

Everything here is tied to third-party markup. When either site changes its
login flow or case page, this is the only module that should need edits.
Text-matching selectors are written as XPath so both browser backends accept
them; everything else is plain CSS.
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class BrokerSelectors:
    """Presto console login page."""

    login_url: str = "https://console.presto.oystr.com.br/"
    identifier_input: str = "input[type=text]"
    identifier_submit: str = '//button[text()="Acessar"]'
    password_input: str = "input[type=password]"
    password_submit: str = '//button[text()="Login"]'
    logged_in_marker: str = "button[title=Sair]"


@dataclass(frozen=True)
class PortalSelectors:
    """e-SAJ certificate login and first-instance case pages."""

    login_url: str = "https://esaj.tjsp.jus.br/sajcas/login"
    certificate_tab: str = "a[id=linkAbaCertificado]"
    certificate_list: str = "#certificados"
    # Label prefix of the empty first option shown before certificates load.
    certificate_placeholder: str = "Selecione"
    # The page renders several submit buttons and hides all but one.
    certificate_submit: str = "input[type='button'][id='submitCertificado']:not([style*='display: none'])"
    pin_input: str = "input[placeholder='PIN']"
    pin_submit: str = "//button[text()='Validar']"
    landing_marker: str = "#menu-title"

    search_url: str = "https://esaj.tjsp.jus.br/cpopg/search.do"
    recent_movements_marker: str = "#tabelaUltimasMovimentacoes"
    all_movements_table: str = "#tabelaTodasMovimentacoes"
    metadata_fields: Dict[str, str] = field(
        default_factory=lambda: {
            "case_class": "#classeProcesso",
            "subject": "#assuntoProcesso",
            "forum_label": "#foroProcesso",
            "division": "#varaProcesso",
            "judge": "#juizProcesso",
            "area": "#areaProcesso",
            "claim_value": "#valorAcaoProcesso",
        }
    )


BROKER_SELECTORS = BrokerSelectors()
PORTAL_SELECTORS = PortalSelectors()

__all__ = [
    "BrokerSelectors",
    "PortalSelectors",
    "BROKER_SELECTORS",
    "PORTAL_SELECTORS",
]
