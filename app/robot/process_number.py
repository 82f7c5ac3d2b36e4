"""Parsing of unified CNJ process numbers (``NNNNNNN-DD.YYYY.J.TR.OOOO``)."""
from __future__ import annotations

import urllib.parse
from dataclasses import asdict, dataclass
from typing import Dict

from .errors import FormatError
from .selectors_esaj import PORTAL_SELECTORS, PortalSelectors

_FIELD_COUNT = 5


@dataclass(frozen=True)
class ProcessIdentifier:
    raw: str
    sequential_check_digit: str
    year: str
    originating_agency: str
    court: str
    forum: str

    def parts(self) -> Dict[str, str]:
        data = asdict(self)
        data.pop("raw")
        return data


def parse(raw: str) -> ProcessIdentifier:
    """Split ``raw`` into its five dot-separated routing fields.

    Raises ``FormatError`` when the field count is not exactly five or any
    field is empty.
    """

    if not isinstance(raw, str):
        raise FormatError(f"process number must be a string, got {type(raw).__name__}")
    value = raw.strip()
    fields = value.split(".")
    if len(fields) != _FIELD_COUNT:
        raise FormatError(
            f"process number {raw!r} has {len(fields)} dot-separated fields; expected {_FIELD_COUNT}"
        )
    if any(not part for part in fields):
        raise FormatError(f"process number {raw!r} has an empty field")

    sequential_check_digit, year, originating_agency, court, forum = fields
    return ProcessIdentifier(
        raw=value,
        sequential_check_digit=sequential_check_digit,
        year=year,
        originating_agency=originating_agency,
        court=court,
        forum=forum,
    )


def build_search_url(
    identifier: ProcessIdentifier, *, selectors: PortalSelectors = PORTAL_SELECTORS
) -> str:
    """Return the first-instance search URL for ``identifier``."""

    query = [
        ("conversationId", ""),
        ("cbPesquisa", "NUMPROC"),
        ("numeroDigitoAnoUnificado", f"{identifier.sequential_check_digit}{identifier.year}"),
        ("foroNumeroUnificado", identifier.forum),
        ("dadosConsulta.valorConsultaNuUnificado", identifier.raw),
        ("dadosConsulta.valorConsultaNuUnificado", "UNIFICADO"),
        ("dadosConsulta.valorConsulta", ""),
        ("dadosConsulta.tipoNuProcesso", "UNIFICADO"),
    ]
    return f"{selectors.search_url}?{urllib.parse.urlencode(query)}"


__all__ = ["ProcessIdentifier", "parse", "build_search_url"]
