"""Case-page extraction: movement history and case metadata."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, List, Union

from bs4 import BeautifulSoup

from . import config
from .auth import AuthenticationFlow, AuthState
from .browser import BrowserActionError, WaitTimeout
from .errors import NavigationError
from .process_number import ProcessIdentifier, build_search_url, parse
from .selectors_esaj import PORTAL_SELECTORS, PortalSelectors
from .session import SessionManager
from .utils import log_line, short_error_message

_CURRENCY_PREFIX = re.compile(r"^\s*R\$\s*")


@dataclass(frozen=True)
class MovementRecord:
    date: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class CaseMetadata:
    case_class: str = ""
    subject: str = ""
    forum_label: str = ""
    division: str = ""
    judge: str = ""
    area: str = ""
    claim_value: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def normalize_claim_value(raw: str | None) -> str:
    """Turn a BRL amount such as ``"R$ 12.345,67"`` into ``"12345.67"``."""

    text = (raw or "").replace("\xa0", " ").strip()
    if not text:
        return ""
    text = _CURRENCY_PREFIX.sub("", text)
    text = text.replace(".", "").replace(",", ".")
    return re.sub(r"\s+", "", text)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html5lib")


def parse_movements(html: str, *, selectors: PortalSelectors = PORTAL_SELECTORS) -> List[MovementRecord]:
    """Read the full movement table in document order.

    Each row contributes its first cell as the date and its last cell as the
    description. Rows without data cells (headers, spacers) are skipped.
    """

    table = _soup(html).select_one(selectors.all_movements_table)
    if table is None:
        return []

    records: List[MovementRecord] = []
    for row in table.select("tr"):
        cells = row.find_all("td")
        if not cells:
            continue
        records.append(
            MovementRecord(
                date=cells[0].get_text().strip(),
                description=cells[-1].get_text().strip(),
            )
        )
    return records


def parse_metadata(html: str, *, selectors: PortalSelectors = PORTAL_SELECTORS) -> CaseMetadata:
    """Read the case header fields; absent fields become empty strings."""

    soup = _soup(html)
    values: Dict[str, str] = {}
    for name, selector in selectors.metadata_fields.items():
        node = soup.select_one(selector)
        values[name] = node.get_text().strip() if node is not None else ""
    values["claim_value"] = normalize_claim_value(values.get("claim_value"))
    return CaseMetadata(**values)


class ExtractionPipeline:
    """Navigate to a case page and extract records from the rendered HTML.

    Calls are independent of each other and never retried here; the caller
    decides what to do with a ``NavigationError``.
    """

    def __init__(
        self,
        session: SessionManager,
        auth: AuthenticationFlow,
        *,
        selectors: PortalSelectors = PORTAL_SELECTORS,
    ) -> None:
        self._session = session
        self._auth = auth
        self.selectors = selectors

    def _load_case_page(self, identifier: Union[ProcessIdentifier, str]) -> str:
        self._auth.require(AuthState.FULLY_AUTHENTICATED)
        if isinstance(identifier, str):
            identifier = parse(identifier)

        url = build_search_url(identifier, selectors=self.selectors)
        page = self._session.page
        log_line(f"[EXTRACT] Opening case {identifier.raw}")
        try:
            page.navigate(url)
            page.wait_for_selector(self.selectors.recent_movements_marker, config.NAVIGATION_TIMEOUT_MS)
            return page.content()
        except (WaitTimeout, BrowserActionError) as exc:
            raise NavigationError(
                f"case page for {identifier.raw} did not load: {short_error_message(exc)}",
                url=url,
            ) from exc

    def extract_movements(self, identifier: Union[ProcessIdentifier, str]) -> List[MovementRecord]:
        records = parse_movements(self._load_case_page(identifier), selectors=self.selectors)
        log_line(f"[EXTRACT] {len(records)} movements read")
        return records

    def extract_metadata(self, identifier: Union[ProcessIdentifier, str]) -> CaseMetadata:
        return parse_metadata(self._load_case_page(identifier), selectors=self.selectors)


__all__ = [
    "MovementRecord",
    "CaseMetadata",
    "ExtractionPipeline",
    "normalize_claim_value",
    "parse_movements",
    "parse_metadata",
]
