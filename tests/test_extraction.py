from __future__ import annotations

import pytest

from app.robot import extraction
from app.robot.auth import AuthenticationFlow, AuthState
from app.robot.errors import AuthenticationOrderError, NavigationError
from app.robot.extraction import CaseMetadata, ExtractionPipeline, MovementRecord
from tests.fake_page import FakePage, PageHolder

CASE = "1027910-13.2022.8.26.0002"

MOVEMENTS_HTML = """
<html><body>
<table><tbody id="tabelaUltimasMovimentacoes"><tr><td>10/05/2024</td><td></td><td>Conclusos</td></tr></tbody></table>
<table>
  <tbody id="tabelaTodasMovimentacoes">
    <tr class="containerMovimentacao">
      <td class="dataMovimentacao">
          10/05/2024
      </td>
      <td class="dataMovimentacao"></td>
      <td class="descricaoMovimentacao">
          Conclusos para Despacho
      </td>
    </tr>
    <tr class="containerMovimentacao">
      <td>02/04/2024</td><td></td><td>  Juntada de Petição  </td>
    </tr>
    <tr class="containerMovimentacao">
      <td>15/01/2023</td><td></td><td>Distribuído Livremente</td>
    </tr>
  </tbody>
</table>
</body></html>
"""

EMPTY_MOVEMENTS_HTML = """
<html><body>
<table><tbody id="tabelaUltimasMovimentacoes"></tbody></table>
<table><tbody id="tabelaTodasMovimentacoes"></tbody></table>
</body></html>
"""

METADATA_HTML = """
<html><body>
<span id="classeProcesso"> Procedimento Comum Cível </span>
<span id="assuntoProcesso">Indenização por Dano Moral</span>
<div id="foroProcesso">Foro Regional II - Santo Amaro</div>
<div id="varaProcesso">5ª Vara Cível</div>
<span id="juizProcesso">Maria Aparecida Lima</span>
<div id="areaProcesso"><span>Cível</span></div>
<div id="valorAcaoProcesso">R$         12.345,67</div>
<table><tbody id="tabelaUltimasMovimentacoes"></tbody></table>
</body></html>
"""


def _authenticated(page: FakePage) -> ExtractionPipeline:
    holder = PageHolder(page)
    auth = AuthenticationFlow(holder)
    auth.advance(AuthState.FULLY_AUTHENTICATED)
    return ExtractionPipeline(holder, auth)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("R$ 12.345,67", "12345.67"),
        ("R$ 1.234.567,89", "1234567.89"),
        ("R$\xa0950,00", "950.00"),
        ("12.345,67", "12345.67"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_claim_value(raw, expected) -> None:
    assert extraction.normalize_claim_value(raw) == expected


def test_parse_movements_keeps_document_order_and_trims() -> None:
    records = extraction.parse_movements(MOVEMENTS_HTML)

    assert records == [
        MovementRecord(date="10/05/2024", description="Conclusos para Despacho"),
        MovementRecord(date="02/04/2024", description="Juntada de Petição"),
        MovementRecord(date="15/01/2023", description="Distribuído Livremente"),
    ]


def test_parse_movements_empty_table_returns_empty_list() -> None:
    assert extraction.parse_movements(EMPTY_MOVEMENTS_HTML) == []


def test_parse_metadata_reads_fields() -> None:
    metadata = extraction.parse_metadata(METADATA_HTML)

    assert metadata == CaseMetadata(
        case_class="Procedimento Comum Cível",
        subject="Indenização por Dano Moral",
        forum_label="Foro Regional II - Santo Amaro",
        division="5ª Vara Cível",
        judge="Maria Aparecida Lima",
        area="Cível",
        claim_value="12345.67",
    )


def test_parse_metadata_defaults_missing_fields() -> None:
    html = '<html><body><span id="classeProcesso">Execução Fiscal</span></body></html>'

    metadata = extraction.parse_metadata(html)

    assert metadata.case_class == "Execução Fiscal"
    assert metadata.claim_value == ""
    assert metadata.judge == ""
    assert set(metadata.to_dict()) == {
        "case_class",
        "subject",
        "forum_label",
        "division",
        "judge",
        "area",
        "claim_value",
    }


def test_extract_movements_navigates_to_search_url() -> None:
    page = FakePage(case_pages={CASE: MOVEMENTS_HTML})
    pipeline = _authenticated(page)

    records = pipeline.extract_movements(CASE)

    assert [r.date for r in records] == ["10/05/2024", "02/04/2024", "15/01/2023"]
    (navigate,) = page.calls_named("navigate")
    assert "cpopg/search.do" in navigate[1]


def test_extract_movements_with_zero_rows() -> None:
    page = FakePage(case_pages={CASE: EMPTY_MOVEMENTS_HTML})
    assert _authenticated(page).extract_movements(CASE) == []


def test_extract_metadata_normalizes_claim_value() -> None:
    page = FakePage(case_pages={CASE: METADATA_HTML})

    metadata = _authenticated(page).extract_metadata(CASE)

    assert metadata.claim_value == "12345.67"
    assert metadata.area == "Cível"


def test_extract_metadata_without_claim_value_field() -> None:
    html = METADATA_HTML.replace('<div id="valorAcaoProcesso">R$         12.345,67</div>', "")
    page = FakePage(case_pages={CASE: html})

    assert _authenticated(page).extract_metadata(CASE).claim_value == ""


def test_missing_marker_raises_navigation_error() -> None:
    page = FakePage()

    with pytest.raises(NavigationError) as excinfo:
        _authenticated(page).extract_movements(CASE)

    assert excinfo.value.url is not None
    assert excinfo.value.reason().startswith("navigation_error: ")


def test_driver_failure_raises_navigation_error() -> None:
    page = FakePage(case_pages={CASE: MOVEMENTS_HTML}, broken_urls=["cpopg"])

    with pytest.raises(NavigationError):
        _authenticated(page).extract_metadata(CASE)


def test_extraction_requires_full_authentication() -> None:
    page = FakePage(case_pages={CASE: MOVEMENTS_HTML})
    holder = PageHolder(page)
    auth = AuthenticationFlow(holder)
    auth.advance(AuthState.BROKER_AUTHENTICATED)

    with pytest.raises(AuthenticationOrderError):
        ExtractionPipeline(holder, auth).extract_movements(CASE)
    assert page.calls == []
