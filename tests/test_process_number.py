from __future__ import annotations

import urllib.parse

import pytest

from app.robot import process_number
from app.robot.errors import FormatError


def test_parse_splits_unified_number() -> None:
    identifier = process_number.parse("1027910-13.2022.8.26.0002")

    assert identifier.raw == "1027910-13.2022.8.26.0002"
    assert identifier.parts() == {
        "sequential_check_digit": "1027910-13",
        "year": "2022",
        "originating_agency": "8",
        "court": "26",
        "forum": "0002",
    }


def test_parse_strips_surrounding_whitespace() -> None:
    identifier = process_number.parse("  1049501-91.2023.8.26.0100\n")
    assert identifier.raw == "1049501-91.2023.8.26.0100"
    assert identifier.forum == "0100"


@pytest.mark.parametrize(
    "raw",
    [
        "bad-input",
        "malformed",
        "",
        "1027910-13.2022.8.26",
        "1027910-13.2022.8.26.0002.9",
        "1027910-13..8.26.0002",
    ],
)
def test_parse_rejects_malformed_numbers(raw: str) -> None:
    with pytest.raises(FormatError):
        process_number.parse(raw)


def test_format_error_reason_is_tagged() -> None:
    with pytest.raises(FormatError) as excinfo:
        process_number.parse("bad-input")
    assert excinfo.value.reason().startswith("format_error: ")


def test_build_search_url_substitutes_parts() -> None:
    identifier = process_number.parse("1027910-13.2022.8.26.0002")

    url = process_number.build_search_url(identifier)

    base, _, query = url.partition("?")
    assert base == "https://esaj.tjsp.jus.br/cpopg/search.do"
    params = urllib.parse.parse_qs(query, keep_blank_values=True)
    assert params["cbPesquisa"] == ["NUMPROC"]
    assert params["numeroDigitoAnoUnificado"] == ["1027910-132022"]
    assert params["foroNumeroUnificado"] == ["0002"]
    assert params["dadosConsulta.valorConsultaNuUnificado"] == ["1027910-13.2022.8.26.0002", "UNIFICADO"]
    assert params["dadosConsulta.tipoNuProcesso"] == ["UNIFICADO"]
    assert url == process_number.build_search_url(identifier)
