from __future__ import annotations

from app.robot import selectors_esaj


def test_portal_selectors_defaults() -> None:
    selectors = selectors_esaj.PORTAL_SELECTORS

    assert selectors.login_url.endswith("/sajcas/login")
    assert selectors.search_url.endswith("/cpopg/search.do")
    assert "display: none" in selectors.certificate_submit
    assert selectors.metadata_fields["claim_value"] == "#valorAcaoProcesso"
    assert set(selectors.metadata_fields) == {
        "case_class",
        "subject",
        "forum_label",
        "division",
        "judge",
        "area",
        "claim_value",
    }


def test_broker_selectors_defaults() -> None:
    selectors = selectors_esaj.BROKER_SELECTORS

    assert selectors.login_url.startswith("https://console.presto")
    assert selectors.logged_in_marker == "button[title=Sair]"
    assert selectors.identifier_submit.startswith("//button")
