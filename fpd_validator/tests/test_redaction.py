"""Tests for fpd_validator.redaction -- opt-out detection."""

from __future__ import annotations

from fpd_validator.redaction import OptOutDetector


class TestOptOutDetector:
    def test_no_marker(self) -> None:
        assert OptOutDetector()() is False

    def test_cookie_marker(self) -> None:
        assert OptOutDetector(cookies={"_pubcid_optout": "1"})() is True

    def test_local_storage_marker(self) -> None:
        assert OptOutDetector(local_storage={"_pubcid_optout": "true"})() is True

    def test_empty_marker_ignored(self) -> None:
        assert OptOutDetector(cookies={"_pubcid_optout": ""})() is False

    def test_disabled_stores_ignored(self) -> None:
        detector = OptOutDetector(
            cookies={"_pubcid_optout": "1"},
            local_storage={"_pubcid_optout": "1"},
            cookies_enabled=False,
            local_storage_enabled=False,
        )
        assert detector() is False

    def test_falls_back_to_local_storage(self) -> None:
        detector = OptOutDetector(
            cookies={"_pubcid_optout": "1"},
            local_storage={"_pubcid_optout": "1"},
            cookies_enabled=False,
        )
        assert detector() is True

    def test_custom_key(self) -> None:
        assert OptOutDetector(cookies={"optout": "1"}, key="optout")() is True
        assert OptOutDetector(cookies={"_pubcid_optout": "1"}, key="optout")() is False

    def test_from_cookie_header(self) -> None:
        assert OptOutDetector.from_cookie_header("foo=bar; _pubcid_optout=1")() is True
        assert OptOutDetector.from_cookie_header("foo=bar")() is False
        assert OptOutDetector.from_cookie_header("")() is False
