# tests/unit/config/test_unit_scopes.py — v1
"""Tests for config/scopes.py — scope family layout."""

from __future__ import annotations

import pytest

from inspectcache.config.scopes import (
    DEFECT_IDENTIFIER_FAMILY,
    DEFECT_IDENTIFIER_SYSTEM_INSTRUCTION,
    PROCEDURES_FAMILY,
    defect_identifier_family,
    get_family,
    procedures_family,
)
from inspectcache.config.settings import Settings


class TestProceduresFamily:
    def test_layout(self):
        family = procedures_family()
        assert family.collection == "procedure_caches"
        assert family.watch_prefix == "procedures/"
        assert family.folder_for("acme") == "procedures/acme/"
        assert not family.is_shared

    def test_header(self):
        assert procedures_family().header_for("acme") == "CLIENT PROCEDURES FOR ACME:"

    def test_custom_prefix(self):
        family = procedures_family(Settings(_env_file=None, procedures_prefix="refs"))
        assert family.folder_for("acme") == "refs/acme/"


class TestDefectIdentifierFamily:
    def test_layout(self):
        family = defect_identifier_family()
        assert family.collection == "defect_identifier_cache"
        assert family.is_shared
        assert family.shared_scope == "defectidentifiertool"
        assert family.watch_prefix == "procedures/defectidentifiertool/"
        assert family.folder_for("defectidentifiertool") == "procedures/defectidentifiertool/"
        assert family.system_instruction == DEFECT_IDENTIFIER_SYSTEM_INSTRUCTION

    def test_rejects_other_scope(self):
        with pytest.raises(ValueError, match="single scope"):
            defect_identifier_family().folder_for("acme")

    def test_header_has_no_scope(self):
        assert defect_identifier_family().header_for("defectidentifiertool") == (
            "DEFECT IDENTIFICATION REFERENCE MATERIALS:"
        )


class TestGetFamily:
    def test_known(self):
        assert get_family(PROCEDURES_FAMILY).name == PROCEDURES_FAMILY
        assert get_family(DEFECT_IDENTIFIER_FAMILY).name == DEFECT_IDENTIFIER_FAMILY

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown scope family"):
            get_family("reports")
