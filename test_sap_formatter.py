"""Tests for the OData response formatter and SAP value conversion."""

import json
from datetime import date

import pytest

from connectors.sap.sap_client import SAPParseError
from connectors.sap.sap_formatter import (
    convert_to_company_code_assignment,
    convert_to_header,
    convert_to_text,
    convert_to_to_company_code_assignment,
    convert_to_to_text,
)
from connectors.sap.sap_models import ToCompanyCodeAssignment, ToText, parse_sap_date, to_sap_date


def body(payload) -> bytes:
    return json.dumps(payload).encode()


class TestHeaderConversion:

    def test_collection_with_navigation_links(self):
        raw = body({"d": {"results": [{
            "__metadata": {"type": "API_PROFITCENTER_SRV.A_ProfitCenterType"},
            "ControllingArea": "1000",
            "ProfitCenter": "YB200",
            "ValidityEndDate": "/Date(253402214400000)/",
            "ValidityStartDate": "/Date(1609459200000)/",
            "IsDeleted": False,
            "to_CompanyCode": {"__deferred": {"uri": "https://sap/x/to_CompanyCode"}},
            "to_Text": {"__deferred": {"uri": "https://sap/x/to_Text"}},
        }]}})

        headers = convert_to_header(raw)

        assert len(headers) == 1
        header = headers[0]
        assert header.ProfitCenter == "YB200"
        assert header.ValidityEndDate == date(9999, 12, 31)
        assert header.ValidityStartDate == date(2021, 1, 1)
        assert header.IsDeleted is False
        assert header.to_CompanyCodeAssignment == "https://sap/x/to_CompanyCode"
        assert header.to_Text == "https://sap/x/to_Text"

    def test_empty_collection(self):
        assert convert_to_header(body({"d": {"results": []}})) == []

    def test_expanded_navigation_has_no_link(self):
        raw = body({"d": {"results": [{"ProfitCenter": "YB200", "to_Text": {"results": []}}]}})
        assert convert_to_header(raw)[0].to_Text is None


class TestOtherEntities:

    def test_single_entity_is_wrapped_in_list(self):
        raw = body({"d": {"ControllingArea": "1000", "ProfitCenter": "YB200", "CompanyCode": "1010"}})
        records = convert_to_company_code_assignment(raw)
        assert [r.CompanyCode for r in records] == ["1010"]

    def test_text(self):
        raw = body({"d": {"results": [
            {"Language": "EN", "ProfitCenterName": "Finance", "ProfitCenterLongName": "Finance Dept"},
            {"Language": "DE", "ProfitCenterName": "Finanzen"},
        ]}})
        records = convert_to_text(raw)
        assert [r.Language for r in records] == ["EN", "DE"]
        assert records[0].ProfitCenterLongName == "Finance Dept"

    def test_navigation_types(self):
        raw = body({"d": {"results": [{"CompanyCode": "1010"}]}})
        assert isinstance(convert_to_to_company_code_assignment(raw)[0], ToCompanyCodeAssignment)
        raw = body({"d": {"results": [{"ProfitCenterName": "Finance"}]}})
        assert isinstance(convert_to_to_text(raw)[0], ToText)


class TestParseErrors:

    @pytest.mark.parametrize("raw", [
        b"not json",
        b"",
        b"[1, 2]",
        body({"value": []}),
        body({"d": "nope"}),
        body({"d": {"results": {"a": 1}}}),
        body({"d": {"results": ["text"]}}),
        body({"error": "boom"}),
        body({"error": None}),
        body({"d": {"results": [{"ValidityEndDate": "/Date(999999999999999999999)/"}]}}),
    ])
    def test_malformed_bodies(self, raw):
        with pytest.raises(SAPParseError):
            convert_to_header(raw)

    def test_odata_error_body(self):
        raw = body({"error": {"code": "SY/530", "message": {"lang": "en", "value": "Resource not found"}}})
        with pytest.raises(SAPParseError, match="Resource not found"):
            convert_to_text(raw)

    def test_field_type_mismatch(self):
        raw = body({"d": {"results": [{"ProfitCenter": "YB200", "IsDeleted": "sometimes"}]}})
        with pytest.raises(SAPParseError, match="Header entry 0"):
            convert_to_header(raw)


class TestSAPDates:

    def test_parse(self):
        assert parse_sap_date("/Date(253402214400000)/") == date(9999, 12, 31)
        assert parse_sap_date("/Date(1609459200000+0000)/") == date(2021, 1, 1)
        assert parse_sap_date("2021-01-01") == "2021-01-01"
        assert parse_sap_date("") is None
        assert parse_sap_date(None) is None

    def test_parse_out_of_range(self):
        with pytest.raises(ValueError, match="out of range"):
            parse_sap_date("/Date(999999999999999999999)/")

    def test_out_of_range_date_in_text_body(self):
        raw = body({"d": {"results": [{"ProfitCenterName": "Finance", "ValidityEndDate": "/Date(-999999999999999999)/"}]}})
        with pytest.raises(SAPParseError, match="Text entry 0"):
            convert_to_text(raw)

    def test_to_sap_date(self):
        assert to_sap_date("9999-12-31") == "/Date(253402214400000)/"
        assert to_sap_date(date(2021, 1, 1)) == "/Date(1609459200000)/"
        assert to_sap_date("/Date(1609459200000)/") == "/Date(1609459200000)/"
        assert to_sap_date("") == ""
        assert to_sap_date("someday") == "someday"
        assert to_sap_date(None) is None
