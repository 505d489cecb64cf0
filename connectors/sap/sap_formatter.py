"""SAP OData response formatter.

Converts raw API_PROFITCENTER_SRV response bodies into typed records.

Accepted body shapes (OData v2 JSON):
    {"d": {"results": [{...}, {...}]}}   entity collection
    {"d": {...}}                          single entity
"""

import json
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from connectors.sap.sap_client import SAPParseError
from connectors.sap.sap_models import (
    CompanyCodeAssignment,
    Header,
    Text,
    ToCompanyCodeAssignment,
    ToText,
)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _extract_entries(raw: bytes) -> List[Dict[str, Any]]:
    """Unwrap the OData v2 envelope into a list of entity dicts."""
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SAPParseError(f"Response is not valid JSON: {e}", response_body=_preview(raw))

    if not isinstance(payload, dict):
        raise SAPParseError("Response is not a JSON object", response_body=_preview(raw))

    if "error" in payload:
        error = payload["error"]
        if not isinstance(error, dict):
            raise SAPParseError(f"OData error: {error}", response_body=_preview(raw))
        message = error.get("message", {})
        if isinstance(message, dict):
            message = message.get("value", "")
        raise SAPParseError(f"OData error {error.get('code', '')}: {message}", response_body=_preview(raw))

    data = payload.get("d")
    if not isinstance(data, dict):
        raise SAPParseError("Response has no OData 'd' envelope", response_body=_preview(raw))

    if "results" in data:
        results = data["results"]
        if not isinstance(results, list):
            raise SAPParseError("OData 'results' is not a list", response_body=_preview(raw))
        return results

    return [data]


def _preview(raw: Any, limit: int = 500) -> str:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    return str(raw)[:limit]


def convert_records(raw: bytes, model: Type[RecordT]) -> List[RecordT]:
    """Parse a response body into a list of ``model`` records.

    Raises:
        SAPParseError: Body is not OData JSON or an entry does not match ``model``
    """
    records = []
    for index, entry in enumerate(_extract_entries(raw)):
        if not isinstance(entry, dict):
            raise SAPParseError(f"{model.__name__} entry {index} is not an object")
        try:
            records.append(model.model_validate(entry))
        except ValidationError as e:
            raise SAPParseError(f"{model.__name__} entry {index} is invalid: {e}")
    return records


def convert_to_header(raw: bytes) -> List[Header]:
    return convert_records(raw, Header)


def convert_to_company_code_assignment(raw: bytes) -> List[CompanyCodeAssignment]:
    return convert_records(raw, CompanyCodeAssignment)


def convert_to_text(raw: bytes) -> List[Text]:
    return convert_records(raw, Text)


def convert_to_to_company_code_assignment(raw: bytes) -> List[ToCompanyCodeAssignment]:
    return convert_records(raw, ToCompanyCodeAssignment)


def convert_to_to_text(raw: bytes) -> List[ToText]:
    return convert_records(raw, ToText)
