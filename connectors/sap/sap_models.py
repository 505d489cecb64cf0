"""SAP Profit Center data models.

These map to the API_PROFITCENTER_SRV OData v2 schema:
- A_ProfitCenter (Header)
- A_PrftCtrCompanyCodeAssignment (CompanyCodeAssignment)
- A_ProfitCenterText (Text)

Plus the lookup keys and the input descriptor (SDC) read by the entry point.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# SAP value conversion
# =============================================================================

_SAP_DATE_RE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")


def parse_sap_date(value: Any) -> Any:
    """Convert an OData v2 "/Date(<ms>)/" literal to a date.

    Values that are not SAP date literals are returned unchanged so pydantic
    can validate them (ISO strings, date objects, None).
    """
    if not isinstance(value, str):
        return value
    match = _SAP_DATE_RE.match(value.strip())
    if not match:
        return value or None
    millis = int(match.group(1))
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).date()
    except (OverflowError, OSError, ValueError) as e:
        # pydantic only reports ValueError as a validation error
        raise ValueError(f"SAP date out of range: {value}") from e


def to_sap_date(value: Any) -> Any:
    """Convert an ISO date (or date) to the "/Date(<ms>)/" form SAP expects.

    Already-converted values, blanks and unparseable strings are returned unchanged.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, str):
        if not value or _SAP_DATE_RE.match(value):
            return value
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    if isinstance(value, date):
        midnight = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return f"/Date({int(midnight.timestamp() * 1000)})/"
    return value


def _deferred_uri(value: Any) -> Any:
    """Extract the navigation link from an OData v2 {"__deferred": {"uri": ...}} object."""
    if isinstance(value, dict):
        deferred = value.get("__deferred")
        if isinstance(deferred, dict):
            return deferred.get("uri")
        return None
    return value


# =============================================================================
# Lookup keys
# =============================================================================

class ProfitCenterKey(BaseModel):
    """Identifies a profit center for Header and CompanyCodeAssignment lookups."""
    model_config = ConfigDict(frozen=True)

    controlling_area: str
    profit_center: str


class ProfitCenterTextKey(BaseModel):
    """Identifies a profit center text for the ProfitCenterName lookup."""
    model_config = ConfigDict(frozen=True)

    language: str
    profit_center_name: str


# =============================================================================
# API_PROFITCENTER_SRV Models
# =============================================================================

class SAPBaseModel(BaseModel):
    """Base model for SAP OData entities."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class SAPDatedModel(SAPBaseModel):
    """Entity with a ValidityEndDate key field."""
    ValidityEndDate: Optional[date] = Field(None, alias="ValidityEndDate")

    @field_validator("*", mode="before")
    @classmethod
    def convert_sap_dates(cls, value: Any, info) -> Any:
        annotation = cls.model_fields[info.field_name].annotation
        if annotation in (date, Optional[date]):
            return parse_sap_date(value)
        return value


class Header(SAPDatedModel):
    """Profit Center header.

    Maps to: /API_PROFITCENTER_SRV/A_ProfitCenter
    """
    ControllingArea: Optional[str] = Field(None, alias="ControllingArea")
    ProfitCenter: Optional[str] = Field(None, alias="ProfitCenter")
    ValidityStartDate: Optional[date] = Field(None, alias="ValidityStartDate")
    CreationDate: Optional[date] = Field(None, alias="CreationDate")
    EnteredByUser: Optional[str] = Field(None, alias="EnteredByUser")
    Department: Optional[str] = Field(None, alias="Department")
    ProfitCtrResponsiblePersonName: Optional[str] = Field(None, alias="ProfitCtrResponsiblePersonName")
    ProfitCtrResponsibleUser: Optional[str] = Field(None, alias="ProfitCtrResponsibleUser")
    CompanyCode: Optional[str] = Field(None, alias="CompanyCode")
    Segment: Optional[str] = Field(None, alias="Segment")
    ProfitCenterStandardHierarchy: Optional[str] = Field(None, alias="ProfitCenterStandardHierarchy")
    FormulaPlanningTemplate: Optional[str] = Field(None, alias="FormulaPlanningTemplate")
    Region: Optional[str] = Field(None, alias="Region")
    Country: Optional[str] = Field(None, alias="Country")
    CityName: Optional[str] = Field(None, alias="CityName")
    IsDeleted: Optional[bool] = Field(None, alias="IsDeleted")

    # Navigation links (only valid for the current fetch)
    to_CompanyCodeAssignment: Optional[str] = Field(None, alias="to_CompanyCode")
    to_Text: Optional[str] = Field(None, alias="to_Text")

    @field_validator("to_CompanyCodeAssignment", "to_Text", mode="before")
    @classmethod
    def navigation_uri(cls, value: Any) -> Any:
        return _deferred_uri(value)


class CompanyCodeAssignment(SAPDatedModel):
    """Profit Center company code assignment.

    Maps to: /API_PROFITCENTER_SRV/A_PrftCtrCompanyCodeAssignment
    """
    ControllingArea: Optional[str] = Field(None, alias="ControllingArea")
    ProfitCenter: Optional[str] = Field(None, alias="ProfitCenter")
    CompanyCode: Optional[str] = Field(None, alias="CompanyCode")


class Text(SAPDatedModel):
    """Profit Center localized text.

    Maps to: /API_PROFITCENTER_SRV/A_ProfitCenterText
    """
    Language: Optional[str] = Field(None, alias="Language")
    ControllingArea: Optional[str] = Field(None, alias="ControllingArea")
    ProfitCenter: Optional[str] = Field(None, alias="ProfitCenter")
    ProfitCenterName: Optional[str] = Field(None, alias="ProfitCenterName")
    ProfitCenterLongName: Optional[str] = Field(None, alias="ProfitCenterLongName")


class ToCompanyCodeAssignment(CompanyCodeAssignment):
    """Company code assignment reached through Header.to_CompanyCode."""


class ToText(Text):
    """Text reached through Header.to_Text."""


# =============================================================================
# Input descriptor (SDC)
# =============================================================================

class SDCText(SAPBaseModel):
    Language: str = Field(..., alias="Language")
    ProfitCenterName: str = Field(..., alias="ProfitCenterName")
    ProfitCenterLongName: Optional[str] = Field(None, alias="ProfitCenterLongName")


class SDCProfitCenter(SAPBaseModel):
    ControllingArea: str = Field(..., alias="ControllingArea")
    ProfitCenter: str = Field(..., alias="ProfitCenter")
    ValidityEndDate: Optional[str] = Field(None, alias="ValidityEndDate")
    ValidityStartDate: Optional[str] = Field(None, alias="ValidityStartDate")
    CreationDate: Optional[str] = Field(None, alias="CreationDate")
    CompanyCode: Optional[str] = Field(None, alias="CompanyCode")
    Text: SDCText = Field(..., alias="Text")

    @field_validator("ValidityEndDate", "ValidityStartDate", "CreationDate", mode="before")
    @classmethod
    def sap_date_format(cls, value: Any) -> Any:
        return to_sap_date(value)


class SDC(SAPBaseModel):
    """Input descriptor for one Profit Center read."""
    ConnectionKey: Optional[str] = Field(None, alias="connection_key")
    Result: Optional[bool] = Field(None, alias="result")
    RedisKey: Optional[str] = Field(None, alias="redis_key")
    Filepath: Optional[str] = Field(None, alias="filepath")
    ProfitCenter: SDCProfitCenter = Field(..., alias="ProfitCenter")
    Accepter: List[str] = Field(default_factory=list, alias="accepter")

    @field_validator("Accepter", mode="before")
    @classmethod
    def none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def profit_center_key(self) -> ProfitCenterKey:
        return ProfitCenterKey(
            controlling_area=self.ProfitCenter.ControllingArea,
            profit_center=self.ProfitCenter.ProfitCenter,
        )

    @property
    def text_key(self) -> ProfitCenterTextKey:
        return ProfitCenterTextKey(
            language=self.ProfitCenter.Text.Language,
            profit_center_name=self.ProfitCenter.Text.ProfitCenterName,
        )
