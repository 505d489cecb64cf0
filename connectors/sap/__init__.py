"""SAP Profit Center Connector Package.

Reads Profit Center master data from the SAP API_PROFITCENTER_SRV OData service.
"""

from connectors.sap.sap_caller import (
    SAPAPICaller,
    BranchResult,
    expand_accepter,
    ALL_RESOURCES,
)
from connectors.sap.sap_client import (
    SAPRequestClient,
    SAPResponse,
    SAPApiError,
    SAPTransportError,
    SAPParseError,
    SAPEmptyResultError,
)
from connectors.sap.sap_input_reader import FileReader, SAPInputError
from connectors.sap.sap_models import (
    ProfitCenterKey,
    ProfitCenterTextKey,
    Header,
    CompanyCodeAssignment,
    Text,
    ToCompanyCodeAssignment,
    ToText,
    SDC,
)

__all__ = [
    # Caller
    "SAPAPICaller",
    "BranchResult",
    "expand_accepter",
    "ALL_RESOURCES",
    # Client
    "SAPRequestClient",
    "SAPResponse",
    # Errors
    "SAPApiError",
    "SAPTransportError",
    "SAPParseError",
    "SAPEmptyResultError",
    "SAPInputError",
    # Input
    "FileReader",
    "SDC",
    # Models
    "ProfitCenterKey",
    "ProfitCenterTextKey",
    "Header",
    "CompanyCodeAssignment",
    "Text",
    "ToCompanyCodeAssignment",
    "ToText",
]
