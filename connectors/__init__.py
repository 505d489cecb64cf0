"""ERP Connectors.

This package contains the SAP API_PROFITCENTER_SRV reader:
- Request header setup and HTTP communication (sap_client)
- OData response formatting (sap_formatter)
- Concurrent fan-out over the requested resources (sap_caller)
"""
