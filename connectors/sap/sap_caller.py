"""SAP Profit Center API caller.

Fans out one concurrent fetch per requested resource and logs each result:

    Header                 A_ProfitCenter (+ to_CompanyCode / to_Text follow-ups)
    CompanyCodeAssignment  A_PrftCtrCompanyCodeAssignment
    ProfitCenterName       A_ProfitCenterText

A failing fetch is logged and ends only its own branch; the fan-out as a whole
never raises.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from connectors.sap.sap_client import (
    SAPApiError,
    SAPEmptyResultError,
    SAPRequestClient,
)
from connectors.sap.sap_formatter import (
    convert_to_company_code_assignment,
    convert_to_header,
    convert_to_text,
    convert_to_to_company_code_assignment,
    convert_to_to_text,
)
from connectors.sap.sap_models import ProfitCenterKey, ProfitCenterTextKey
from core.observability.logging import CorrelatedLogger, get_logger, with_correlation

SERVICE_NAME = "API_PROFITCENTER_SRV"

HEADER = "Header"
COMPANY_CODE_ASSIGNMENT = "CompanyCodeAssignment"
PROFIT_CENTER_NAME = "ProfitCenterName"
ALL = "All"

ALL_RESOURCES = (HEADER, COMPANY_CODE_ASSIGNMENT, PROFIT_CENTER_NAME)


def expand_accepter(accepter: Optional[Iterable[str]]) -> List[str]:
    """Expand an empty or "All"-containing request list to every resource.

    Other lists are returned as given; unknown names are left in place and
    skipped later by the caller.
    """
    names = list(accepter or [])
    if not names or ALL in names:
        return list(ALL_RESOURCES)
    return names


@dataclass
class BranchResult:
    """Outcome of one fetch (a top-level branch or a follow-up)."""
    resource: str
    ok: bool
    records: List[Any] = field(default_factory=list)
    error: Optional[Exception] = None
    follow_ups: List["BranchResult"] = field(default_factory=list)


def _odata_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class SAPAPICaller:
    """Reads Profit Center master data from API_PROFITCENTER_SRV.

    Usage:
        caller = SAPAPICaller(config.base_url(), client)
        await caller.async_get_profit_center(key, text_key, ["Header"])
    """

    def __init__(
        self,
        base_url: str,
        request_client: SAPRequestClient,
        log: Optional[CorrelatedLogger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.request_client = request_client
        self.log = log or get_logger(__name__)

    # =========================================================================
    # Fan-out
    # =========================================================================

    async def async_get_profit_center(
        self,
        key: ProfitCenterKey,
        text_key: ProfitCenterTextKey,
        accepter: Iterable[str],
    ) -> List[BranchResult]:
        """Run one concurrent fetch per requested resource and wait for all.

        Unknown resource names are skipped. Results come back in request order.
        """
        branches: Dict[str, Callable[[], Any]] = {
            HEADER: lambda: self.header(key),
            COMPANY_CODE_ASSIGNMENT: lambda: self.company_code_assignment(key),
            PROFIT_CENTER_NAME: lambda: self.profit_center_name(text_key),
        }

        names = []
        tasks = []
        for name in accepter:
            branch = branches.get(name)
            if branch is None:
                self.log.debug(f"Skipping unknown resource: {name}")
                continue
            names.append(name)
            tasks.append(asyncio.create_task(branch()))

        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self.log.error(
                    f"{name} failed unexpectedly: {type(outcome).__name__}: {outcome}",
                    extra_fields={"resource": name},
                )
                outcome = BranchResult(name, ok=False, error=outcome)
            results.append(outcome)
        return results

    # =========================================================================
    # Branches
    # =========================================================================

    async def header(self, key: ProfitCenterKey) -> BranchResult:
        """Fetch the header, then follow its company code and text links."""
        with with_correlation(
            resource=HEADER,
            controlling_area=key.controlling_area,
            profit_center=key.profit_center,
        ):
            try:
                data = await self._call_profit_center_srv_api(
                    "A_ProfitCenter",
                    self.get_query_with_header({}, key),
                    convert_to_header,
                )
                if not data:
                    raise SAPEmptyResultError(
                        f"No header found for ControllingArea={key.controlling_area} "
                        f"ProfitCenter={key.profit_center}"
                    )
            except SAPApiError as e:
                return self._failed(HEADER, e)

            result = self._succeeded(HEADER, data)

            # Only the first header's links are followed
            first = data[0]
            result.follow_ups.append(
                await self._follow_link(
                    "ToCompanyCodeAssignment",
                    first.to_CompanyCodeAssignment,
                    convert_to_to_company_code_assignment,
                )
            )
            result.follow_ups.append(
                await self._follow_link("ToText", first.to_Text, convert_to_to_text)
            )
            return result

    async def company_code_assignment(self, key: ProfitCenterKey) -> BranchResult:
        with with_correlation(
            resource=COMPANY_CODE_ASSIGNMENT,
            controlling_area=key.controlling_area,
            profit_center=key.profit_center,
        ):
            try:
                data = await self._call_profit_center_srv_api(
                    "A_PrftCtrCompanyCodeAssignment",
                    self.get_query_with_company_code_assignment({}, key),
                    convert_to_company_code_assignment,
                )
            except SAPApiError as e:
                return self._failed(COMPANY_CODE_ASSIGNMENT, e)
            return self._succeeded(COMPANY_CODE_ASSIGNMENT, data)

    async def profit_center_name(self, text_key: ProfitCenterTextKey) -> BranchResult:
        with with_correlation(resource=PROFIT_CENTER_NAME, language=text_key.language):
            try:
                data = await self._call_profit_center_srv_api(
                    "A_ProfitCenterText",
                    self.get_query_with_profit_center_name({}, text_key),
                    convert_to_text,
                )
            except SAPApiError as e:
                return self._failed(PROFIT_CENTER_NAME, e)
            return self._succeeded(PROFIT_CENTER_NAME, data)

    # =========================================================================
    # Requests
    # =========================================================================

    def entity_set_url(self, entity_set: str) -> str:
        return "/".join([self.base_url, SERVICE_NAME, entity_set])

    async def _call_profit_center_srv_api(
        self,
        entity_set: str,
        params: Dict[str, str],
        convert: Callable[[bytes], List[Any]],
    ) -> List[Any]:
        return await self._get(self.entity_set_url(entity_set), params, convert)

    async def _get(
        self,
        url: str,
        params: Dict[str, str],
        convert: Callable[[bytes], List[Any]],
    ) -> List[Any]:
        with with_correlation(url=url):
            response = await self.request_client.request("GET", url, params, None)
            return convert(response.body)

    async def _follow_link(
        self,
        resource: str,
        url: Optional[str],
        convert: Callable[[bytes], List[Any]],
    ) -> BranchResult:
        """GET a navigation link verbatim; failures end only this follow-up."""
        with with_correlation(resource=resource):
            if not url:
                return self._failed(resource, SAPApiError(f"Header has no {resource} link"))
            try:
                data = await self._get(url, {}, convert)
            except SAPApiError as e:
                return self._failed(resource, e)
            return self._succeeded(resource, data)

    # =========================================================================
    # Query builders
    # =========================================================================

    def get_query_with_header(self, params: Dict[str, str], key: ProfitCenterKey) -> Dict[str, str]:
        params = dict(params or {})
        params["$filter"] = (
            f"ControllingArea eq {_odata_literal(key.controlling_area)} "
            f"and ProfitCenter eq {_odata_literal(key.profit_center)}"
        )
        return params

    def get_query_with_company_code_assignment(
        self, params: Dict[str, str], key: ProfitCenterKey
    ) -> Dict[str, str]:
        params = dict(params or {})
        params["$filter"] = (
            f"ControllingArea eq {_odata_literal(key.controlling_area)} "
            f"and ProfitCenter eq {_odata_literal(key.profit_center)}"
        )
        return params

    def get_query_with_profit_center_name(
        self, params: Dict[str, str], text_key: ProfitCenterTextKey
    ) -> Dict[str, str]:
        params = dict(params or {})
        params["$filter"] = (
            f"Language eq {_odata_literal(text_key.language)} "
            f"and ProfitCenterName eq {_odata_literal(text_key.profit_center_name)}"
        )
        return params

    # =========================================================================
    # Logging
    # =========================================================================

    def _succeeded(self, resource: str, records: List[Any]) -> BranchResult:
        self.log.info(
            f"{resource}: {len(records)} record(s)",
            extra_fields={"records": [r.model_dump(mode="json") for r in records]},
        )
        return BranchResult(resource, ok=True, records=list(records))

    def _failed(self, resource: str, error: Exception) -> BranchResult:
        self.log.error(
            f"{resource} failed: {error}",
            extra_fields={
                "error_type": type(error).__name__,
                "status_code": getattr(error, "status_code", 0),
            },
        )
        return BranchResult(resource, ok=False, error=error)
