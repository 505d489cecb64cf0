#!/usr/bin/env python
"""Read SAP Profit Center master data and log the results.

Usage:
    # Set SAP_BASE_URL (and SAP_USER / SAP_PASSWORD) in the environment or .env
    python main.py
    python main.py --input Inputs/my_profit_center.json --accepter Header
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from connectors.sap import (
    FileReader,
    SAPAPICaller,
    SAPInputError,
    SAPRequestClient,
    expand_accepter,
)
from connectors.sap.sap_caller import BranchResult
from core.config import SAPConfig
from core.observability.logging import configure_logging, get_logger, with_correlation

logger = get_logger("main")


async def read_profit_center(
    config: SAPConfig,
    input_path: str,
    accepter_override: Optional[List[str]] = None,
) -> List[BranchResult]:
    """Read the input descriptor and run every requested fetch once."""
    sdc = FileReader().read_sdc(input_path)
    accepter = expand_accepter(accepter_override if accepter_override else sdc.Accepter)

    async with SAPRequestClient(config) as client:
        caller = SAPAPICaller(config.base_url(), client)
        with with_correlation(run_id=sdc.RedisKey or sdc.ConnectionKey):
            logger.info(f"Requesting: {', '.join(accepter)}")
            return await caller.async_get_profit_center(sdc.profit_center_key, sdc.text_key, accepter)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    parser = argparse.ArgumentParser(description="Read SAP Profit Center master data")
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Path to the input descriptor (default: SAP_INPUT_PATH or the bundled sample)",
    )
    parser.add_argument(
        "--accepter",
        nargs="+",
        default=None,
        help="Resources to fetch: Header, CompanyCodeAssignment, ProfitCenterName or All",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    try:
        config = SAPConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(
        level=args.log_level or config.log_level,
        json_format=args.json_logs or config.log_json,
        force=True,
    )

    try:
        asyncio.run(read_profit_center(config, args.input or config.input_path, args.accepter))
    except SAPInputError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
