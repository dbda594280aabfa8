"""NFT scanner main entry point."""

import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from nftscan.chain.rpc import RpcClient
from nftscan.core.config import Settings, get_settings
from nftscan.core.logging import get_logger, setup_logging
from nftscan.ipfs.http import GatewayFetcher
from nftscan.scan.models import ContractHandle, StandardKind, TokenMetadataRecord
from nftscan.scan.orchestrator import ScanOrchestrator
from nftscan.shared.exceptions import ConfigError, TotalSupplyError

logger = get_logger(__name__)


def build_report(
    contract: ContractHandle,
    standard: StandardKind | None,
    records: list[TokenMetadataRecord],
) -> dict[str, Any]:
    """Build the JSON-serializable scan report.

    Args:
        contract: Scanned contract
        standard: Detected token standard
        records: Resolved token records

    Returns:
        Report dictionary
    """
    return {
        "contract": contract.address,
        "standard": standard.value if standard else None,
        "total_scanned": len(records),
        "tokens": [record.model_dump(mode="json") for record in records],
    }


def write_report(report: dict[str, Any], output_path: str) -> None:
    """Write the report to a file, or stdout when no path is configured."""
    text = json.dumps(report, indent=2)
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        logger.info("scan.report.written", path=str(path), tokens=report["total_scanned"])
    else:
        print(text)


async def main(settings: Settings) -> int:
    """Run one scan with the given settings.

    Args:
        settings: Loaded settings

    Returns:
        Process exit code
    """
    try:
        contract = ContractHandle(address=settings.contract_address, rpc_url=settings.rpc_url)
    except ValidationError as e:
        raise ConfigError(f"Invalid CONTRACT_ADDRESS: {e.errors()[0]['msg']}") from e

    resolver_config = settings.resolver_config()
    scan_config = settings.scan_config()

    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler(sig: int) -> None:
        logger.info("application.signal.received", signal=signal.Signals(sig).name)
        cancel_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):

        def make_handler(s: int = sig) -> None:
            signal_handler(s)

        loop.add_signal_handler(sig, make_handler)

    async with RpcClient(settings.rpc_url, timeout=resolver_config.request_timeout) as reader:
        async with GatewayFetcher() as fetcher:
            orchestrator = ScanOrchestrator.create(reader, fetcher, resolver_config, scan_config)
            try:
                records = await orchestrator.scan(
                    contract,
                    token_ids=settings.token_id_list,
                    cancel_event=cancel_event,
                )
            except TotalSupplyError as e:
                logger.error("scan.aborted", contract=contract.short_address, error=str(e))
                return 1

    write_report(build_report(contract, orchestrator.standard, records), settings.output_path)
    return 0


def run() -> None:
    """Entry point for running a scan."""
    try:
        # Load settings first to validate configuration
        settings = get_settings()

        setup_logging(log_level=settings.log_level)

        sys.exit(asyncio.run(main(settings)))

    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
