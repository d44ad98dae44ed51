from __future__ import annotations

import argparse
import logging
from typing import Sequence

from config import config
from domain.valuation import OrganizationId
from scheduler import run_schedule
from services.tvl_service import TvlService, build_default_service

logger = logging.getLogger(__name__)


def print_latest(service: TvlService, organization_id: str | None) -> None:
    if organization_id is None:
        latest = service.latest_fleet_valuation()
        label = "Fleet"
    else:
        latest = service.latest_organization_valuation(OrganizationId(organization_id))
        label = f"Organization {organization_id}"

    if latest is None:
        print(f"{label} TVL: unavailable")
        return
    print(f"{label} TVL: {latest.total_value_usd} USD (computed at {latest.computed_at.isoformat()})")


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("api.api:app", host=host, port=port)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Compute and inspect treasury TVL of governance organizations.")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("fleet", help="Recompute the fleet-wide TVL.")
    org_parser = subparsers.add_parser("organization", help="Compute the TVL of one organization root.")
    org_parser.add_argument("organization_id")
    latest_parser = subparsers.add_parser("latest", help="Print the latest stored TVL.")
    latest_parser.add_argument("--organization", default=None)
    schedule_parser = subparsers.add_parser("schedule", help="Run the periodic TVL update loop.")
    schedule_parser.add_argument("--cadence", choices=("monthly", "daily"), default=None)
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=3000)
    args = parser.parse_args(argv)

    if args.command == "serve":
        serve(args.host, args.port)
        return

    settings = config()
    service = build_default_service(settings)
    if args.command == "fleet":
        total = service.recompute_fleet()
        print(f"Fleet TVL: {total} USD")
    elif args.command == "organization":
        total = service.recompute_organization(OrganizationId(args.organization_id))
        print(f"Organization {args.organization_id} TVL: {total} USD")
    elif args.command == "latest":
        print_latest(service, args.organization)
    elif args.command == "schedule":
        run_schedule(service, args.cadence or settings.schedule_cadence)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    main()
