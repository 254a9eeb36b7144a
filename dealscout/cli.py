import argparse
import asyncio
import sys
from typing import get_args

import httpx

from dealscout.adapters.api.client import DealsApiClient
from dealscout.adapters.api.deals import DealsReader
from dealscout.config.settings import SortBy, settings
from dealscout.core.orchestrator import ImportOrchestrator, ImportOutcome
from dealscout.core.poller import JobPoller
from dealscout.core.progress import LocalProgress, progress_percent, scrape_stage
from dealscout.core.runner import launch_import_background, wait_current_import
from dealscout.core.store import (
    SqliteKVStore,
    clear_user_location,
    get_user_location,
    set_user_location,
)
from dealscout.core.submitter import JobSubmitter
from dealscout.schemas.models import Deal


class ProgressPrinter:
    """Imprime el progreso sólo cuando el % sube al menos `min_step` o cambia el status."""

    def __init__(self, min_step: int | None = None, out=None):
        self.min_step = max(1, min_step or settings.PROGRESS_MIN_PCT_STEP)
        self.out = out or sys.stdout
        self._last_pct = -1
        self._last_status = None

    def __call__(self, progress: LocalProgress) -> None:
        if not progress.visible:
            self._last_pct = -1
            self._last_status = None
            return
        pct = progress_percent(progress, settings.PROGRESS_PLACEHOLDER_PCT)
        if pct < self._last_pct + self.min_step and progress.status == self._last_status:
            return
        self._last_pct = pct
        self._last_status = progress.status
        print(
            f"[{pct:3d}%] {scrape_stage(progress)} "
            f"({progress.completed_count}/{progress.total_count}, failed={progress.failed_count})",
            file=self.out,
        )


def format_deal(i: int, deal: Deal) -> str:
    price = f"${deal.price:.2f}" if deal.price is not None else "n/a"
    score = f"{deal.value_score:.1f}" if deal.value_score is not None else "-"
    return f"{i:2d}. {deal.restaurant_name or '?'} | {deal.item_name or '?'} | {price} | score {score}"


def print_deals(deals: list[Deal]) -> None:
    if not deals:
        print("(no deals)")
        return
    for i, deal in enumerate(deals, 1):
        print(format_deal(i, deal))


def build_orchestrator(store, reader: DealsReader, api: DealsApiClient) -> ImportOrchestrator:
    return ImportOrchestrator(
        JobSubmitter(api),
        JobPoller(api),
        reader,
        store,
        on_progress=ProgressPrinter(),
    )


async def _run_import(orchestrator, location, units, *, force: bool) -> ImportOutcome | None:
    # una sola corrida a la vez, igual que desde cualquier otro llamador
    if not await launch_import_background(orchestrator, location, units, force=force):
        return None
    return await wait_current_import()


def _cmd_import(args, store) -> int:
    location = args.location or get_user_location(store)
    if not location:
        print("[!] No location set: pass --location or run `dealscout location set <place>`.")
        return 2
    api = DealsApiClient()
    reader = DealsReader(api)
    orchestrator = build_orchestrator(store, reader, api)
    units = settings.UBER_RESTAURANTS if args.all_chains else settings.DEFAULT_RESTAURANTS

    outcome = asyncio.run(_run_import(orchestrator, location, units, force=args.force))
    if outcome is None:
        print("[!] An import is already running.")
        return 1
    if outcome.ok:
        print(f"[i] {outcome.message}")
    else:
        print(f"[!] {outcome.message}")
    if outcome.deals_error:
        print(f"[!] {outcome.deals_error}")
    else:
        print_deals(outcome.deals)
    return 0 if outcome.ok else 1


def _cmd_deals(args) -> int:
    reader = DealsReader(
        restaurant=args.restaurant, sort_by=args.sort_by, limit=args.limit, top=args.top
    )
    try:
        deals = asyncio.run(reader.reload())
    except (httpx.HTTPError, ValueError) as e:
        print(f"[!] Failed to load deals. Make sure the backend is running. ({e!r})")
        return 1
    print_deals(deals)
    return 0


def _cmd_location(args, store) -> int:
    if args.action == "set":
        if not args.value:
            print("[!] Missing location.")
            return 2
        set_user_location(store, " ".join(args.value))
    elif args.action == "clear":
        clear_user_location(store)
    print(get_user_location(store) or "(no location set)")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser("dealscout")
    sub = parser.add_subparsers(dest="cmd")

    p_imp = sub.add_parser("import", help="Import menus for the location and show the ranked deals")
    p_imp.add_argument("--location", help="Location (defaults to the saved one)")
    p_imp.add_argument(
        "--all-chains", action="store_true", help="Import every supported chain"
    )
    p_imp.add_argument(
        "--force", action="store_true", help="Import even if this location was already imported"
    )

    p_deals = sub.add_parser("deals", help="List ranked deals")
    p_deals.add_argument("--restaurant")
    p_deals.add_argument("--sort-by", choices=get_args(SortBy), default=settings.DEALS_SORT_BY)
    p_deals.add_argument("--limit", type=int, default=settings.DEALS_LIMIT)
    p_deals.add_argument(
        "--top", action="store_true", help="Best deals overall (ignores --restaurant and --sort-by)"
    )

    p_loc = sub.add_parser("location", help="Show, save or clear the user location")
    p_loc.add_argument("action", choices=["show", "set", "clear"], nargs="?", default="show")
    p_loc.add_argument("value", nargs="*")

    args = parser.parse_args(argv)

    try:
        if args.cmd == "import":
            return _cmd_import(args, SqliteKVStore())
        elif args.cmd == "deals":
            return _cmd_deals(args)
        elif args.cmd == "location":
            return _cmd_location(args, SqliteKVStore())
        else:
            parser.print_help()
            # código 2 suele indicar 'uso incorrecto de CLI'
            return 2
    except KeyboardInterrupt:
        print("\n[i] Interrupted by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
