"""Command-line entry points."""

from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import argparse
import asyncio
import json
import logging
import os
import re
import uuid

from majorpredictor.config import Config, _parse_env_file
from majorpredictor.exceptions import (
    ConfigurationError,
    EmptyCompletionError,
    PageLoadError,
    ProviderError,
)
from majorpredictor.extraction import ExtractionRules, PageExtractor
from majorpredictor.ingestion import PageLoader, is_url
from majorpredictor.ops import get_metrics_recorder
from majorpredictor.ops.logging import configure_logging
from majorpredictor.prediction import PredictionService
from majorpredictor.providers import CompletionClient
from majorpredictor.reporting import summarize_log, write_log_csv
from majorpredictor.schema import PASS_BUSY, PASS_ERROR, MatchDescriptor, PassSummary
from majorpredictor.engine import PredictionSession
from majorpredictor.storage import PredictionLogStore, SettingsStore

logger = logging.getLogger(__name__)


def _try_load_dotenv(directory: Path) -> Optional[str]:
    """Copy ``.env`` values into the environment without overriding it."""
    env_path = directory / ".env"
    if not env_path.exists():
        return None
    try:
        values = _parse_env_file(env_path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", env_path, exc)
        return None
    for key, value in values.items():
        os.environ.setdefault(key, value)
    return str(env_path)


def _load_config(config_path: Optional[str]) -> Config:
    if not config_path:
        _try_load_dotenv(Path.cwd())
    return Config.load(config_path)


def _build_service(config: Config) -> PredictionService:
    return PredictionService.from_config(config)


def _page_slug(source: str) -> str:
    name = source.rstrip("/").rsplit("/", 1)[-1] if is_url(source) else Path(source).stem
    slug = re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-").lower()
    return slug or "page"


def _default_output_path(config: Config, source: str) -> Path:
    return Path(config.data_dir) / "pages" / f"{_page_slug(source)}.annotated.html"


def _group_by_round(descriptors: Sequence[MatchDescriptor]) -> "OrderedDict[str, List[MatchDescriptor]]":
    groups: "OrderedDict[str, List[MatchDescriptor]]" = OrderedDict()
    for descriptor in sorted(descriptors, key=lambda d: d.round_index):
        groups.setdefault(descriptor.round, []).append(descriptor)
    return groups


def _print_summary(summary: PassSummary) -> None:
    if summary.status == PASS_BUSY:
        print("A prediction pass is already running.")
        return
    if summary.status == PASS_ERROR:
        print("No matches found on this page.")
        return
    if summary.nothing_to_do:
        print("Nothing to predict: every match on the page already has a prediction.")
        return
    print(f"{summary.round}: {summary.predicted} predicted, {summary.failed} failed.")
    if summary.next_round:
        print(f"Next: {summary.next_round} ({summary.remaining} matches remaining)")
    else:
        print("All rounds predicted.")


def _prompt_next_round(label: str) -> bool:
    try:
        input(f"Press Enter to predict {label} (Ctrl-D to stop)... ")
    except EOFError:
        print()
        return False
    return True


def _log_metrics() -> None:
    recorder = get_metrics_recorder()
    snapshot = recorder.snapshot()
    if snapshot.get("counters") or snapshot.get("timings"):
        logger.info("Run metrics: %s", recorder.prediction_summary())
        logger.debug("Metrics: %s", json.dumps(snapshot, sort_keys=True))


# =============================================================================
# predict / scan
# =============================================================================

async def _drive_rounds(session: PredictionSession, rounds: Optional[int], ask_first: bool) -> int:
    loop = asyncio.get_running_loop()
    passes = 0
    label = "the first round"
    while True:
        if rounds is not None and passes >= rounds:
            break
        if rounds is None and (passes > 0 or ask_first):
            proceed = await loop.run_in_executor(None, _prompt_next_round, label)
            if not proceed:
                break
        summary = await session.predict_next_round()
        passes += 1
        _print_summary(summary)
        if summary.status == PASS_ERROR:
            return 1
        if summary.next_round is None:
            break
        label = summary.next_round
    return 0


def run_predict(
    source: str,
    config_path: Optional[str] = None,
    output_path: Optional[str] = None,
    rounds: Optional[int] = None,
    assume_yes: bool = False,
) -> int:
    """Predict a bracket page one round at a time and write the annotated page."""
    config = _load_config(config_path)
    configure_logging(uuid.uuid4().hex[:8])
    if config_path:
        logger.info("Loaded config from %s", config_path)
    logger.debug("Config: %s", json.dumps(config.to_dict(), sort_keys=True))
    settings = SettingsStore(config.data_dir).load()

    if not settings.completion_api_key:
        print("API key not configured. Run: majorpredictor settings set completionApiKey=<key>")
        return 1
    print(f"API key configured. Model: {settings.model_id}")

    try:
        document = PageLoader(config.user_agent, timeout=config.page_timeout).fetch_and_parse(source)
    except PageLoadError as exc:
        print(str(exc))
        return 1

    session = PredictionSession.from_config(
        document,
        settings,
        config,
        service=_build_service(config),
    )
    get_metrics_recorder().reset()
    ask_first = not (settings.auto_predict or assume_yes)
    try:
        exit_code = asyncio.run(_drive_rounds(session, rounds, ask_first))
    except ConfigurationError as exc:
        print(str(exc))
        return 1
    finally:
        _log_metrics()

    output = session.renderer.save(output_path or str(_default_output_path(config, source)))
    print(f"Annotated page: {output}")
    return exit_code


def run_scan(source: str, config_path: Optional[str] = None) -> int:
    """List matches found on a page, grouped by round, without calling any provider."""
    config = _load_config(config_path)
    configure_logging()
    try:
        document = PageLoader(config.user_agent, timeout=config.page_timeout).fetch_and_parse(source)
    except PageLoadError as exc:
        print(str(exc))
        return 1

    descriptors = PageExtractor(ExtractionRules.from_config(config)).scan(document)
    if not descriptors:
        print("No matches found on this page.")
        return 0
    for round_label, matches in _group_by_round(descriptors).items():
        print(f"{round_label}:")
        for descriptor in matches:
            print(f"  {descriptor.team1} vs {descriptor.team2}  [{descriptor.match_type}, {descriptor.tournament}]")
    print(f"{len(descriptors)} matches found.")
    return 0


# =============================================================================
# settings / test-api
# =============================================================================

def _parse_assignments(pairs: Sequence[str]) -> Dict[str, str]:
    values = {}
    for pair in pairs:
        if "=" not in pair:
            raise ConfigurationError(pair, "expected KEY=VALUE")
        key, value = pair.split("=", 1)
        values[key.strip()] = value.strip()
    return values


def run_settings(action: str, assignments: Sequence[str] = (), config_path: Optional[str] = None) -> int:
    config = _load_config(config_path)
    store = SettingsStore(config.data_dir)
    try:
        if action == "set":
            if not assignments:
                print("Nothing to set. Usage: majorpredictor settings set KEY=VALUE ...")
                return 1
            store.set(_parse_assignments(assignments))
            print("Settings saved.")
        for key, value in store.describe().items():
            print(f"{key} = {value}")
    except ConfigurationError as exc:
        print(str(exc))
        return 1
    return 0


def run_test_api(config_path: Optional[str] = None) -> int:
    """Send a fixed prompt to the completion provider and report the outcome."""
    config = _load_config(config_path)
    configure_logging()
    settings = SettingsStore(config.data_dir).load()
    if not settings.completion_api_key:
        print("API key not configured. Run: majorpredictor settings set completionApiKey=<key>")
        return 1

    client = CompletionClient.from_config(config)
    try:
        reply = asyncio.run(client.test_connection(settings.completion_api_key, settings.model_id))
    except (ProviderError, EmptyCompletionError) as exc:
        print(f"API connection failed: {exc}")
        return 1
    print(f"API connection successful ({settings.model_id}): {reply}")
    return 0


# =============================================================================
# logs
# =============================================================================

def run_logs(
    action: str,
    config_path: Optional[str] = None,
    limit: Optional[int] = None,
    output_path: Optional[str] = None,
) -> int:
    config = _load_config(config_path)
    store = PredictionLogStore(config.data_dir)

    if action == "clear":
        count = store.clear()
        print(f"Cleared {count} log entries.")
        return 0

    entries = store.read(limit=limit if action == "show" else None)
    if action == "export":
        if not output_path:
            print("Missing --output for export")
            return 1
        written = write_log_csv(entries, output_path)
        print(f"Exported {written} log entries to {output_path}")
        return 0

    if action == "summary":
        print(json.dumps(summarize_log(entries), indent=2, sort_keys=True))
        return 0

    if not entries:
        print("No predictions logged yet.")
        return 0
    for entry in entries:
        stamp = entry.timestamp.strftime("%Y-%m-%d %H:%M")
        if entry.error:
            print(f"{stamp}  {entry.round}  {entry.team1} vs {entry.team2}  ERROR: {entry.error}")
        else:
            print(
                f"{stamp}  {entry.round}  {entry.team1} vs {entry.team2}  "
                f"-> {entry.predicted_winner} ({entry.confidence}%, {entry.risk_level} risk)"
            )
    return 0


# =============================================================================
# Parser
# =============================================================================

def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="majorpredictor", description="Major Predictor CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    predict = subparsers.add_parser("predict", help="Predict a bracket page one round at a time")
    predict.add_argument("source", help="Bracket page URL or saved HTML file")
    predict.add_argument("--config", dest="config_path", help="Path to config file")
    predict.add_argument("--output", dest="output_path", help="Where to write the annotated page")
    predict.add_argument("--rounds", dest="rounds", type=_positive_int, help="Run N single-round passes without prompting")
    predict.add_argument("--yes", "-y", dest="assume_yes", action="store_true", help="Start the first pass without prompting")

    scan = subparsers.add_parser("scan", help="List matches found on a page")
    scan.add_argument("source", help="Bracket page URL or saved HTML file")
    scan.add_argument("--config", dest="config_path", help="Path to config file")

    settings = subparsers.add_parser("settings", help="Show or change settings")
    settings.add_argument("action", choices=["show", "set"])
    settings.add_argument("assignments", nargs="*", help="KEY=VALUE pairs for 'set'")
    settings.add_argument("--config", dest="config_path", help="Path to config file")

    test_api = subparsers.add_parser("test-api", help="Check the completion API key")
    test_api.add_argument("--config", dest="config_path", help="Path to config file")

    logs = subparsers.add_parser("logs", help="Review the prediction log")
    logs.add_argument("action", choices=["show", "summary", "export", "clear"])
    logs.add_argument("--limit", dest="limit", type=_positive_int, help="Show only the most recent N entries")
    logs.add_argument("--output", dest="output_path", help="CSV path for 'export'")
    logs.add_argument("--config", dest="config_path", help="Path to config file")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "predict":
        return run_predict(
            args.source,
            config_path=args.config_path,
            output_path=getattr(args, "output_path", None),
            rounds=getattr(args, "rounds", None),
            assume_yes=getattr(args, "assume_yes", False),
        )
    if args.command == "scan":
        return run_scan(args.source, config_path=args.config_path)
    if args.command == "settings":
        return run_settings(args.action, args.assignments, config_path=args.config_path)
    if args.command == "test-api":
        return run_test_api(config_path=args.config_path)
    if args.command == "logs":
        return run_logs(
            args.action,
            config_path=args.config_path,
            limit=getattr(args, "limit", None),
            output_path=getattr(args, "output_path", None),
        )

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
