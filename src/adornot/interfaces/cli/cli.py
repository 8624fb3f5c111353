from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TextIO

import httpx
import structlog
from pydantic import ValidationError

from adornot.application.orchestrator import BatchProbeOrchestrator, ProgressCallback
from adornot.application.use_cases import (
    PiholeConnectionCheckUseCase,
    ReachabilityTestUseCase,
)
from adornot.domain.entities.blocklist import BlocklistFetchError, DomainRegistryError
from adornot.domain.entities.probing import Category, Domain, ProbeProgress
from adornot.infrastructure.blocklist import PiholeBlocklistFetcher
from adornot.infrastructure.config import AppConfig, load_config
from adornot.infrastructure.export import render_json_report, render_text_report
from adornot.infrastructure.logging.setup import configure_logging, shutdown_logging
from adornot.infrastructure.probing import (
    HttpDomainProber,
    HttpxProbeTransport,
    build_probe_client,
)
from adornot.infrastructure.registry import load_domain_registry, select_categories

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def _parse_categories(raw: str) -> list[Category]:
    """Parse ``Ads,Analytics`` (case-insensitive) into categories."""
    by_name = {c.value.lower(): c for c in Category.standard()}
    by_name.update({c.name.lower(): c for c in Category.standard()})
    result: list[Category] = []
    for token in (t.strip().lower() for t in raw.split(",")):
        if not token:
            continue
        if token not in by_name:
            choices = ", ".join(c.value for c in Category.standard())
            raise argparse.ArgumentTypeError(
                f"unknown category {token!r} (choose from: {choices})"
            )
        result.append(by_name[token])
    return result


def _add_pihole_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--pihole-host",
        default=None,
        help="Pi-hole address (overrides ADORNOT_PIHOLE_HOST).",
    )
    parser.add_argument(
        "--pihole-password",
        default=None,
        help="Pi-hole web password (prefer ADORNOT_PIHOLE_PASSWORD).",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="adornot",
        description="Measure how many ad and tracking domains your network blocks.",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Probe domains and print a report.")
    run.add_argument(
        "--mode",
        default="standard",
        choices=["standard", "pihole"],
        help="'pihole' adds a sample of domains from the Pi-hole's blocklists.",
    )
    run.add_argument(
        "--categories",
        default=None,
        type=_parse_categories,
        help="Comma-separated curated categories to test (default: all).",
    )
    run.add_argument(
        "--registry",
        default=None,
        help="YAML domain registry (default: bundled list).",
    )
    run.add_argument(
        "--max-concurrency",
        default=None,
        type=int,
        help="Probes launched together per chunk.",
    )
    run.add_argument(
        "--sample-size",
        default=None,
        type=int,
        help="Number of blocklist domains to test in pihole mode.",
    )
    run.add_argument(
        "--format",
        dest="output_format",
        default="text",
        choices=["text", "json"],
        help="Report format.",
    )
    run.add_argument(
        "--output",
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    run.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print per-probe progress to stderr.",
    )
    _add_pihole_args(run)

    check = sub.add_parser("pihole-check", help="Verify Pi-hole address and password.")
    _add_pihole_args(check)

    domains = sub.add_parser("domains", help="List the curated domains.")
    domains.add_argument("--categories", default=None, type=_parse_categories)
    domains.add_argument("--registry", default=None)

    return parser.parse_args(argv)


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect flags that were given into flat config override keys."""
    flat = {
        "log_level": args.log_level,
        "log_format": args.log_format,
        "pihole_host": getattr(args, "pihole_host", None),
        "pihole_password": getattr(args, "pihole_password", None),
        "pihole_sample_size": getattr(args, "sample_size", None),
        "probe_max_concurrency": getattr(args, "max_concurrency", None),
        "domains_registry_path": getattr(args, "registry", None),
        "domains_categories": getattr(args, "categories", None),
    }
    return {key: value for key, value in flat.items() if value is not None}


def _curated_domains(config: AppConfig) -> list[Domain]:
    domains = load_domain_registry(config.domains.registry_path)
    return select_categories(domains, config.domains.categories)


def _pihole_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            config.pihole.request_timeout_seconds,
            read=config.pihole.resource_timeout_seconds,
        ),
    )


def _pihole_fetcher(
    config: AppConfig, http_client: httpx.AsyncClient
) -> PiholeBlocklistFetcher:
    host = config.pihole.host
    password = config.pihole.password
    if not host or password is None:
        raise BlocklistFetchError(
            "Pi-hole host and password are required "
            "(--pihole-host/--pihole-password or ADORNOT_PIHOLE_*)."
        )
    return PiholeBlocklistFetcher(
        http_client,
        host,
        password.get_secret_value(),
        download_concurrency=config.pihole.download_concurrency,
    )


def _progress_printer(stream: TextIO) -> ProgressCallback:
    def _on_progress(progress: ProbeProgress) -> None:
        status = "blocked" if progress.latest.blocked else "exposed"
        stream.write(
            f"[{progress.completed}/{progress.total}] "
            f"{progress.latest.domain.hostname}: {status}\n"
        )
        stream.flush()

    return _on_progress


def _install_sigint(cancel_event: asyncio.Event) -> bool:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        # Windows event loops have no signal handler support.
        return False
    return True


async def _run_test(
    config: AppConfig, args: argparse.Namespace, out: TextIO
) -> int:
    curated = _curated_domains(config)
    cancel_event = asyncio.Event()
    sigint_installed = _install_sigint(cancel_event)

    probe_client = build_probe_client(
        request_timeout=config.probe.request_timeout_seconds,
        user_agent=config.probe.user_agent,
        max_connections=config.probe.max_concurrency,
    )
    pihole_client = _pihole_client(config) if args.mode == "pihole" else None
    try:
        prober = HttpDomainProber(
            HttpxProbeTransport(
                probe_client,
                resource_timeout=config.probe.resource_timeout_seconds,
            )
        )
        fetcher = (
            _pihole_fetcher(config, pihole_client) if pihole_client is not None else None
        )
        use_case = ReachabilityTestUseCase(
            BatchProbeOrchestrator(prober, config.probe.max_concurrency),
            blocklist_fetcher=fetcher,
        )
        report = await use_case.execute(
            curated,
            mode=args.mode,
            sample_size=config.pihole.sample_size,
            on_progress=None if args.quiet else _progress_printer(sys.stderr),
            cancel_event=cancel_event,
        )
    finally:
        if sigint_installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
        await probe_client.aclose()
        if pihole_client is not None:
            await pihole_client.aclose()

    if args.output_format == "json":
        rendered = render_json_report(report)
    else:
        rendered = render_text_report(report)

    if args.output:
        Path(args.output).write_text(rendered, encoding="utf-8")
        log.info("report_written", path=args.output)
    else:
        out.write(rendered)

    return EXIT_CANCELLED if report.cancelled else EXIT_OK


async def _check_pihole(config: AppConfig, out: TextIO) -> int:
    async with _pihole_client(config) as client:
        await PiholeConnectionCheckUseCase(_pihole_fetcher(config, client)).execute()
    out.write("Pi-hole connection OK\n")
    return EXIT_OK


def _list_domains(config: AppConfig, out: TextIO) -> int:
    for domain in _curated_domains(config):
        out.write(f"{domain.category.value}\t{domain.provider}\t{domain.hostname}\n")
    return EXIT_OK


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Load config exactly once here, configure logging, then dispatch.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    try:
        config = load_config(
            config_path=config_path,
            dotenv_path=dotenv_path,
            cli_overrides=_cli_overrides(args),
        )
    except (ValidationError, ValueError, FileNotFoundError) as exc:
        # Logging is not configured yet; report on stderr only.
        sys.stderr.write(f"error: invalid configuration: {exc}\n")
        return EXIT_FAILURE

    configure_logging(config)
    out = sys.stdout
    try:
        if args.command == "run":
            return asyncio.run(_run_test(config, args, out))
        if args.command == "pihole-check":
            return asyncio.run(_check_pihole(config, out))
        return _list_domains(config, out)
    except (BlocklistFetchError, DomainRegistryError, FileNotFoundError) as exc:
        log.debug("command_failed", command=args.command, error=str(exc))
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_FAILURE
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(start())
