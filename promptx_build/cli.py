"""Typer CLI for building prompt components outside the bundler."""
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import orjson
import typer

from .cache import CACHE_DIRNAME
from .config import load_options
from .errors import ConfigError, PromptxError
from .generator import SOURCE_SUFFIX
from .plugin import promptx_plugin
from .schema import BuildRecord, BuildSummary
from .store import CacheStore

# loading provider API keys from .env file
from dotenv import load_dotenv
load_dotenv()

app = typer.Typer(add_completion=False)


def _discover(root: Path) -> List[Path]:
    return sorted(
        p for p in root.rglob(f"*{SOURCE_SUFFIX}")
        if p.is_file() and CACHE_DIRNAME not in p.relative_to(root).parts
    )


async def _build_all(plugin, sources: List[Path]) -> List[BuildRecord]:
    outcomes = await asyncio.gather(
        *(plugin.pipeline.run(src) for src in sources),
        return_exceptions=True,
    )
    records = []
    for src, outcome in zip(sources, outcomes):
        if isinstance(outcome, PromptxError):
            records.append(BuildRecord(source_path=str(src), status="failed", error=str(outcome)))
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        records.append(BuildRecord(
            source_path=str(src),
            status="cached" if outcome.cached else "generated",
            checksum=outcome.checksum,
            artifact_path=outcome.artifact_path,
            latency_s=outcome.latency_s,
        ))
    return records


@app.command()
def build(
    root: str = typer.Argument(".", help="Directory to scan for .promptx files."),
    config: Optional[str] = typer.Option(None, help="Options YAML (defaults to config/promptx.yaml if present)."),
    model: Optional[str] = typer.Option(None, help="Override the litellm model id."),
    report: Optional[str] = typer.Option(None, help="Write a JSON build report to this path."),
    log_level: str = typer.Option("WARNING", help="Python logging level."),
):
    """Generate (or reuse cached) components for every prompt file under ROOT."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    started_at = datetime.now(timezone.utc)
    try:
        options = load_options(config, model=model)
        plugin = promptx_plugin(options)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    root_path = Path(root)
    sources = _discover(root_path)
    if not sources:
        typer.echo(f"No {SOURCE_SUFFIX} files under {root_path}")
    records = asyncio.run(_build_all(plugin, sources))

    for rec in records:
        if rec.status == "failed":
            typer.echo(f"FAILED     {rec.source_path}: {rec.error}")
        else:
            typer.echo(f"{rec.status:<10} {rec.source_path} -> {rec.artifact_path}")

    summary = BuildSummary(
        root=str(root_path),
        started_at=started_at,
        model=options.model,
        records=records,
        n_cached=sum(1 for r in records if r.status == "cached"),
        n_generated=sum(1 for r in records if r.status == "generated"),
        n_failed=sum(1 for r in records if r.status == "failed"),
    )
    if report:
        report_path = Path(report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_bytes(orjson.dumps(summary.model_dump(mode="json"), option=orjson.OPT_INDENT_2))
    typer.echo(
        f"Build complete: {summary.n_generated} generated, "
        f"{summary.n_cached} cached, {summary.n_failed} failed"
    )
    if summary.n_failed:
        raise typer.Exit(code=1)


@app.command("ls")
def list_cache(
    root: str = typer.Argument(".", help="Directory to scan for cache directories."),
):
    """List live cache entries below ROOT."""
    root_path = Path(root)
    cache_dirs = sorted(p for p in root_path.rglob(CACHE_DIRNAME) if p.is_dir())
    total = 0
    for cache_dir in cache_dirs:
        entries = asyncio.run(CacheStore(cache_dir).list_entries())
        for entry in entries:
            total += 1
            typer.echo(f"{entry.checksum}  {entry.created_at:%Y-%m-%d %H:%M:%S}  {entry.path}")
    typer.echo(f"{total} cache entr{'y' if total == 1 else 'ies'}")


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
