from pathlib import Path
from typing import List, Optional

import typer

from .assets import AssetStatusOverlay, ImageAsset, ScanError, UsageFinder, scan_directory
from .config import PRIMARY_STRATEGIES, AnalysisSettings
from .logging import get_logger
from .similarity import AnalysisResult, ClusteringError, analyze

app = typer.Typer(help="AssetLens – find visually similar assets in Xcode projects", no_args_is_help=True)


def safe_echo(message: str) -> None:
    """Echo message with an ASCII fallback for consoles that cannot encode it."""
    try:
        typer.echo(message)
    except UnicodeEncodeError:
        typer.echo(message.encode("ascii", errors="replace").decode("ascii"))


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("bytes", "KB", "MB"):
        if value < 1000:
            return f"{value:.0f} {unit}" if unit == "bytes" else f"{value:.1f} {unit}"
        value /= 1000
    return f"{value:.1f} GB"


class _ProgressLogger:
    """Log comparison progress at quarter steps."""

    def __init__(self, logger) -> None:
        self._logger = logger
        self._next_step = 0.25

    def __call__(self, fraction: float) -> None:
        while fraction >= self._next_step and self._next_step <= 1.0:
            self._logger.info(f"Compared {self._next_step:.0%} of asset pairs")
            self._next_step += 0.25


@app.command()
def scan(
    project_path: Path = typer.Argument(..., help="Path to Xcode project or .xcassets catalog"),
    threshold: float = typer.Option(0.15, "--threshold", "-t", help="Similarity threshold (0-1, lower is more similar)"),
    min_size: int = typer.Option(1, "--min-size", help="Minimum file size in KB to consider"),
    usage_check: bool = typer.Option(False, "--usage-check", "-u", help="Check for unused assets"),
    strategy: str = typer.Option("first-seen", "--strategy", help=f"Primary selection: {', '.join(PRIMARY_STRATEGIES)}"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Threads used to fingerprint assets"),
    verbose: bool = typer.Option(False, "--verbose", help="Include similarity scores"),
    strict: bool = typer.Option(False, "--strict", help="Exit with error code if similar assets are found"),
) -> None:
    """
    Scan a project for visually similar image assets.

    Groups each primary asset with the assets within THRESHOLD distance of it
    and, with --usage-check, flags assets that no source file references.
    """
    logger = get_logger(__name__)

    try:
        settings = AnalysisSettings(
            threshold=threshold,
            min_size_kb=min_size,
            usage_check=usage_check,
            primary_strategy=strategy,
            max_workers=workers,
        ).validate()
    except ValueError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=2) from exc

    root = project_path.expanduser()
    logger.info(f"Scanning {root}...")
    try:
        assets = scan_directory(root, min_size_kb=settings.min_size_kb)
    except ScanError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=2) from exc

    if not assets:
        safe_echo(f"No image assets found at {root}")
        raise typer.Exit(code=1)

    logger.info(f"Found {len(assets)} assets to analyze")

    overlay = AssetStatusOverlay()
    if settings.usage_check:
        UsageFinder().apply(overlay, assets, root)

    try:
        result = analyze(
            assets,
            settings.threshold,
            _ProgressLogger(logger),
            strategy=settings.primary_strategy,
            max_workers=settings.max_workers,
        )
    except ClusteringError as exc:
        logger.error(f"Analysis failed: {exc}")
        raise typer.Exit(code=1) from exc

    for path, error in result.failures.items():
        logger.warning(f"Skipped {path}: {error.reason}")

    _print_summary(result, assets, overlay, verbose)

    if strict and result.groups:
        raise typer.Exit(code=1)


def _print_summary(
    result: AnalysisResult,
    assets: List[ImageAsset],
    overlay: AssetStatusOverlay,
    verbose: bool,
) -> None:
    def unused_tag(asset: ImageAsset) -> str:
        return " - UNUSED" if overlay.is_unused(asset) else ""

    if not result.groups:
        safe_echo("✅ No similar assets found")
    else:
        safe_echo(f"\n🔍 Found {len(result.groups)} group(s) of similar assets:\n")
        for index, group in enumerate(result.groups, start=1):
            safe_echo(f"Group {index}:")
            safe_echo(f"  Primary: {group.primary.display_name}{unused_tag(group.primary)}")
            for asset, distance in group.similar:
                score = f" (distance: {distance:.2f})" if verbose else ""
                safe_echo(f"  Similar: {asset.display_name}{score}{unused_tag(asset)}")
            safe_echo(f"  Total size: {format_bytes(group.total_size)}")
            safe_echo(f"  Potential savings: {format_bytes(group.potential_savings)}")
            if overlay.all_unused(group):
                safe_echo(f"  💡 All assets in this group are unused - {format_bytes(group.total_size)} can be freed")
            safe_echo("")

        total_savings = sum(group.potential_savings for group in result.groups)
        safe_echo(f"💡 Total potential savings from duplicates: {format_bytes(total_savings)}")

    unused = overlay.unused_assets(assets)
    if unused:
        grouped = set(result.grouped_assets())
        standalone = sorted((a for a in unused if a not in grouped), key=lambda a: a.display_name)
        safe_echo(f"\n🗑️ Found {len(unused)} potentially unused asset(s)")
        for asset in standalone:
            safe_echo(f"  • {asset.display_name} ({format_bytes(asset.file_size)})")
        safe_echo(f"🎯 Total space used by unused assets: {format_bytes(sum(a.file_size for a in unused))}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
