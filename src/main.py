"""Main application entry point for slidecast.

Each subcommand is an independent stage working on the shared checkpoint in
the output directory:

    slidecast scenario   # ask Gemini for a scenario (once)
    slidecast images     # images, cut-outs and pivots per slide (resumable)
    slidecast speech     # narration audio and measured timeline
    slidecast status     # show progress
    slidecast clean      # remove generated state and artifacts
"""

import argparse
import asyncio
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from services.audio_probe import probe_duration
from services.image_generation_service import ImageGenerationService
from services.scenario_service import ScenarioService
from services.segmentation_service import SegmentationService
from services.tts_service import TTSService, create_speech_provider
from slide_pipeline.image_pipeline import ImagePipeline
from slide_pipeline.layout import WorkspaceLayout
from slide_pipeline.speech_pipeline import SpeechPipeline
from slide_pipeline.status import build_status
from utils.checkpoint import CheckpointStore
from utils.config import load_config, setup_logging, validate_config
from utils.errors import ConfigError, MissingPreconditionError, SlidecastError
from utils.logging import stage_context

logger = logging.getLogger(__name__)

console = Console()


def _require_valid_config(config: dict, stage: str) -> None:
    errors = validate_config(config, stage)
    if errors:
        raise MissingPreconditionError("; ".join(errors))


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )


def _print_slides(scenario, full_text: bool = False) -> None:
    for index, slide in enumerate(scenario.slides):
        text = slide.narration_text if full_text else slide.narration_text[:60] + "..."
        console.print(f"  {index + 1}. [cyan]{escape('[' + slide.slide_type + ']')}[/cyan] {escape(text)}")


def run_scenario(config: dict) -> None:
    """Generate the scenario once and store it in the checkpoint."""
    layout = WorkspaceLayout.from_config(config)
    store = CheckpointStore(layout.state_file)
    state = store.load()

    if state.scenario is not None:
        console.print("[yellow]Scenario already exists:[/yellow]")
        _print_slides(state.scenario)
        console.print("\n[dim]To generate a new one, run: slidecast clean --yes[/dim]")
        return

    _require_valid_config(config, "scenario")
    layout.ensure_dirs()

    console.print(f"[bold blue]Generating scenario[/bold blue] [dim]theme: {config['scenario_theme']}[/dim]")
    service = ScenarioService(config["gemini_api_key"], config["gemini_model"])
    scenario = service.generate(
        theme=config["scenario_theme"],
        slide_count=config["slide_count"],
        slide_duration=config["slide_duration"],
        narration_language=config["narration_language"],
    )

    state.scenario = scenario
    state.completed = False
    store.save(state)

    # Readable copy for reviewing the scenario; the checkpoint stays authoritative
    layout.scenario_file.write_text(
        json.dumps(scenario.to_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )

    console.print(f"[green]✓ Scenario saved[/green] [dim]({layout.state_file}, {layout.scenario_file})[/dim]")
    _print_slides(scenario, full_text=True)
    console.print("\n[dim]Next step: slidecast images[/dim]")


def run_images(config: dict) -> None:
    """Run the resumable image pass."""
    _require_valid_config(config, "images")
    layout = WorkspaceLayout.from_config(config)
    store = CheckpointStore(layout.state_file)
    state = store.load()

    timeout = config["command_timeout"]
    pipeline = ImagePipeline(
        layout=layout,
        image_service=ImageGenerationService(
            config["sd_command"],
            width=config["image_width"],
            height=config["image_height"],
            timeout=timeout,
        ),
        segmentation_service=SegmentationService(
            config["segmentation_command"],
            threshold=config["background_threshold"],
            timeout=timeout,
        ),
        store=store,
        fps=config["fps"],
        slide_duration=config["slide_duration"],
    )

    total = len(state.scenario.slides) if state.scenario else 0
    with _progress() as progress:
        task = progress.add_task("Generating slides...", total=total)

        def on_progress(done: int, count: int) -> None:
            progress.update(task, completed=done, total=count)

        timeline = pipeline.run(state, on_progress=on_progress)

    if timeline is None:
        console.print(f"[yellow]Images already generated.[/yellow] Timeline: {layout.timeline_file}")
        return

    console.print(f"[green]✓ Images generated for {len(timeline.slides)} slides[/green]")
    console.print(f"[dim]Timeline: {layout.timeline_file}[/dim]")
    console.print("\n[dim]Next step: slidecast speech[/dim]")


async def _run_speech_async(config: dict, state) -> None:
    layout = WorkspaceLayout.from_config(config)
    tts = TTSService(create_speech_provider(config))
    ffprobe = config["ffprobe_command"]
    pipeline = SpeechPipeline(
        layout=layout,
        tts_service=tts,
        probe=lambda path: probe_duration(path, ffprobe=ffprobe),
        fps=config["fps"],
    )

    try:
        with _progress() as progress:
            task = progress.add_task("Generating narration...", total=len(state.scenario.slides))

            def on_progress(done: int, count: int) -> None:
                progress.update(task, completed=done, total=count)

            timeline = await pipeline.run(state, on_progress=on_progress)
    finally:
        await tts.close()

    console.print(
        f"[green]✓ Narration complete[/green]: {len(timeline.slides)} slides, "
        f"total {timeline.total_duration:.2f}s"
    )
    console.print(f"[dim]Timeline: {layout.timeline_file}[/dim]")


def run_speech(config: dict) -> None:
    """Run the narration pass."""
    _require_valid_config(config, "speech")
    layout = WorkspaceLayout.from_config(config)
    store = CheckpointStore(layout.state_file)

    if not store.exists():
        raise MissingPreconditionError(
            f"{layout.state_file} not found. Run: slidecast scenario && slidecast images"
        )

    state = store.load()
    if state.scenario is None:
        raise MissingPreconditionError("No scenario in checkpoint. Run: slidecast scenario")

    engine = config["tts_engine"]
    voice = config["tts_voice"] if engine == "edge" else config["elevenlabs_voice_id"]
    console.print(f"[bold blue]Generating narration[/bold blue] [dim]engine: {engine}, voice: {voice}[/dim]")

    asyncio.run(_run_speech_async(config, state))


def show_status(config: dict) -> None:
    """Display checkpoint progress."""
    layout = WorkspaceLayout.from_config(config)
    store = CheckpointStore(layout.state_file)
    report = build_status(store.load(), checkpoint_exists=store.exists())

    if report.phase == "not_started":
        console.print("Preparation has not started yet.")
        console.print("[dim]Run: slidecast scenario[/dim]")
        return

    if report.phase == "completed":
        console.print("[green]✓ Asset preparation complete[/green]")
        console.print(f"[dim]Timeline: {layout.timeline_file}[/dim]")
        return

    if not report.has_scenario:
        console.print("Scenario: [yellow]not generated yet[/yellow]")
        return

    table = Table(title=f"Slides ({report.completed_count}/{report.slide_count} done)")
    table.add_column("#", justify="right")
    table.add_column("Status")
    table.add_column("Type", style="cyan")
    table.add_column("Narration")
    table.add_column("Pivot", justify="right")
    table.add_column("Size", justify="right")

    for row in report.slides:
        table.add_row(
            str(row.index + 1),
            "[green]✓[/green]" if row.done else "[yellow]…[/yellow]",
            row.slide_type,
            escape(row.preview) + "...",
            f"({row.pivot[0]:.0f}, {row.pivot[1]:.0f})" if row.pivot else "",
            f"{row.dimensions[0]}x{row.dimensions[1]}" if row.dimensions else "",
        )

    console.print(table)
    console.print("\n[dim]Run: slidecast images to continue[/dim]")


def clean(config: dict, confirm: bool = False) -> list[Path]:
    """Remove checkpoint, timeline and generated artifacts.

    Returns:
        Paths that were (or, without ``confirm``, would be) removed
    """
    layout = WorkspaceLayout.from_config(config)
    targets = [
        p for p in (layout.state_file, layout.timeline_file, layout.scenario_file, layout.audio_dir)
        if p.exists()
    ]
    if layout.temp_dir.exists():
        targets.extend(sorted(layout.temp_dir.glob("slide_*")))

    if not confirm:
        for path in targets:
            console.print(f"  would remove {path}")
        console.print("[dim]Re-run with --yes to delete[/dim]")
        return targets

    for path in targets:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
        logger.info(f"Removed {path}")

    console.print(f"[green]✓ Removed {len(targets)} paths[/green]")
    return targets


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slidecast",
        description="Resumable slide asset pipeline for short narrated videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  slidecast scenario        # Generate a scenario with Gemini
  slidecast images          # Generate images, cut-outs and pivots
  slidecast speech          # Generate narration and measured timeline
  slidecast status          # Show progress
  slidecast clean --yes     # Start over
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("scenario", help="Generate the scenario (no-op if one exists)")
    subparsers.add_parser("images", help="Generate slide images, cut-outs and pivots")
    subparsers.add_parser("speech", help="Generate narration audio and the measured timeline")
    subparsers.add_parser("status", help="Show checkpoint progress")
    clean_parser = subparsers.add_parser("clean", help="Remove generated state and artifacts")
    clean_parser.add_argument("--yes", action="store_true", help="Actually delete files")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    log_level = "DEBUG" if args.verbose else "INFO"
    try:
        config = load_config()
    except ConfigError as e:
        setup_logging(log_level, json_output=args.json_logs)
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    setup_logging(log_level, json_output=args.json_logs, log_file=config.get("log_file"))

    commands = {
        "scenario": run_scenario,
        "images": run_images,
        "speech": run_speech,
        "status": show_status,
        "clean": lambda cfg: clean(cfg, confirm=args.yes),
    }

    with stage_context(args.command):
        try:
            commands[args.command](config)
        except KeyboardInterrupt:
            logger.warning("Interrupted by user; checkpoint kept at last completed slide")
            return 130
        except SlidecastError as e:
            logger.error(f"{type(e).__name__}: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
