"""Command-line interface for chunkdup."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from chunkdup import __version__
from chunkdup.discovery import scan_paths
from chunkdup.exceptions import ConfigurationError, handle_error
from chunkdup.index import CorpusChunkIndex
from chunkdup.logging import StructuredLogger, setup_logging
from chunkdup.models import CLIConfig
from chunkdup.report import ScoreReport, scores_to_json, select_scores
from chunkdup.scoring import FileScore, score_corpus, score_paths
from chunkdup.similarity import DuplicationGraph
from chunkdup.types import DuplicateGroup, Strategy

__all__ = [
    "main",
    "parse_args",
]


def parse_args(argv: Optional[List[str]] = None) -> CLIConfig:
    """Parse command line arguments into unified config."""
    parser = argparse.ArgumentParser(
        description="Estimate how much of each file is duplicated elsewhere."
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"chunkdup {__version__}",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="Files or directories forming the corpus (default: .)",
    )
    parser.add_argument(
        "--include",
        action="append",
        metavar="GLOB",
        help="Only score paths matching this glob (repeatable)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        metavar="GLOB",
        help="Skip paths matching this glob (repeatable)",
    )
    parser.add_argument(
        "--no-noise",
        action="store_true",
        help="Skip config, lock, generated, vendored and documentation files",
    )
    parser.add_argument(
        "--hidden",
        action="store_true",
        help="Also scan hidden files and directories",
    )
    parser.add_argument(
        "--no-ignore",
        action="store_true",
        help="Do not apply .gitignore rules",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.INDEXED.value,
        help="Build one shared chunk index or rebuild it per file (default: indexed)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Maximum number of worker processes for parallel scoring",
    )
    parser.add_argument(
        "--top",
        type=int,
        help="Only show the N most duplicated files",
    )
    parser.add_argument(
        "--skip",
        type=int,
        metavar="N",
        help="Skip the first N results",
    )
    parser.add_argument(
        "--min-score",
        type=int,
        help="Only show files with at least this duplication percentage",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        metavar="PERCENT",
        help="Only show files scoring at least PERCENT%% of the top score (1-100)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Also list files without duplicated chunks",
    )
    parser.add_argument(
        "-s",
        "--summary",
        action="store_true",
        help="Aggregate the listed files by extension",
    )
    parser.add_argument(
        "--groups",
        action="store_true",
        help="Show groups of files sharing chunks",
    )
    parser.add_argument(
        "--group-threshold",
        type=float,
        default=0.5,
        help="Minimum chunk overlap for files to be grouped (default: 0.5)",
    )
    parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        default=False,
        help="Follow symbolic links when scanning",
    )
    parser.add_argument(
        "--no-follow-symlinks",
        action="store_false",
        dest="follow_symlinks",
        help="Do not follow symbolic links when scanning (default)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Path to log file (if not specified, only log to console)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Write the log file as JSON lines",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)
    try:
        return CLIConfig.from_args(args)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def run_scoring(
    config: CLIConfig, console: Console, paths: List[Path]
) -> Tuple[List[FileScore], Optional[CorpusChunkIndex]]:
    """Score the corpus, with a progress bar for table output.

    The shared index is returned when the strategy built one.
    """
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
        disable=config.output_format != "table",
    ) as progress:
        task = progress.add_task("Chunking files...", total=len(paths))

        def advance(done: int, total: int) -> None:
            progress.update(task, completed=done)

        if config.strategy is Strategy.NAIVE:
            scores = score_paths(
                paths,
                config=config.chunker_config,
                strategy=config.strategy,
                max_workers=config.max_workers,
                progress=advance,
            )
            return scores, None

        return score_corpus(
            paths,
            config=config.chunker_config,
            max_workers=config.max_workers,
            progress=advance,
        )


def build_groups(
    config: CLIConfig, paths: List[Path], index: Optional[CorpusChunkIndex] = None
) -> Tuple[List[DuplicateGroup], DuplicationGraph]:
    """Group files whose chunk sets overlap enough."""
    if index is None:
        index = CorpusChunkIndex.from_paths(paths, config.chunker_config)
    graph = DuplicationGraph(threshold=config.group_threshold)
    graph.add_index(index)
    return graph.get_groups(), graph


def run(config: CLIConfig, console: Console, logger: StructuredLogger) -> int:
    """Scan, score and report."""
    sources = scan_paths(config.paths, config.analyzer_config)
    if not sources:
        logger.info_with_fields(
            "No files found", operation="complete", status="no_files"
        )
        if config.output_format == "json":
            console.out(scores_to_json([]), highlight=False)
        else:
            console.print("[yellow]No files found[/yellow]")
        return 0

    paths = [source.path for source in sources]
    scores, index = run_scoring(config, console, paths)
    shown = select_scores(scores, config.selection)

    groups: Optional[List[DuplicateGroup]] = None
    graph: Optional[DuplicationGraph] = None
    if config.groups:
        groups, graph = build_groups(config, paths, index)

    if config.output_format == "json":
        console.out(scores_to_json(shown, groups), highlight=False)
        return 0

    report = ScoreReport(
        console, sizes={source.path: source.size for source in sources}, logger=logger
    )
    if config.summary:
        report.show_summary(shown)
    else:
        report.show_scores(shown)
    report.show_footer(shown, scores)
    if groups is not None and graph is not None:
        report.show_groups(groups, graph)
    return 0


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Main entry point for the CLI."""
    console = console or Console()
    try:
        config = parse_args(argv)
        logger = setup_logging(config.log_file, config.verbose, config.log_json)
        return run(config, console, logger)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        return 130
    except Exception as e:
        return handle_error(console, e)


if __name__ == "__main__":
    sys.exit(main())
