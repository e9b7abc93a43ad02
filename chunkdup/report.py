"""Rendering of duplication results with rich."""

import json
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from chunkdup.logging import StructuredLogger, get_logger
from chunkdup.models import ScoreSelection
from chunkdup.scoring import FileScore
from chunkdup.similarity import DuplicationGraph
from chunkdup.types import DuplicateGroup, JsonDict
from chunkdup.utils import average, format_size

NO_EXTENSION = "no_ext"


@dataclass(frozen=True)
class ExtensionSummary:
    """Listed files of one extension."""

    extension: str
    files: int
    average_percent: float


def score_style(percent: float) -> str:
    """Color on a green to red scale, red being fully duplicated."""
    ratio = min(max(percent, 0), 100) / 100
    red = int(255 * ratio)
    green = int(255 * (1 - ratio))
    return f"rgb({red},{green},0)"


def select_scores(
    scores: Sequence[FileScore], selection: Optional[ScoreSelection] = None
) -> List[FileScore]:
    """Sort by percent (highest first, then path) and apply the listing filters."""
    selection = selection or ScoreSelection()
    selected = sorted(scores, key=lambda s: (-s.percent, str(s.path)))
    if not selection.keep_zero:
        selected = [s for s in selected if s.percent > 0]
    if selection.min_score is not None:
        selected = [s for s in selected if s.percent >= selection.min_score]
    if selection.threshold is not None and selected:
        cutoff = selected[0].percent * selection.threshold // 100
        selected = [s for s in selected if s.percent >= cutoff]
    if selection.skip is not None:
        selected = selected[selection.skip :]
    if selection.top is not None:
        selected = selected[: selection.top]
    return selected


def summarize_extensions(scores: Sequence[FileScore]) -> List[ExtensionSummary]:
    """Average percent per file extension, highest first."""
    by_extension: Dict[str, List[int]] = defaultdict(list)
    for score in scores:
        extension = score.path.suffix.lstrip(".") or NO_EXTENSION
        by_extension[extension].append(score.percent)

    summaries = [
        ExtensionSummary(extension, len(values), sum(values) / len(values))
        for extension, values in by_extension.items()
    ]
    summaries.sort(key=lambda s: (-s.average_percent, s.extension))
    return summaries


def scores_to_json(
    scores: Sequence[FileScore], groups: Optional[Sequence[DuplicateGroup]] = None
) -> str:
    """Serialize scores (and optional groups) as a JSON document."""
    document: JsonDict = {"files": [s.to_dict() for s in scores]}
    scored = [s.percent for s in scores if s.applicable]
    document["summary"] = {
        "files": len(scores),
        "scored_files": len(scored),
        "average_percent": average(scored),
    }
    document["extensions"] = [
        {
            "extension": e.extension,
            "files": e.files,
            "average_percent": round(e.average_percent, 2),
        }
        for e in summarize_extensions(scores)
    ]
    if groups is not None:
        document["groups"] = [
            {
                "id": g.id,
                "similarity": round(g.similarity, 4),
                "files": [str(f) for f in g.files],
            }
            for g in groups
        ]
    return json.dumps(document, indent=2)


class ScoreReport:
    """Prints duplication scores, summaries and groups."""

    def __init__(
        self,
        console: Console,
        sizes: Optional[Dict[Path, int]] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self.console = console
        self.sizes = sizes or {}
        self.logger = logger or get_logger()

    def show_scores(self, scores: Sequence[FileScore]) -> None:
        """Display one row per file."""
        self.logger.info_with_fields(
            "Displaying scores", operation="display", file_count=len(scores)
        )
        if not scores:
            self.console.print("[yellow]No files to report[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Dup", justify="right")
        table.add_column("Chunks", justify="right", style="dim")
        table.add_column("Size", justify="right", style="green")
        table.add_column("File", style="cyan")
        table.add_column("Note", style="dim")

        for score in scores:
            size = self.sizes.get(score.path)
            table.add_row(
                f"[{score_style(score.percent)}]{score.suffix}[/]",
                f"{score.duplicate_chunks}/{score.total_chunks}",
                format_size(size) if size is not None else "",
                escape(str(score.path)),
                "" if score.applicable else score.status.value,
            )

        self.console.print(table)

    def show_summary(self, scores: Sequence[FileScore]) -> None:
        """Display the listed files aggregated by extension."""
        summaries = summarize_extensions(scores)
        if not summaries:
            self.console.print("[yellow]No files to report[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Dup", justify="right")
        table.add_column("Extension", style="cyan")
        table.add_column("Files", justify="right")
        for summary in summaries:
            table.add_row(
                f"[{score_style(summary.average_percent)}]"
                f"{summary.average_percent:.0f}%[/]",
                escape(summary.extension),
                f"({summary.files} files)",
            )
        self.console.print(table)

    def show_footer(
        self, listed: Sequence[FileScore], scores: Sequence[FileScore]
    ) -> None:
        """Display the average over listed files and the overall file counts."""
        mean = average(s.percent for s in listed)
        if mean is None:
            self.console.print(f"{'n/a':>8} avg duplication %")
        else:
            self.console.print(
                f"[{score_style(mean)}]{mean:>8.1f}[/] avg duplication %"
            )

        scored = sum(1 for s in scores if s.applicable)
        skipped = len(scores) - scored
        self.console.print(
            f"[dim]Files: {len(scores)} ({scored} scored, {skipped} skipped), "
            f"{len(listed)} listed[/dim]"
        )

    def show_groups(
        self, groups: Sequence[DuplicateGroup], graph: DuplicationGraph
    ) -> None:
        """Display files that share chunks, one panel per group."""
        if not groups:
            self.console.print("[yellow]No files share chunks[/yellow]")
            return

        for group in groups:
            table = Table(show_header=False, box=None)
            table.add_column("File", style="cyan")
            for path in group.files:
                table.add_row(escape(str(path)))

            pairs = graph.get_group_similarities(group.files)
            for (first, second), overlap in sorted(pairs.items()):
                table.add_row(
                    f"[dim]{escape(first.name)} <-> {escape(second.name)}: "
                    f"{overlap:.0%}[/dim]"
                )

            self.console.print(
                Panel(
                    table,
                    title=f"Group {group.id} (~{group.similarity:.0%} shared chunks)",
                    border_style="blue",
                    expand=False,
                )
            )
