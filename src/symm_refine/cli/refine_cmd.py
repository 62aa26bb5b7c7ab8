#!/usr/bin/env python3
"""CLI for refining symmetry alignments to exact k-fold periodicity."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from symm_refine.cli._common import (
    configure_logging,
    console,
    create_progress,
    err_console,
)
from symm_refine.models import RefinementResult
from symm_refine.process import refine_alignment_file, result_to_dict

# Number of rows shown in the result tables
DISPLAY_LIMIT = 20

app = typer.Typer(
    name="refine-symmetry",
    help="Refine symmetry alignments so that they are exactly k-fold periodic.",
    add_completion=False,
    rich_markup_mode="rich",
)


def display_results(results: list[RefinementResult]) -> None:
    """Display refinement results summary.

    Args:
        results: List of RefinementResult objects.
    """
    success_count = sum(1 for r in results if r.success)
    fail_count = len(results) - success_count
    pruned = sum(r.aligned_before - r.aligned_after for r in results if r.success)

    summary_text = (
        f"[bold]Total Processed:[/] {len(results)}\n"
        f"[bold]Refined:[/] [green]{success_count}[/]\n"
        f"[bold]Failed:[/] [red]{fail_count}[/]\n"
        f"[bold]Pairs Pruned:[/] [yellow]{pruned:,}[/]"
    )

    err_console.print(
        Panel(summary_text, title="[bold blue]Refinement Summary", border_style="blue")
    )

    refined_results = [r for r in results if r.success]
    if refined_results:
        table = Table(title="Refined Alignments", show_lines=True)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Order", justify="right")
        table.add_column("Aligned", justify="right", style="green")
        table.add_column("Edits", justify="right", style="magenta")
        table.add_column("Blocks", justify="right")

        for result in refined_results[:DISPLAY_LIMIT]:
            table.add_row(
                result.name,
                str(result.order),
                f"{result.aligned_before} -> {result.aligned_after}",
                str(result.iterations),
                str(len(result.blocks)),
            )

        if len(refined_results) > DISPLAY_LIMIT:
            table.add_row(
                f"... and {len(refined_results) - DISPLAY_LIMIT} more",
                "",
                "",
                "",
                "",
                style="dim",
            )

        err_console.print(table)

    failed_results = [r for r in results if not r.success]
    if failed_results:
        err_console.print("\n[bold red]Failures:[/]")
        for result in failed_results[:10]:
            err_console.print(f"  [red]{result.name or result.input_path}:[/] {result.error}")
        if len(failed_results) > 10:
            err_console.print(f"  ... and {len(failed_results) - 10} more failures")


@app.command()
def main(
    files: Annotated[
        list[Path],
        typer.Option(
            "--files",
            "-f",
            help="Alignment JSON files to refine",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    order: Annotated[
        int | None,
        typer.Option(
            "--order",
            "-k",
            help="Symmetry order (overrides the order stored in each file)",
            min=2,
        ),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for refined alignments",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = None,
    max_iterations: Annotated[
        int | None,
        typer.Option(
            "--max-iterations",
            help="Maximum number of edits per alignment (default: 4x its length)",
            min=0,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output results as JSON",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every refinement step",
        ),
    ] = False,
) -> None:
    """Refine symmetry alignments so that they are exactly k-fold periodic.

    Each input file holds a blocked alignment of a structure against itself,
    as produced by a symmetry detector. Pairs that cannot be made part of an
    exact k-cycle are removed.

    [bold]Examples:[/]

        # Refine one alignment using the order stored in the file
        [cyan]refine-symmetry -f 1itb.A.json[/]

        # Refine several alignments as C3 and write them to ./refined/
        [cyan]refine-symmetry -f 1itb.A.json -f 3hke.A.json -k 3 -o ./refined/[/]

        # Output raw JSON only
        [cyan]refine-symmetry -f 1itb.A.json --json[/]
    """
    configure_logging(verbose)

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)

    # Show configuration
    if not json_output:
        config_text = f"[bold]Files:[/] {len(files)}"
        config_text += f"\n[bold]Order:[/] {order or 'from file'}"
        config_text += f"\n[bold]Output:[/] {output_dir or 'none'}"
        if max_iterations is not None:
            config_text += f"\n[bold]Max Iterations:[/] {max_iterations:,}"
        err_console.print(
            Panel(config_text, title="[bold green]Configuration", border_style="green")
        )

    # Process files
    results: list[RefinementResult] = []

    def _refine(file_path: Path) -> RefinementResult:
        output_path = output_dir / file_path.name if output_dir else None
        return refine_alignment_file(
            file_path, output_path, order=order, max_iterations=max_iterations
        )

    if json_output or verbose:
        for file_path in files:
            results.append(_refine(file_path))
    else:
        with create_progress() as progress:
            task = progress.add_task("[cyan]Refining alignments...", total=len(files))
            for file_path in files:
                results.append(_refine(file_path))
                progress.update(task, advance=1)

    # Output results
    if json_output:
        output_dict = {
            "total": len(results),
            "refined": sum(1 for r in results if r.success),
            "failed": sum(1 for r in results if not r.success),
            "results": [result_to_dict(r) for r in results],
        }
        console.print(
            json.dumps(output_dict, indent=2),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    else:
        display_results(results)

    # Exit with error code if any failures
    if any(not r.success for r in results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
