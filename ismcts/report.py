"""
Rich rendering of search results.

Example:
    >>> from ismcts.report import print_search_result
    >>> result = searcher.search(game, time_budget_ms=200)
    >>> print_search_result(result)
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ismcts.mcts.search import SearchResult


def build_stats_table(result: SearchResult, title: str = "Root actions") -> Table:
    """
    Build a table of root child statistics, most visited first.

    Args:
        result: Search result to render
        title: Table title

    Returns:
        rich Table with one row per legal root action
    """
    table = Table(title=title)
    table.add_column("Action", style="cyan")
    table.add_column("Visits", justify="right")
    table.add_column("Avails", justify="right")
    table.add_column("Avg score", justify="right")
    table.add_column("UCT", justify="right")
    table.add_column("Share", justify="right")

    uct_by_action = {action: score for score, action in result.scored_actions}
    probs = result.action_probabilities(temperature=1.0)

    rows = sorted(result.child_stats, key=lambda item: item[0].visits, reverse=True)
    for stats, action in rows:
        style = "bold green" if action == result.best_action else None
        table.add_row(
            escape(str(action)),
            str(stats.visits),
            str(stats.availability),
            f"{stats.avg_score:.3f}",
            f"{uct_by_action.get(action, float('nan')):.3f}",
            f"{probs.get(action, 0.0):.1%}",
            style=style,
        )

    return table


def print_search_result(result: SearchResult, console: Optional[Console] = None) -> None:
    """Print a one-line summary followed by the root statistics table."""
    console = console or Console()
    console.print(
        f"[bold]Best action:[/bold] {escape(repr(result.best_action))}  "
        f"[dim]{result.simulation_count} simulations in "
        f"{result.elapsed_sec * 1000:.1f} ms "
        f"({result.simulations_per_second:,.0f}/s), "
        f"{result.tree_size} nodes[/dim]"
    )
    console.print(build_stats_table(result))
