# ABOUTME: Rich console reporter for scenario intro, periodic progress and final summary
# ABOUTME: Single responsibility - display game information in a user-friendly way

from typing import List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from ..core import AttributeStatistics, Constraint, Decision, GameResult, GameState, Person
from ..core.diagnostics import DiagnosticsSink


def _pct(p: float) -> str:
    return f"{p * 100:.1f}%"


def strongest_correlations(statistics: AttributeStatistics, limit: int = 10) -> List[Tuple[str, str, float]]:
    """Unique attribute pairs sorted by |r|, strongest first."""
    pairs = []
    for a, row in statistics.correlations.items():
        for b, r in (row or {}).items():
            if a < b and isinstance(r, (int, float)):
                pairs.append((a, b, float(r)))
    pairs.sort(key=lambda pair: abs(pair[2]), reverse=True)
    return pairs[:limit]


class ConsoleReporter(DiagnosticsSink):
    """Renders a game to the terminal as rich tables."""

    def __init__(self, console: Optional[Console] = None, progress_every: int = 0,
                 max_frequencies: int = 20, max_correlations: int = 10):
        self.console = console or Console()
        self.progress_every = progress_every
        self.max_frequencies = max_frequencies
        self.max_correlations = max_correlations

    def on_game_start(self, game_state: GameState):
        self.console.print(Panel(
            f"Game [bold]{game_state.game_id[:8]}[/bold] - scenario {game_state.scenario}",
            title="Scenario Details", box=ROUNDED
        ))
        self.console.print(self.constraints_table(game_state.constraints))
        self.console.print(self.frequencies_table(game_state.statistics))
        correlations = self.correlations_table(game_state.statistics)
        if correlations.row_count:
            self.console.print(correlations)

    def on_decision(self, person: Person, decision: Decision, game_state: GameState):
        if self.progress_every and game_state.people_processed % self.progress_every == 0:
            progress = ", ".join(f"{attr} {_pct(p)}" for attr, p in game_state.constraint_progress().items())
            self.console.print(
                f"[dim]#{person.index}[/dim] admitted={game_state.admitted_count} "
                f"rejected={game_state.rejected_count} | {progress}"
            )

    def on_game_end(self, result: GameResult):
        self.console.print(self.summary_table(result.game_state))
        state = result.game_state
        style = "green" if result.success else "red"
        self.console.print(f"[{style}]Status: {state.status.value}[/{style}] "
                           f"(strategy {result.strategy_name}, {result.duration:.1f}s)")

    # --- Tables ---
    def constraints_table(self, constraints: List[Constraint]) -> Table:
        table = Table(title="Constraints", box=ROUNDED)
        table.add_column("Attribute", style="cyan")
        table.add_column("Min count", justify="right")
        for c in constraints:
            table.add_row(c.attribute, str(c.min_count))
        return table

    def frequencies_table(self, statistics: AttributeStatistics) -> Table:
        freqs = sorted(statistics.frequencies.items(), key=lambda kv: kv[1], reverse=True)
        table = Table(title=f"Relative Frequencies (top {self.max_frequencies})", box=ROUNDED)
        table.add_column("Attribute", style="cyan")
        table.add_column("Frequency", justify="right")
        for attr, p in freqs[:self.max_frequencies]:
            table.add_row(attr, _pct(p))
        if len(freqs) > self.max_frequencies:
            table.caption = f"(+{len(freqs) - self.max_frequencies} more)"
        return table

    def correlations_table(self, statistics: AttributeStatistics) -> Table:
        table = Table(title=f"Strongest correlations (top {self.max_correlations} by |r|)", box=ROUNDED)
        table.add_column("Pair", style="cyan")
        table.add_column("r", justify="right")
        for a, b, r in strongest_correlations(statistics, self.max_correlations):
            table.add_row(f"{a} x {b}", f"{r:.3f}")
        return table

    def summary_table(self, game_state: GameState) -> Table:
        seen = game_state.people_processed
        admit_rate = game_state.admitted_count / seen if seen else 0.0
        table = Table(
            title=f"Final Summary: admitted={game_state.admitted_count} rejected={game_state.rejected_count} "
                  f"(admit rate {_pct(admit_rate)} of {seen} seen)",
            box=ROUNDED
        )
        table.add_column("Attribute", style="cyan")
        table.add_column("Have", justify="right")
        table.add_column("Share of admits", justify="right")
        table.add_column("Min", justify="right")
        table.add_column("Deficit", justify="right")

        for c in game_state.constraints:
            have = game_state.admitted_attributes.get(c.attribute, 0)
            share = _pct(have / game_state.admitted_count) if game_state.admitted_count else "n/a"
            deficit = c.shortage(have)
            table.add_row(c.attribute, str(have), share, str(c.min_count),
                          f"[red]{deficit}[/red]" if deficit else "0")

        table.caption = f"All minima satisfied? {'YES' if game_state.are_all_constraints_satisfied() else 'NO'}"
        return table
