"""
Terminal view of a single scrape.
Uses rich library for terminal UI.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analytics import SnapshotAnalytics
from .collector import ScrapeResult
from .models import UNLIMITED


def format_kb(kb) -> str:
    """Format kilobytes to human readable."""
    if kb is None or kb == 0:
        return "0 KB"
    for unit in ['KB', 'MB', 'GB', 'TB', 'PB']:
        if abs(kb) < 1024:
            return f"{kb:.1f} {unit}"
        kb /= 1024
    return f"{kb:.1f} EB"


def format_limit(value, formatter=None) -> str:
    """Render a quota value; the -1 sentinel means no limit."""
    if value == UNLIMITED:
        return "unlimited"
    if formatter:
        return formatter(value)
    return f"{int(value):,}"


class SnapshotDashboard:
    """Renders one ScrapeResult as tables."""

    def __init__(self, result: ScrapeResult, console: Console = None):
        self.result = result
        self.analytics = SnapshotAnalytics(result.snapshot)
        self.console = console or Console()

    def show_summary(self):
        summary = self.analytics.summary()

        self.console.print()
        self.console.print(Panel.fit(
            "[bold blue]CEPH RGW SCRAPE[/bold blue]",
            border_style="blue"
        ))

        table = Table(title="Summary", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Total Buckets", f"{summary['total_buckets']:,}")
        table.add_row("Total Owners", f"{summary['total_owners']:,}")
        table.add_row("Total Objects", f"{summary['total_objects']:,}")
        table.add_row("Total Size", format_kb(summary['total_size_actual_kb']))
        table.add_row("Quota Failures", f"{len(self.result.quotas.failures):,}")
        table.add_row("Scrape Time", f"{self.result.duration:.2f}s")

        self.console.print(table)

    def show_buckets(self, limit: int = 20):
        buckets = self.analytics.top_buckets_by_size(limit)

        table = Table(title=f"Top {limit} Buckets by Size")
        table.add_column("Bucket", style="cyan", max_width=40)
        table.add_column("Owner", style="blue", max_width=20)
        table.add_column("Objects", justify="right", style="green")
        table.add_column("Size", justify="right", style="yellow")
        table.add_column("Shards", justify="right")
        table.add_column("Quota Size", justify="right", style="magenta")
        table.add_column("Quota Objects", justify="right", style="magenta")

        for b in buckets:
            table.add_row(
                b.name,
                b.owner,
                f"{b.num_objects:,}",
                format_kb(b.size_actual_kb),
                str(b.num_shards),
                format_limit(b.quota_max_size),
                format_limit(b.quota_max_objects),
            )

        self.console.print(table)

    def show_owners(self):
        usage = self.analytics.owner_usage()
        counts = self.analytics.owner_bucket_counts()
        quotas = self.result.quotas

        table = Table(title="Owners")
        table.add_column("Owner", style="cyan")
        table.add_column("Buckets", justify="right", style="green")
        table.add_column("Size", justify="right", style="yellow")
        table.add_column("Quota Size", justify="right", style="magenta")
        table.add_column("Quota Objects", justify="right", style="magenta")

        for owner in sorted(usage, key=lambda o: -usage[o]):
            quota = quotas.quotas.get(owner)
            if quota is None:
                max_size = max_objects = "[red]error[/red]"
            else:
                max_size = format_limit(quota.max_size)
                max_objects = format_limit(quota.max_objects)
            table.add_row(owner or "-", f"{counts[owner]:,}", format_kb(usage[owner]),
                          max_size, max_objects)

        self.console.print(table)

    def show_all(self, limit: int = 20):
        self.show_summary()
        self.show_buckets(limit)
        self.show_owners()
        self.console.print()
