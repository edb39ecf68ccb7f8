"""
dips browse - Interactive proposal browser.

Read-only TUI over a loaded collection: proposal list on the left,
metadata and body of the highlighted proposal on the right.
"""

from typing import Optional

from rich.markup import escape
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, Label, ListItem, ListView, Static

from dipindex.store import LoadResult, Proposal, ProposalStore

BODY_PREVIEW_LINES = 200

STATUS_COLORS = {
    "Draft": "dim",
    "Community Review": "cyan",
    "Final Review": "cyan",
    "Formal Review": "yellow",
    "Formal Assessment": "yellow",
    "Accepted": "green",
    "Accepted with modifications": "green",
    "Final": "bold green",
    "Rejected": "red",
    "Withdrawn": "red",
    "Postponed": "magenta",
    "Superseded": "magenta",
}


def _format_entry(proposal: Proposal) -> str:
    """One list row with Rich markup."""
    color = STATUS_COLORS.get(proposal.status, "")
    status = escape(proposal.status)
    if color:
        status = f"[{color}]{status}[/{color}]"
    return f"[bold]{proposal.label}[/bold] {status}  {escape(proposal.title)}"


def _format_details(proposal: Proposal) -> str:
    """Detail pane content with Rich markup. Long bodies are truncated."""
    lines = [
        f"[bold]{proposal.label}: {escape(proposal.title)}[/bold]",
        "",
        f"Status:  {escape(proposal.status)}",
        f"Author:  {escape(proposal.author or '-')}",
    ]
    if proposal.review_count is not None:
        lines.append(f"Reviews: {proposal.review_count}")
    if proposal.implementation:
        lines.append(f"Implementation: {escape(proposal.implementation)}")
    lines.append("")

    body_lines = proposal.body.splitlines()
    lines.extend(escape(line) for line in body_lines[:BODY_PREVIEW_LINES])
    if len(body_lines) > BODY_PREVIEW_LINES:
        lines.append(f"[dim]... {len(body_lines) - BODY_PREVIEW_LINES} more line(s)[/dim]")

    return "\n".join(lines)


def _visible_proposals(store: ProposalStore, status_filter: Optional[str]) -> list[Proposal]:
    if status_filter:
        return list(store.filter_by_status(status_filter))
    return list(store)


class ProposalItem(ListItem):
    """List entry carrying its proposal."""

    def __init__(self, proposal: Proposal) -> None:
        super().__init__(Label(_format_entry(proposal)))
        self.proposal = proposal


class StatusFilterModal(ModalScreen[str]):
    """Modal for entering a status filter."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def compose(self) -> ComposeResult:
        yield Container(
            Label("Filter by status (empty shows all):", id="filter-label"),
            Input(placeholder="e.g. Accepted", id="filter-input"),
            id="filter-dialog",
        )

    def on_mount(self) -> None:
        self.query_one("#filter-input", Input).focus()

    @on(Input.Submitted)
    def on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)


class BrowseApp(App):
    """Proposal browser."""

    CSS = """
    #dip-list {
        width: 45%;
        border: solid $primary;
    }

    #dip-detail {
        width: 55%;
        border: solid $secondary;
        padding: 0 1;
    }

    StatusFilterModal {
        align: center middle;
    }

    #filter-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $warning;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("slash", "filter", "Filter"),
        Binding("c", "clear_filter", "Clear filter"),
    ]

    def __init__(self, result: LoadResult, status_filter: Optional[str] = None) -> None:
        super().__init__()
        self.result = result
        self.status_filter = status_filter

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            ListView(id="dip-list"),
            VerticalScroll(Static("", id="dip-body"), id="dip-detail"),
        )
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_list()

    def _refresh_list(self) -> None:
        proposals = _visible_proposals(self.result.store, self.status_filter)
        self.title = "DIPs"
        self.sub_title = self.status_filter or f"{len(proposals)} proposal(s)"

        list_view = self.query_one("#dip-list", ListView)
        list_view.clear()
        list_view.extend(ProposalItem(p) for p in proposals)

        body = self.query_one("#dip-body", Static)
        if proposals:
            body.update(_format_details(proposals[0]))
        else:
            body.update("[dim]No proposals match.[/dim]")

    @on(ListView.Highlighted)
    def on_highlighted(self, event: ListView.Highlighted) -> None:
        if isinstance(event.item, ProposalItem):
            self.query_one("#dip-body", Static).update(_format_details(event.item.proposal))

    def action_filter(self) -> None:
        def apply(value: Optional[str]) -> None:
            if value is None:
                return
            self.status_filter = value or None
            self._refresh_list()

        self.push_screen(StatusFilterModal(), apply)

    def action_clear_filter(self) -> None:
        self.status_filter = None
        self._refresh_list()


def cmd_browse(args, result: LoadResult) -> int:
    """Run the interactive browser."""
    if not len(result.store):
        print("No proposals to browse.")
        return 1

    BrowseApp(result, getattr(args, 'status', None)).run()
    return 0
