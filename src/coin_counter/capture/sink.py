"""Display sinks consuming the rendered multi-line result."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel

from coin_counter.utils.hydra import register


class BaseDisplaySink(ABC):
    """Receives ready-to-render result text."""

    @abstractmethod
    def publish(self, text: str) -> None:
        """Show ``text``, replacing whatever was shown before."""


@register(group="sink", name="memory")
class MemorySink(BaseDisplaySink):
    """Keeps the published text in memory."""

    def __init__(self, initial: str = "分類中...") -> None:
        self.text = initial
        self.history: list[str] = []

    def publish(self, text: str) -> None:
        self.text = text
        self.history.append(text)


@register(group="sink", name="console", title="Coins")
class ConsoleSink(BaseDisplaySink):
    """Print each result as a rich panel."""

    def __init__(self, title: str = "Coins", console: Console | None = None) -> None:
        self.title = title
        self.console = console or Console()

    def publish(self, text: str) -> None:
        self.console.print(Panel(text, title=self.title, expand=False))
