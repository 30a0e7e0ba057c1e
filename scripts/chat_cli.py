#!/usr/bin/env python3
"""Interactive chat CLI for testing the Book Advisor service."""

import json
import sys
from pathlib import Path

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

MAX_INPUT_CHARS = 2000
HISTORY_FILE = Path.home() / ".book_advisor_history.json"


class ChatCLI:
    """Interactive chat interface for the Book Advisor service.

    The server is stateless, so the CLI owns the conversation: it keeps every
    message, resends the whole list on each turn, and saves it between runs.
    """

    def __init__(self, base_url: str = "http://localhost:8000", history_file: Path = HISTORY_FILE):
        """Initialize chat CLI."""
        self.base_url = base_url
        self.history_file = history_file
        self.messages: list[dict] = self._load_history()
        self.console = Console()
        self.client = httpx.Client(timeout=60.0)

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                "[bold blue]📚 Book Advisor - Interactive Chat[/bold blue]\n"
                "Ask for recommendations or manage your reading list.\n"
                "Commands: /help, /clear, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]❌ Cannot connect to the service at {self.base_url}.[/red]")
            return

        self.console.print("[green]✅ Connected to Book Advisor[/green]")
        if self.messages:
            self.console.print(f"[dim]Restored {len(self.messages)} messages from {self.history_file}[/dim]")

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                command = user_input.strip().lower()

                if command in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif command == "/help":
                    self._show_help()
                    continue
                elif command == "/clear":
                    self.messages = []
                    self._save_history()
                    self.console.print("[yellow]🔄 Conversation cleared[/yellow]")
                    continue
                elif command == "":
                    continue
                elif len(user_input) > MAX_INPUT_CHARS:
                    self.console.print(f"[red]Message too long ({len(user_input)}/{MAX_INPUT_CHARS} characters)[/red]")
                    continue

                response = self._send_message(user_input)
                if response:
                    self._display_response(response)

        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]👋 Happy reading![/yellow]")
            self.client.close()

    def _load_history(self) -> list[dict]:
        if not self.history_file.exists():
            return []
        try:
            data = json.loads(self.history_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return []
        return data if isinstance(data, list) else []

    def _save_history(self) -> None:
        self.history_file.write_text(json.dumps(self.messages, ensure_ascii=False, indent=2), encoding="utf-8")

    def _test_connection(self) -> bool:
        """Test connection to the service."""
        try:
            response = self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _send_message(self, message: str) -> dict | None:
        """Send the conversation with the new message to the service."""
        payload = {"messages": [*self.messages, {"role": "user", "content": message}]}

        try:
            self.console.print("[dim]💭 Thinking...[/dim]", end="")
            response = self.client.post(f"{self.base_url}/chat", json=payload)
            self.console.print("\r" + " " * 20 + "\r", end="\n")
        except httpx.HTTPError as e:
            self.console.print(f"[red]❌ Connection error: {e}[/red]")
            return None

        if response.status_code != 200:
            self.console.print(f"[red]❌ API Error: {response.status_code} - {response.text}[/red]")
            return None

        data = response.json()
        self.messages = [*payload["messages"], {"role": "assistant", "content": data.get("content", "")}]
        self._save_history()
        return data

    def _display_response(self, response: dict) -> None:
        """Display the assistant reply with the tools it used."""
        tools_used = response.get("toolsUsed") or []
        subtitle = f"[dim]tools: {', '.join(tools_used)}[/dim]" if tools_used else None

        self.console.print(
            Panel(
                Markdown(response.get("content") or "No response"),
                title="[bold green]📖 Book Advisor[/bold green]",
                subtitle=subtitle,
                border_style="green",
                padding=(1, 2),
            )
        )

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /clear - Forget the conversation and start over
• /quit or /exit - Exit the chat

[bold]Example Conversation:[/bold]
1. "Recommend me some science fiction by Asimov"
2. "Tell me more about the first one"
3. "Add it to my list with high priority"
4. "What's on my reading list?"
5. "I finished Foundation, 5 stars"
6. "Show me my reading stats"
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

    chat = ChatCLI(base_url)
    chat.start()


if __name__ == "__main__":
    main()
