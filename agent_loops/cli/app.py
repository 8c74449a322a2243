"""Terminal UI (prompt_toolkit / rich)."""

import asyncio

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from agent_loops.core.loops import LOOP_TYPES
from agent_loops.errors import ConfigError

console = Console()


class AgentCLI:
    def __init__(self, agent, history_file: str = ".agent_loops_history"):
        self.agent = agent
        self.session = PromptSession(history=FileHistory(history_file))
        self._attach_observers()

    def _attach_observers(self) -> None:
        self.agent.add_observer("tool_execution", self._show_tool_call)
        self.agent.add_observer("reflection", self._show_reflection)
        self.agent.add_observer("plan_created", self._show_plan)
        self.agent.add_observer("step_complete", self._show_step)

    @staticmethod
    def _show_tool_call(name, params, result):
        style = "red" if result.is_error else "dim"
        console.print(f"  [{style}]⚙ {name}({params}) → {result.content[:120]}[/]")

    @staticmethod
    def _show_reflection(refinement, score, feedback):
        console.print(f"  [magenta]✎ reflection {refinement}: score {score}/10[/]")

    @staticmethod
    def _show_plan(steps, context):
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("#", width=4)
        table.add_column("Step")
        for i, step in enumerate(steps, start=1):
            table.add_row(str(i), step)
        console.print(table)

    @staticmethod
    def _show_step(number, description, result):
        console.print(f"  [green]✓ step {number}[/] [dim]{description[:80]}[/]")

    async def run(self):
        console.print(
            f"[bold green]Agent loops[/] ready ([bold]{self.agent.loop_name}[/] loop). "
            "Type /help for commands.\n"
        )

        while True:
            try:
                user_input = await asyncio.to_thread(
                    self.session.prompt, f"{self.agent.loop_name}> "
                )
            except (EOFError, KeyboardInterrupt):
                break

            if not user_input.strip():
                continue

            if user_input.startswith("/"):
                if not self._handle_command(user_input):
                    break
                continue

            with console.status("[bold cyan]Thinking...[/]"):
                result = await self.agent.run(user_input)

            if result.success:
                console.print(Markdown(result.answer or ""))
            else:
                console.print(f"[bold red]Failed:[/] {result.error}")
            console.print(
                f"[dim]{result.iterations} iterations, "
                f"{result.metadata['token_usage']['total']} tokens[/]\n"
            )

    def _handle_command(self, cmd) -> bool:
        """Returns False when the session should end."""
        parts = cmd.strip().split()
        match parts[0]:
            case "/help":
                console.print(
                    "/help              — Show this message\n"
                    "/loop <name>       — Switch loop (" + ", ".join(LOOP_TYPES) + ")\n"
                    "/provider <name>   — Switch LLM model (e.g., /provider gpt4)\n"
                    "/tools             — List available tools\n"
                    "/usage             — Show token usage for this session\n"
                    "/quit              — Exit"
                )
            case "/loop" | "/provider" if len(parts) < 2:
                console.print(f"[yellow]Usage: {parts[0]} <name>[/]")
            case "/loop":
                try:
                    self.agent.switch_loop(parts[1])
                    console.print(f"Switched to [bold]{parts[1]}[/] loop")
                except ConfigError as e:
                    console.print(f"[red]{e}[/]")
            case "/provider":
                try:
                    self.agent.switch_provider(parts[1])
                    console.print(f"Switched to [bold]{parts[1]}[/]")
                except ConfigError as e:
                    console.print(f"[red]{e}[/]")
            case "/tools":
                for name in self.agent.tools.names():
                    console.print(f"  {name}")
            case "/usage":
                usage = self.agent.usage
                console.print(
                    f"input {usage.input_tokens}, output {usage.output_tokens}, "
                    f"total {usage.total}"
                )
            case "/quit":
                return False
            case _:
                console.print(f"[yellow]Unknown command: {parts[0]}[/]")
        return True
