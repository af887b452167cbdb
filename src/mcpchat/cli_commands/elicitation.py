"""Terminal elicitation handler — asks the user for the fields an MCP tool needs."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Literal

from rich.markup import escape

from mcpchat.cli_commands._output import console
from mcpchat.protocols.mcp.models import ElicitationResponse

if TYPE_CHECKING:
    from mcpchat.protocols.mcp.models import ElicitationRequest

FieldValue = str | int | float | bool

_CHOICES: dict[str, Literal["accept", "decline", "cancel"]] = {
    "a": "accept",
    "accept": "accept",
    "d": "decline",
    "decline": "decline",
    "c": "cancel",
    "cancel": "cancel",
}


class CLIElicitationHandler:
    """Prompts at the terminal for each requested field.

    Satisfies :data:`~mcpchat.protocols.mcp.client.ElicitationHandler`.

    Required fields are asked again until a value is given; ``number`` and
    ``integer`` fields are converted.  End of input cancels the request.
    With ``confirm=True`` the user first chooses accept, decline or cancel.

    Input is read with ``loop.run_in_executor`` so the event loop (and the
    MCP transport) stays responsive.
    """

    def __init__(self, *, confirm: bool = False) -> None:
        self._confirm = confirm

    async def __call__(self, request: ElicitationRequest) -> ElicitationResponse:
        console.print(f"\n[bold yellow]?[/bold yellow] {escape(request.message)}")
        try:
            if self._confirm:
                action = await self._ask_action()
                if action != "accept":
                    return ElicitationResponse(action=action)
            content = await self._ask_fields(request)
        except EOFError:
            return ElicitationResponse(action="cancel")
        return ElicitationResponse(action="accept", content=content)

    async def _ask_action(self) -> Literal["accept", "decline", "cancel"]:
        while True:
            console.print("  [a] Accept and provide the information")
            console.print("  [d] Decline to provide information")
            console.print("  [c] Cancel the operation")
            answer = (await self._prompt("Choice (a/d/c): ")).strip().lower()
            if answer in _CHOICES:
                return _CHOICES[answer]
            console.print("[red]Invalid choice. Please enter 'a', 'd', or 'c'.[/red]")

    async def _ask_fields(self, request: ElicitationRequest) -> dict[str, FieldValue]:
        schema = request.requested_schema
        values: dict[str, FieldValue] = {}
        console.print("Please provide the following information:")

        for field_name, field in schema.properties.items():
            required = field_name in schema.required
            title = field.title or field_name
            suffix = "required" if required else "optional"
            while True:
                answer = (await self._prompt(f"{escape(title)} ({suffix}): ")).strip()
                if not answer:
                    if required:
                        console.print(f"[red]{escape(title)} is required. Please provide a value.[/red]")
                        continue
                    break
                value = _convert(answer, field.type)
                if value is None:
                    console.print(f"[red]{escape(title)} must be a {field.type}. Please try again.[/red]")
                    continue
                values[field_name] = value
                break
        return values

    async def _prompt(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_input, prompt)

    @staticmethod
    def _read_input(prompt: str) -> str:
        """Blocking read from stdin (run in executor)."""
        return console.input(prompt)


def _convert(answer: str, field_type: str) -> FieldValue | None:
    """Convert *answer* to *field_type*; ``None`` when it does not parse."""
    if field_type == "integer":
        try:
            return int(answer)
        except ValueError:
            return None
    if field_type == "number":
        try:
            number = float(answer)
        except ValueError:
            return None
        return int(number) if number.is_integer() and "." not in answer else number
    if field_type == "boolean":
        lowered = answer.lower()
        if lowered in ("y", "yes", "true", "1"):
            return True
        if lowered in ("n", "no", "false", "0"):
            return False
        return None
    return answer
