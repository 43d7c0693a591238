"""Prompt construction utilities."""

from __future__ import annotations

from textwrap import dedent

AGENT_SYSTEM_PROMPT = dedent(
    """
    You are a browser automation agent. You control a headless web browser and
    receive the page's accessibility tree after every action.

    Reply with exactly ONE action per message, on a single line, using one of:
    click <css-selector>
    type <css-selector> <text to enter>
    scroll <up|down>
    navigate <url>
    done <summary of what you found or did>

    Rules:
    - Write the action keyword in lowercase as the first word of the line.
    - Do not add explanations, numbering, or code fences.
    - Prefer selectors built from ids, names, roles or visible text,
      e.g. #search, input[name=q], text=Sign in.
    - When the instruction is satisfied, reply with done and a concise answer
      for the user.
    """
).strip()

ROUTER_SYSTEM_PROMPT = dedent(
    """
    You are a helpful assistant that can also operate a web browser.
    Decide whether the user's latest message requires using the browser
    (visiting, searching, reading or interacting with a website).

    If it does, reply with exactly the single word ACTION and nothing else.
    Otherwise answer the user directly and conversationally.
    """
).strip()

IDLE_BROWSER_OBSERVATION = "The browser is idle on a blank page. No website is open yet."

CORRECTIVE_PROMPT = (
    "Your reply was not a valid action. Respond with exactly one line using one of: "
    "click <selector>, type <selector> <text>, scroll <up|down>, navigate <url>, done <summary>."
)

ROUTE_TO_AGENT = "ACTION"


class PromptBuilder:
    """Build the per-step observation message sent to the agent model."""

    def __init__(self, snapshot_char_limit: int = 12000) -> None:
        self._snapshot_char_limit = snapshot_char_limit

    def observation(
        self,
        *,
        step: int,
        instruction: str,
        previous_result: str | None,
        url: str,
        snapshot: str | None,
    ) -> str:
        if step == 0:
            header = f"Instruction: {instruction}"
        else:
            header = f"Result of your last action: {previous_result or 'unknown'}"
        if snapshot is None:
            return f"{header}\n\n{IDLE_BROWSER_OBSERVATION}"
        tree = self._truncate(snapshot.strip()) or "(no interactive elements found)"
        return dedent(
            f"""
            {header}

            Current URL: {url}
            Page accessibility snapshot:
            """
        ).strip() + f"\n{tree}"

    def _truncate(self, text: str) -> str:
        if len(text) <= self._snapshot_char_limit:
            return text
        return text[: self._snapshot_char_limit] + "\n... (snapshot truncated)"
