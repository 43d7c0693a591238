import asyncio

from live_browser_agent.agent.prompts import ROUTER_SYSTEM_PROMPT
from live_browser_agent.agent.router import Router
from live_browser_agent.llm.base import ConversationTurn
from live_browser_agent.llm.mock import ScriptedLLM


def test_conversation_reply_is_recorded_verbatim():
    llm = ScriptedLLM(["Hello! How can I help you today?"])
    transcript: list[ConversationTurn] = []

    decision = asyncio.run(Router(llm).route("hello", transcript))

    assert decision.needs_browser is False
    assert decision.reply == "Hello! How can I help you today?"
    assert transcript == [
        ConversationTurn(role="user", content="hello"),
        ConversationTurn(role="assistant", content="Hello! How can I help you today?"),
    ]
    assert llm.requests[0][0] == ConversationTurn(role="system", content=ROUTER_SYSTEM_PROMPT)


def test_action_sentinel_routes_to_agent():
    llm = ScriptedLLM([" ACTION\n"])
    transcript: list[ConversationTurn] = []

    decision = asyncio.run(Router(llm).route("open example.com", transcript))

    assert decision.needs_browser is True
    assert decision.reply is None
    assert [turn.role for turn in transcript] == ["user"]


def test_sentinel_must_be_exact():
    llm = ScriptedLLM(["ACTION: open the browser"])

    decision = asyncio.run(Router(llm).route("open example.com", []))

    assert decision.needs_browser is False
    assert decision.reply == "ACTION: open the browser"


def test_transcript_is_trimmed_to_limit():
    llm = ScriptedLLM(["one", "two", "three"])
    transcript: list[ConversationTurn] = []
    router = Router(llm, transcript_limit=4)

    async def scenario() -> None:
        for text in ("a", "b", "c"):
            await router.route(text, transcript)

    asyncio.run(scenario())

    assert [turn.content for turn in transcript] == ["b", "two", "c", "three"]
