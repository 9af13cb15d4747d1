"""Line-based chat loop."""

from __future__ import annotations

from ccip_agent.client.driver import ConversationDriver, TurnResult
from ccip_agent.cli.render import Renderer


async def run_chat(driver: ConversationDriver, renderer: Renderer) -> None:
    while True:
        try:
            user_input = await renderer.get_user_input()
        except (KeyboardInterrupt, EOFError):
            renderer.info("Exiting chat. Goodbye!")
            return
        if not user_input.strip():
            continue

        with renderer.progress("Thinking..."):
            result = await driver.handle_input(user_input)
        render_turn(result, renderer)
        if result.exit_requested:
            if result.error is None:
                renderer.info("Exiting chat. Goodbye!")
            return


def render_turn(result: TurnResult, renderer: Renderer) -> None:
    if result.warning:
        renderer.warning(result.warning)
    if result.tool_result is not None and result.intent is not None:
        renderer.tool_result(result.intent.tool_name, result.tool_result.text, is_error=result.tool_result.is_error)
    if result.error:
        renderer.error(result.error)
        if "timed out" in result.error:
            renderer.info("[dim]Tip: cross-chain operations can take several minutes. Please be patient.[/dim]")
    if result.reply:
        renderer.assistant_message(result.reply)
