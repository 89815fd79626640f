"""
Visual test of the assistant - shows intent routing and checklist collection

Usage:
    python scripts/demo_assistant.py
    python scripts/demo_assistant.py --audio path/to/question.wav
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from colorama import Fore, Style, init

from chatter.agents.assistant import AgentResult, AssistantAgent, ChatTurn, ConversationRequest
from chatter.agents.structured.metrics import log_metrics_summary
from chatter.memory import ConversationStateStore
from chatter.utils.errors import AgentError
from chatter.utils.logger import setup_logger

init(autoreset=True)


def print_result(question: str, result: AgentResult):
    """Pretty print a result"""
    route_color = Fore.CYAN if result.is_structured else Fore.GREEN
    print(f"\n{Fore.YELLOW}Q: {question}")
    print(f"{route_color}→ Intent: {result.intent.value}")

    if result.is_structured:
        print(f"{Fore.WHITE}# {result.structured.title}")
        print(f"{Fore.WHITE}{result.structured.message[:300]}")
        for item in result.structured.checklist:
            mark = "✓" if item.is_resolved else "?"
            print(f"  {mark} {item.point}" + (f": {item.resolution}" if item.is_resolved else ""))
    else:
        print(f"{Fore.WHITE}A: {result.text[:300]}")

    print(f"{Style.DIM}tokens={result.usage.total_tokens} calls={result.model_calls} warnings={result.warnings}")
    print(f"{Style.DIM}{'─'*80}")


def main():
    parser = argparse.ArgumentParser(description="Assistant demo")
    parser.add_argument("--audio", help="Audio file to transcribe and answer")
    args = parser.parse_args()

    setup_logger(level="WARNING", log_to_file=False)

    print(f"\n{Fore.MAGENTA}{'='*80}")
    print(f"{Fore.MAGENTA}ASSISTANT DEMONSTRATION")
    print(f"{Fore.MAGENTA}Direct answers vs. checklist-driven info collection")
    print(f"{Fore.MAGENTA}{'='*80}\n")

    agent = AssistantAgent(store=ConversationStateStore())

    if args.audio:
        result = agent.run(ConversationRequest(audio_reference=args.audio))
        print_result(f"[audio] {args.audio}", result)
        return

    history = []
    questions = [
        "Explain what a closure is in Python",
        "Help me build a login form for my web app",
        "React with TypeScript, email and password plus Google sign-in",
    ]
    for question in questions:
        try:
            result = agent.run(
                ConversationRequest(message=question, history=tuple(history), conversation_id="demo")
            )
        except AgentError as e:
            print(f"{Fore.RED}✗ Run failed: {e}")
            continue

        print_result(question, result)
        history.append(ChatTurn(role="user", content=question))
        answer = result.text if result.text is not None else result.structured.message
        history.append(ChatTurn(role="assistant", content=answer))

    log_metrics_summary()


if __name__ == "__main__":
    main()
