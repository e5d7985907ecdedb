"""Ask the calculator server an arithmetic question.

Prerequisites:
  1) Export MODEL_API_KEY (and optionally MODEL_API_URL / MODEL_NAME)
  2) Start the server: python -m calculator_server.server

Usage:
  python examples/ask_calculator.py "What is 18 multiplied by 7?"
"""

import asyncio
import sys

import httpx

CALCULATOR_SERVER_URL = "http://localhost:8000"

SAMPLE_QUESTIONS = [
    "What is 18 multiplied by 7?",
    "What's 100 divided by 4?",
    "Subtract 15 from 42",
    "What is 10 divided by 0?",
]


def _print_reply(question: str, status_code: int, reply: dict) -> None:
    print(f"? {question}")
    if reply.get("error"):
        print(f"✗ [{status_code}] {reply['error']}")
        return
    if reply.get("toolUsed"):
        args = reply.get("arguments") or {}
        print(f"  tool: {reply['toolUsed']}(a={args.get('a')}, b={args.get('b')}) -> {reply.get('result')}")
    else:
        print("  tool: none")
    print(f"✓ {reply.get('finalAnswer')}")


async def ask(questions: list[str]) -> None:
    async with httpx.AsyncClient(base_url=CALCULATOR_SERVER_URL, timeout=70.0) as client:
        for question in questions:
            resp = await client.post("/calculate", json={"message": question})
            _print_reply(question, resp.status_code, resp.json())
            print()


if __name__ == "__main__":
    asyncio.run(ask(sys.argv[1:] or SAMPLE_QUESTIONS))
