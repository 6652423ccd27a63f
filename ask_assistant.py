import os

import requests

from live_lectures.presentation import append_exchange, parse_assistant_reply

BASE_URL = os.getenv("LIVE_LECTURES_URL", "http://127.0.0.1:8000")


def ask(query: str):
    resp = requests.post(
        f"{BASE_URL}/api/chat",
        json={"query": query},
        timeout=120,   # embedding + index + completion
    )
    data = resp.json()
    if resp.status_code != 200:
        print("❌ Server error:", data.get("error", resp.text[:200]))
        return None
    return data.get("response")


def print_reply(reply: str):
    for segment in parse_assistant_reply(reply):
        if segment.kind == "card":
            print(f"\n📘 {segment.card.title}")
            for detail in segment.card.details:
                print(f"   {detail.label}: {detail.value}")
        else:
            print(f"\n{segment.text}")


def main():
    print("🦝 Ask about courses (blank line to quit)")
    messages = []

    while True:
        query = input("\n> ").strip()
        if not query:
            break

        try:
            reply = ask(query)
        except requests.RequestException as e:
            print("❌ Request failed:", e)
            reply = None

        messages = append_exchange(messages, query, reply)
        print_reply(messages[-1].content)

    print(f"\n💬 {len(messages) // 2} questions this session")


if __name__ == "__main__":
    main()
