#!/usr/bin/env python3
"""
LingoPal walkthrough: sign up, practice a restaurant conversation, save it.

signup → login → start conversation → ask the AI partner → save the
transcript → ask for a hint and a rephrasing.
Run with: python examples/practice_session.py

Requires: pip install httpx
Backend must be running: http://localhost:5000  (lingopal serve)
"""

import sys
import uuid

import httpx

BASE = "http://localhost:5000/api"


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=30)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    health = resp.json()
    print(f"  Database: {health['database']}")
    print(f"  Redis:    {health['redis']}")

    # ── Account ───────────────────────────────────────────────────
    print("\n1. Signing up...")
    username = f"learner-{run_id}"
    password = "practice-123"
    resp = client.post("/auth/signup", json={
        "full_name": "Demo Learner",
        "dob": "2000-01-01",
        "gender": "female",
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    user = resp.json()["user"]
    print(f"   User: {user['username']} (admin: {user['is_admin']})")

    resp = client.post("/auth/login", json={"identifier": username, "password": password})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    client.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
    print("   Logged in ✓")

    # ── Conversation ──────────────────────────────────────────────
    print("\n2. Starting a restaurant conversation...")
    resp = client.post("/conversations", json={
        "assistant_name": "Emma",
        "gender": "female",
        "scenario": "restaurant",
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    conv = resp.json()
    messages = conv["messages"]
    print(f"   {conv['title']}")
    print(f"   Emma: {messages[0]['text']}")

    # ── Talk to the AI partner ────────────────────────────────────
    print("\n3. Saying something...")
    said = "Hi, I would like to see the menu please."
    messages.append({"id": f"u-{run_id}", "sender": "user", "text": said})
    history = [
        {"role": "model" if m["sender"] == "ai" else "user", "parts": [{"text": m["text"]}]}
        for m in messages
    ]
    resp = client.post("/ai/chat", json={
        "history": history,
        "assistant_name": "Emma",
        "scenario": "restaurant",
    })
    reply = resp.json()
    if resp.status_code == 503:
        print("   (AI service unavailable, showing placeholder)")
    print(f"   You:  {said}")
    print(f"   Emma: {reply['response']}")
    print(f"         {reply['translation']}")
    messages.append({
        "id": f"a-{run_id}",
        "sender": "ai",
        "text": reply["response"],
        "translation": reply["translation"],
    })

    # ── Save the transcript ───────────────────────────────────────
    print("\n4. Saving the transcript...")
    resp = client.patch(f"/conversations/{conv['id']}", json={"messages": messages})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Saved {len(resp.json()['messages'])} messages")

    # ── Coaching ──────────────────────────────────────────────────
    print("\n5. Asking for help...")
    resp = client.post("/ai/topic-suggestion", json={
        "scenario": "restaurant",
        "history": history,
    })
    print(f"   Hint: {resp.json()['response']}")

    resp = client.post("/ai/suggestions", json={"text_to_improve": said})
    for alt in resp.json():
        print(f"   Try: {alt}")

    resp = client.get("/conversations")
    print(f"\nDone. You have {len(resp.json())} conversation(s).")


if __name__ == "__main__":
    main()
