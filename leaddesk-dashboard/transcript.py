"""
Turn a raw voice/chat transcript into role-tagged chat messages.

The intake pipeline logs one utterance per line, prefixed with "User:" or
"Assistant:". It occasionally emits the same utterance twice (often with
different trailing punctuation), so consecutive near-duplicates from the
same speaker are dropped.

Not idempotent: feeding the rendered content back in without role markers
collapses it into a single "system" message.
"""
import re

ROLE_MARKER = re.compile(r"^(user|assistant):\s*(.*)$", re.IGNORECASE)
NON_ALNUM = re.compile(r"[^a-z0-9]")

# Shorter strings never count as containment matches ("Hi" vs "Hi there").
MIN_CONTAINMENT_LENGTH = 3


def _normalize_text(text: str) -> str:
    return NON_ALNUM.sub("", text.lower())


def _is_near_duplicate(previous: str, candidate: str) -> bool:
    a = _normalize_text(previous)
    b = _normalize_text(candidate)
    if a == b:
        return True
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    return len(shorter) > MIN_CONTAINMENT_LENGTH and shorter in longer


def normalize(raw_transcript: str) -> list[dict]:
    """
    Parse a newline-delimited transcript into [{"role", "content"}, ...].
    Never raises; empty input gives an empty list.
    """
    messages = []

    for raw_line in (raw_transcript or "").split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        match = ROLE_MARKER.match(line)
        if match is None:
            if messages:
                messages[-1]["content"] += "\n" + line
            else:
                messages.append({"role": "system", "content": line})
            continue

        role = match.group(1).lower()
        content = match.group(2).strip()

        if messages and messages[-1]["role"] == role and _is_near_duplicate(messages[-1]["content"], content):
            continue

        messages.append({"role": role, "content": content})

    return messages
