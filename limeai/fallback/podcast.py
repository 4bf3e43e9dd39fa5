# limeai/fallback/podcast.py
from __future__ import annotations

import re

SPEAKERS: dict[str, tuple[str, str]] = {
    "educational": ("Professor", "Student"),
    "storytelling": ("Narrator", "Character"),
    "interview": ("Interviewer", "Expert"),
    "conversational": ("Host", "Guest"),
}

_SENTENCE_END = re.compile(r"[.!?]$")


def speakers_for(style: str) -> tuple[str, str]:
    return SPEAKERS.get(style, SPEAKERS["conversational"])


def split_by_sentences(text: str, limit: int) -> str:
    """
    Take words until at least `limit` characters are consumed and the last
    word ends a sentence. Returns the whole text if that never happens.
    """
    taken: list[str] = []
    count = 0
    for word in text.split(" "):
        taken.append(word)
        count += len(word) + 1
        if count >= limit and _SENTENCE_END.search(word):
            break
    return " ".join(taken)


def create_fallback_podcast_script(text: str, style: str = "conversational") -> str:
    """Template HOST/GUEST script stitched around slices of the source text."""
    # Speaker labels stay HOST/GUEST so TTS turn prefixes keep working.
    host, guest = speakers_for(style)
    return "\n\n".join(
        [
            f"HOST: Welcome to today's episode. I'm your {host.lower()}, joined by our "
            f"{guest.lower()}. We're exploring an important topic that plays a crucial "
            "role in computing.",
            "GUEST: Glad to be here. This is a topic that deserves attention.",
            "HOST: Let's get started with some background.\n" + split_by_sentences(text, 200),
            "GUEST: That sets the stage well. Can you expand on the key aspects?",
            "HOST: Certainly. Here's a breakdown of the main concepts:\n"
            + split_by_sentences(text[200:], 200),
            "GUEST: That's insightful. How does this apply in real-world scenarios?",
            "HOST: Good question. Here's how it plays out in practice:\n"
            + split_by_sentences(text[400:], 200),
            "GUEST: That makes sense. Are there any challenges or limitations?",
            "HOST: Absolutely. One major consideration is:\n" + split_by_sentences(text[600:], 200),
            "GUEST: That's valuable to know. Thanks for the detailed explanation.",
            "HOST: My pleasure. And thanks to our listeners for joining us. "
            "Stay tuned for the next discussion.",
        ]
    )
