"""Canned replies used when Gemini cannot be reached."""

FALLBACK_RESPONSES = {
    "workout": "Quick workout tip: Try 10 push-ups, 15 squats, 30-sec plank. Repeat 3x! 💪",
    "diet": (
        "Quick nutrition tip: Fill half your plate with veggies, quarter with protein, "
        "quarter with complex carbs! 🥗"
    ),
    "motivation": "You're already winning by asking! 🏆 Every small step counts. Keep going, champion!",
    "default": "I'm having trouble connecting right now. Please try again! 🤖",
}

# Checked in order; the first matching group wins
_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("workout", "exercise"), "workout"),
    (("diet", "nutrition"), "diet"),
    (("motivation",), "motivation"),
]

OFFLINE_SUFFIX = " (Offline mode)"


def select_fallback(message: str | None) -> str:
    """Pick the canned reply for a message by keyword."""
    lowered = (message or "").lower()
    for keywords, key in _KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return FALLBACK_RESPONSES[key]
    return FALLBACK_RESPONSES["default"]


def offline_reply(message: str | None) -> str:
    """Fallback text as sent to the client, marked as offline."""
    return select_fallback(message) + OFFLINE_SUFFIX
