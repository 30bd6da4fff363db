"""CatGPT: the built-in demo assistant. It never calls out to a vendor."""

import random
from typing import Any

from promptify.services.ai.base import BaseAIProvider

GREETING = (
    "Meow! Hello there! I'm CatGPT, your feline AI companion. I can help you test "
    "prompts, brainstorm ideas, write content, or talk through code. What shall we "
    "work on today?"
)

STORY = (
    "Here's a short story for you:\n\n"
    "**The Last Lighthouse**\n\n"
    "Every night for forty years, Mara climbed the one hundred and twelve steps to "
    "light the lamp. Ships no longer needed it; satellites guided them now. But on "
    "the night the grid went dark across the coast, a small fishing boat saw a "
    "single steady light on the cliffs, and turned toward home.\n\n"
    "Want me to continue it, change the genre, or adjust the tone?"
)

CODING = (
    "Let's sort out that code! A few things that help me help you:\n\n"
    "1. **Share the snippet** you're working on\n"
    "2. **Describe the expected behaviour** and what actually happens\n"
    "3. **Include the error message** if there is one\n\n"
    "Meanwhile, a general tip: reproduce the problem in the smallest possible "
    "example first. Half the time the bug reveals itself along the way."
)

MARKETING = (
    "Purr-fect, marketing copy! A reliable structure is **AIDA**:\n\n"
    "- **Attention**: a headline that stops the scroll\n"
    "- **Interest**: a relatable problem your audience has\n"
    "- **Desire**: show how your product changes the outcome\n"
    "- **Action**: one clear call to action\n\n"
    "Tell me about your product and audience and I'll draft a version."
)

EXPLANATION = (
    "Happy to explain! I'll break it down:\n\n"
    "**The short version:** start from the core idea and build outward.\n\n"
    "**The longer version:** every complex topic has a few key concepts underneath. "
    "Once those click, the details fall into place.\n\n"
    "Which part would you like me to go deeper on?"
)

CREATIVE = (
    "Let's get creative! Try the **SCAMPER** technique:\n\n"
    "- **S**ubstitute a component\n"
    "- **C**ombine it with something else\n"
    "- **A**dapt an idea from another field\n"
    "- **M**odify or magnify a feature\n"
    "- **P**ut it to another use\n"
    "- **E**liminate something\n"
    "- **R**everse or rearrange it\n\n"
    "Pick a letter and I'll generate ideas with you."
)

ANALYSIS = (
    "Time to put on my analytical whiskers. A simple framework:\n\n"
    "1. **Define the question** you want the data to answer\n"
    "2. **Collect and clean** the relevant data\n"
    "3. **Explore** for patterns, outliers and trends\n"
    "4. **Conclude** with findings tied back to the question\n\n"
    "Share your data or research topic and we'll work through it."
)

GENERIC = [
    "Interesting prompt! Here's my take: being specific about the outcome you want "
    "is the fastest way to a better answer.",
    "Meow, good question! I'd approach it by first clarifying the goal, then listing "
    "the constraints, then exploring a few options.",
    "Thanks for sharing that. There are a couple of angles worth considering here, "
    "and the best one depends on your audience.",
    "I like where this is going. Adding an example of the output you want would make "
    "this prompt even stronger.",
    "Let me think about that... The key trade-off is depth versus brevity. Tell me "
    "which matters more and I'll tailor the answer.",
]

CONTEXT_QUESTIONS = [
    "\n\nCould you tell me a bit more about what you're trying to achieve?",
    "\n\nWhat's the context you'll be using this in?",
    "\n\nWould you like a more detailed answer or a quick summary?",
]

KEYWORD_RESPONSES = [
    (("hello", "hi", "hey"), None, GREETING),
    (("write",), ("story", "novel", "fiction"), STORY),
    (("code", "programming", "javascript", "python", "react"), None, CODING),
    (("marketing", "copy", "advertisement", "sales"), None, MARKETING),
    (("explain", "what is", "how does"), None, EXPLANATION),
    (("creative", "brainstorm", "ideas"), None, CREATIVE),
    (("analyze", "data", "research"), None, ANALYSIS),
]


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def pick_response(message: str) -> str:
    """Keyword match against the lowercased message; first rule wins."""
    text = message.lower()
    words = set(text.replace("?", " ").replace("!", " ").replace(",", " ").replace(".", " ").split())
    for keywords, also_required, response in KEYWORD_RESPONSES:
        if response is GREETING:
            if words & set(keywords):
                return response
            continue
        if _matches(text, keywords) and (also_required is None or _matches(text, also_required)):
            return response
    return random.choice(GENERIC) + random.choice(CONTEXT_QUESTIONS)


class CatGPTProvider(BaseAIProvider):
    name = "catgpt"
    display_name = "CatGPT"
    description = "CatGPT - a playful demo assistant that works without an API key"
    default_model = "catgpt-3.5-turbo"
    static_models = ("catgpt-3.5-turbo", "catgpt-4", "catgpt-4-turbo")
    mock_delay = (1.0, 3.0)
    session_prefix = "session"

    @property
    def is_mock_mode(self) -> bool:
        return True

    def mock_response(self, message: str) -> str:
        return pick_response(message)

    async def validate_api_key(self) -> dict[str, Any]:
        return {"valid": True, "mock_mode": True}
