"""Prompt construction for primary and follow-up responses. Pure text, no I/O."""

from collections.abc import Sequence

from council.models import ConversationContext, HistoryEntry, Participant

HISTORY_WINDOW = 6
DEFAULT_TOPIC = "general"
DEFAULT_DESCRIPTION = "Open discussion"
DEFAULT_KEY_POINTS = "general discussion"
DEFAULT_MODE = "discussion"
DEFAULT_FOCUS = "adding constructive insight"

_GUIDELINES = """RESPONSE GUIDELINES:
1. Respond in character as {name} with your unique personality
2. Reference your expertise areas when relevant
3. Use your response styles to shape your communication
4. Be helpful, knowledgeable, and focused on economic justice solutions
5. Reference real examples and data when relevant
6. Keep responses conversational but informative (2-4 sentences typically)
7. Occasionally ask follow-up questions to engage the user
8. Build on previous messages in the conversation when appropriate"""


def render_history(history: Sequence[HistoryEntry], window: int = HISTORY_WINDOW) -> str:
    """Last ``window`` entries as ``author: content`` lines; "" for no history."""
    if not history or window <= 0:
        return ""
    return "\n".join(f"{entry.author}: {entry.content}" for entry in list(history)[-window:])


def render_context(context: ConversationContext) -> str:
    key_points = ", ".join(context.key_points) if context.key_points else DEFAULT_KEY_POINTS
    return "\n".join(
        [
            f"Topic: {context.topic or DEFAULT_TOPIC}",
            f"Description: {context.description or DEFAULT_DESCRIPTION}",
            f"Key Points: {key_points}",
            f"Mode: {context.mode or DEFAULT_MODE}",
        ]
    )


class PromptAssembler:
    """Builds the system prompts sent to the provider."""

    def __init__(self, history_window: int = HISTORY_WINDOW) -> None:
        self._history_window = history_window

    def build(
        self,
        participant: Participant,
        context: ConversationContext,
        history: Sequence[HistoryEntry],
    ) -> str:
        sections = [
            f"You are {participant.name}, the {participant.role}, specializing in {participant.specialty}.",
            f"PERSONALITY TRAITS:\n{participant.persona}",
            f"EXPERTISE AREAS:\n{', '.join(participant.expertise)}",
            f"RESPONSE STYLES:\n{', '.join(participant.response_styles)}",
            f"CURRENT DISCUSSION CONTEXT:\n{render_context(context)}",
            f"RECENT CONVERSATION:\n{render_history(history, self._history_window)}",
            _GUIDELINES.format(name=participant.name),
        ]
        return "\n\n".join(sections)

    def build_follow_up(
        self,
        participant: Participant,
        original_message: str,
        first_response: str,
        context: ConversationContext,
        focus: str | None = None,
    ) -> str:
        return (
            f"You are {participant.name}, providing a follow-up comment in The Commons economic justice forum.\n\n"
            f"CURRENT DISCUSSION CONTEXT:\n{render_context(context)}\n\n"
            f'The user said: "{original_message}"\n'
            f'Another participant responded: "{first_response}"\n\n'
            "Provide a brief follow-up or different perspective that adds value to the discussion.\n"
            f"Keep it short (1-2 sentences) and in character as the {participant.role} "
            f"with expertise in {participant.specialty}.\n"
            f"Focus on: {focus or DEFAULT_FOCUS}"
        )
