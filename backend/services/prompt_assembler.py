"""Builds the completion payload from persona, training examples and history."""
import logging
from dataclasses import dataclass
from typing import Dict, List

from models.conversation import Turn
from services.session_store import SessionStore
from services.training_corpus import TrainingCorpus
from config import CONTEXT_TURNS, MAX_PROMPT_EXAMPLES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssembledRequest:
    """System prompt plus the recent turns sent with it."""
    system_prompt: str
    context_turns: List[Turn]

    def to_messages(self) -> List[Dict[str, str]]:
        """Chat-completion message list: system prompt first, then turns oldest-first."""
        messages = [{"role": "system", "content": self.system_prompt}]
        messages.extend(turn.to_message() for turn in self.context_turns)
        return messages


class PromptAssembler:
    """
    Combines a fixed persona with the most recent training examples and the
    session's recent turns.

    Output depends only on the corpus and session state at call time.
    """

    PERSONA = (
        "You are a helpful AI chatbot assistant for a chat website. "
        "Be friendly, helpful, and conversational."
    )
    EXAMPLES_HEADER = "Here are some examples of how you should respond based on training data:"
    CLOSING = (
        "Always be helpful, accurate, and maintain a friendly tone. "
        "If you don't know something, admit it honestly."
    )

    def __init__(
        self,
        session_store: SessionStore,
        training_corpus: TrainingCorpus,
        context_turns: int = CONTEXT_TURNS,
        max_examples: int = MAX_PROMPT_EXAMPLES
    ):
        self.session_store = session_store
        self.training_corpus = training_corpus
        self.context_turns = context_turns
        self.max_examples = max_examples

    def build_system_prompt(self) -> str:
        """
        Build the system instruction.

        Returns:
            Persona, then (if any) the recent examples as User/Assistant
            pairs in insertion order, then the closing instruction
        """
        prompt = self.PERSONA

        examples = self.training_corpus.recent(self.max_examples)
        if examples:
            prompt += f"\n\n{self.EXAMPLES_HEADER}\n"
            for example in examples:
                prompt += f"\nUser: {example.input}\nAssistant: {example.output}\n"

        prompt += f"\n\n{self.CLOSING}"
        return prompt

    def build_request(self, session_id: str) -> AssembledRequest:
        """
        Assemble the payload for one completion call.

        Args:
            session_id: Session whose recent turns are included

        Returns:
            AssembledRequest with system prompt and context turns
        """
        context = self.session_store.recent(session_id, self.context_turns)
        system_prompt = self.build_system_prompt()

        logger.debug(
            f"Assembled request for session {session_id}: "
            f"{len(context)} turns, {len(system_prompt)} prompt chars"
        )
        return AssembledRequest(system_prompt=system_prompt, context_turns=context)
