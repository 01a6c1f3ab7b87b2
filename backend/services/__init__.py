"""Services for the Training-aware Chat Relay."""
from .errors import ValidationError, PersistenceError
from .session_store import SessionStore
from .training_corpus import TrainingCorpus
from .prompt_assembler import PromptAssembler, AssembledRequest
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError

__all__ = ['ValidationError', 'PersistenceError', 'SessionStore', 'TrainingCorpus', 'PromptAssembler', 'AssembledRequest', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError']
