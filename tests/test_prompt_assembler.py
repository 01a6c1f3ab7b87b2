"""Unit tests for PromptAssembler."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from models.conversation import Turn, USER, ASSISTANT
from services.prompt_assembler import PromptAssembler, AssembledRequest
from services.session_store import SessionStore
from services.training_corpus import TrainingCorpus


class TestPromptAssembler:
    """Test suite for PromptAssembler."""

    @pytest.fixture
    def store(self):
        return SessionStore()

    @pytest.fixture
    def corpus(self, tmp_path):
        corpus = TrainingCorpus(tmp_path / "training.json")
        corpus.load()
        return corpus

    @pytest.fixture
    def assembler(self, store, corpus):
        return PromptAssembler(store, corpus)

    def test_empty_corpus_has_no_example_block(self, assembler):
        """Test that an empty corpus yields persona and closing text only."""
        request = assembler.build_request("s1")

        assert "User:" not in request.system_prompt
        assert "Assistant:" not in request.system_prompt
        assert PromptAssembler.EXAMPLES_HEADER not in request.system_prompt
        assert request.system_prompt == f"{PromptAssembler.PERSONA}\n\n{PromptAssembler.CLOSING}"
        assert request.context_turns == []

    def test_examples_rendered_as_pairs(self, assembler, corpus):
        """Test the layout of the example block."""
        corpus.add("Hi", "Hello! How can I help?")

        prompt = assembler.build_request("s1").system_prompt

        assert prompt == (
            f"{PromptAssembler.PERSONA}\n\n"
            f"{PromptAssembler.EXAMPLES_HEADER}\n"
            "\nUser: Hi\nAssistant: Hello! How can I help?\n"
            f"\n\n{PromptAssembler.CLOSING}"
        )

    def test_only_ten_most_recent_examples(self, assembler, corpus):
        """Test the example window is the newest 10 in insertion order."""
        for i in range(25):
            corpus.add(f"question {i:02d}", f"answer {i:02d}")

        prompt = assembler.build_request("s1").system_prompt

        assert prompt.count("User: ") == 10
        assert prompt.count("Assistant: ") == 10
        for i in range(15):
            assert f"question {i:02d}" not in prompt
        positions = [prompt.index(f"question {i:02d}") for i in range(15, 25)]
        assert positions == sorted(positions)

    def test_fewer_than_ten_examples_all_included(self, assembler, corpus):
        """Test that a small corpus is included whole."""
        for i in range(3):
            corpus.add(f"q{i}", f"a{i}")

        prompt = assembler.build_request("s1").system_prompt
        assert prompt.count("User: ") == 3

    def test_category_does_not_filter(self, assembler, corpus):
        """Test that every category contributes to the prompt."""
        corpus.add("greet", "hi", "greeting")
        corpus.add("help", "sure", "support")

        prompt = assembler.build_request("s1").system_prompt
        assert "User: greet" in prompt
        assert "User: help" in prompt

    def test_context_is_last_ten_turns(self, assembler, store):
        """Test the context window independent of the retention ceiling."""
        for i in range(9):
            store.append("s1", USER, f"q{i}")
            store.append("s1", ASSISTANT, f"a{i}")

        request = assembler.build_request("s1")

        assert len(store.get("s1")) == 18
        assert len(request.context_turns) == 10
        assert request.context_turns[0] == Turn(role=USER, content="q4")
        assert request.context_turns[-1] == Turn(role=ASSISTANT, content="a8")

    def test_build_request_is_deterministic(self, assembler, store, corpus):
        """Test that unchanged state yields identical requests."""
        corpus.add("Hi", "Hello")
        store.append("s1", USER, "How are you?")
        store.append("s1", ASSISTANT, "Great!")

        first = assembler.build_request("s1")
        second = assembler.build_request("s1")

        assert first == second

    def test_build_request_does_not_mutate_state(self, assembler, store, corpus):
        """Test that assembling a prompt is read-only."""
        corpus.add("Hi", "Hello")
        store.append("s1", USER, "Hey")

        assembler.build_request("s1")

        assert corpus.count == 1
        assert len(store.get("s1")) == 1

    def test_garbage_examples_do_not_fail(self, assembler, corpus):
        """Test that odd example text is passed through untouched."""
        corpus.add("<b>{weird}</b>", "%s %d \\n")

        prompt = assembler.build_request("s1").system_prompt
        assert "User: <b>{weird}</b>" in prompt
        assert "Assistant: %s %d \\n" in prompt

    def test_to_messages(self, assembler, store):
        """Test the chat-completion payload shape."""
        store.append("s1", USER, "Hello")

        messages = assembler.build_request("s1").to_messages()

        assert messages[0]["role"] == "system"
        assert messages[1:] == [{"role": "user", "content": "Hello"}]

    def test_assembled_request_to_messages_order(self):
        """Test turns follow the system prompt oldest-first."""
        request = AssembledRequest(
            system_prompt="sys",
            context_turns=[Turn(USER, "a"), Turn(ASSISTANT, "b")]
        )
        assert [m["content"] for m in request.to_messages()] == ["sys", "a", "b"]
