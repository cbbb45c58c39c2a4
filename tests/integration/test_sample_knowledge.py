"""
Integration tests for ELLM
Learns the bundled sample knowledge and answers the demo questions
end-to-end through the session and the CLI
"""

import json
import logging
import sys

import pytest

import cli
from cli import SAMPLE_KNOWLEDGE
from reasoning.session import ELLMSession


class TestSampleKnowledge:
    """Test the demo knowledge base end-to-end."""

    def setup_method(self):
        """Set up test fixtures."""
        self.session = ELLMSession()
        self.learned = self.session.learn(SAMPLE_KNOWLEDGE)

    def test_learn_lines(self):
        """Test the result line for every sample sentence."""
        assert self.learned == [
            "Added rule: All humans are mortal",
            "Added fact: socrates is human",
            "Added rule: All birds can fly",
            "Added fact: penguins is birds",
            "Added fact: penguins cannot fly",
            "Added fact: engine part of car",
            "Added fact: car part of transportation system",
            "Added fact: alice likes mathematics",
            "Added fact: bob teaches mathematics",
            "Added rule: IF (bob teaches mathematics AND alice likes mathematics) "
            "THEN (alice likes bob)",
        ]

    def test_prime_assignment(self):
        """Test first-seen prime order across the sample."""
        encoder = self.session.encoder
        assert encoder.prime_of("_variable_") == 2
        assert encoder.prime_of("humans") == 3
        assert encoder.prime_of("mortal") == 5
        assert encoder.prime_of("is") == 7
        assert encoder.prime_of("_x_") == 11
        assert encoder.prime_of("socrates") == 13
        assert encoder.prime_of("teaches") == 73
        assert len(encoder) == 21

    def test_knowledge_summary(self):
        """Test the listing of facts and rules."""
        summary = self.session.knowledge_summary()
        assert summary['facts'] == [
            "socrates is human",
            "penguins is birds",
            "penguins cannot fly",
            "engine part of car",
            "car part of transportation system",
            "alice likes mathematics",
            "bob teaches mathematics",
        ]
        # Decoded conditions take their roles from ascending prime order
        assert summary['rules'] == [
            "All humans are mortal",
            "All birds can fly",
            "IF (mathematics bob teaches AND alice likes mathematics) THEN (alice likes bob)",
        ]

    def test_penguins_can_fly(self):
        """Test the capability rule over a membership fact."""
        result = self.session.query("Can penguins fly?")
        assert result.answer == "Yes"
        assert result.parsed_query == "penguins can fly"
        assert result.explanation == (
            "Direct fact in knowledge base: penguins is birds, and all birds can fly"
        )

    def test_engine_part_of_transportation_system(self):
        """Test transitive "part of"."""
        result = self.session.query("Is the engine part of the transportation system?")
        assert result.answer == "Yes"
        assert result.explanation == (
            "engine part of car, and Direct fact in knowledge base: "
            "car part of transportation system"
        )

    def test_alice_likes_bob(self):
        """Test the conjunctive rule."""
        result = self.session.query("Does Alice like Bob?")
        assert result.answer == "Yes"
        assert result.explanation == (
            "Direct fact in knowledge base: mathematics bob teaches, "
            "Direct fact in knowledge base: alice likes mathematics, "
            "which implies alice likes bob"
        )

    def test_concepts_are_matched_literally(self):
        """Test that "human" and "humans" are different concepts."""
        result = self.session.query("Is Socrates mortal?")
        assert result.answer == "No"
        assert result.explanation == "Could not deduce: socrates is mortal"

    def test_learning_more_enables_new_answers(self):
        """Test adding a bridging fact after the fact."""
        self.session.learn("Socrates is humans.")

        result = self.session.query("Is Socrates mortal?")
        assert result.answer == "Yes"
        assert result.explanation == (
            "Direct fact in knowledge base: socrates is humans, and all humans are mortal"
        )

    def test_unparseable_question(self):
        """Test a question the parser does not understand."""
        assert self.session.query("Why is the sky blue?").answer == "Unknown"


class TestCLI:
    """Test the command-line entry point."""

    def test_ask_json(self, monkeypatch, capsys):
        """Test answering one question as JSON."""
        monkeypatch.setattr(sys, "argv", ["cli.py", "ask", "--sample", "--json", "Can penguins fly?"])
        cli.main()

        output = json.loads(capsys.readouterr().out)
        assert output['answer'] == "Yes"
        assert output['parsed_query'] == "penguins can fly"

    def test_ask_with_text(self, monkeypatch, capsys):
        """Test learning inline text before answering."""
        monkeypatch.setattr(sys, "argv", [
            "cli.py", "ask", "--text", "Rex is dog. All dog are loyal.", "Is Rex loyal?"
        ])
        cli.main()

        output = capsys.readouterr().out
        assert "Answer: Yes" in output
        assert "Parsed: rex is loyal" in output

    def test_ask_with_knowledge_file(self, monkeypatch, capsys, tmp_path):
        """Test learning from a file before answering."""
        knowledge = tmp_path / "facts.txt"
        knowledge.write_text("The wheel is part of the car.\nThe car is part of the fleet.\n")
        monkeypatch.setattr(sys, "argv", [
            "cli.py", "ask", "--knowledge", str(knowledge), "Is the wheel part of the fleet?"
        ])
        cli.main()

        assert "Answer: Yes" in capsys.readouterr().out

    def test_interactive(self, monkeypatch, capsys):
        """Test a short interactive session."""
        commands = iter([
            "learn Socrates is human. All human are mortal.",
            "facts",
            "rules",
            "Is Socrates mortal?",
            "reset",
            "facts",
            "quit",
        ])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))
        monkeypatch.setattr(sys, "argv", ["cli.py", "interactive"])
        cli.main()

        output = capsys.readouterr().out
        assert "Added fact: socrates is human" in output
        assert "- All human are mortal" in output
        assert "Answer: Yes" in output
        assert "Knowledge base cleared." in output
        assert "No facts learned yet." in output
        assert "Goodbye!" in output

    def test_benchmark(self, monkeypatch, caplog):
        """Test the chain benchmark."""
        caplog.set_level(logging.INFO)
        monkeypatch.setattr(sys, "argv", ["cli.py", "benchmark", "--chain-length", "10", "--runs", "2"])
        cli.main()

        assert "chain_length: 10" in caplog.text
        assert "deduced: True" in caplog.text

    def test_no_command(self, monkeypatch):
        """Test that a missing subcommand exits with an error."""
        monkeypatch.setattr(sys, "argv", ["cli.py"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
