"""
Unit tests for API endpoints.
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from api.server import CONFIG_ENV_VAR, ServerState, app, run_server


class TestAPIEndpoints(unittest.TestCase):
    """Test API endpoints functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = TestClient(app)
        self.client.post("/reset")

    def test_root_endpoint(self):
        """Test root endpoint."""
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["name"], "ELLM API")
        self.assertIn("version", data)

    def test_health_endpoint(self):
        """Test health check endpoint."""
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["facts_count"], 0)
        self.assertEqual(data["rules_count"], 0)
        self.assertIn("uptime", data)
        self.assertIn("rss_mb", data["memory_usage"])

    def test_learn_endpoint(self):
        """Test learning facts and rules."""
        response = self.client.post("/learn", json={"text": "Socrates is human. All human are mortal."})
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["results"], [
            "Added fact: socrates is human",
            "Added rule: All human are mortal",
        ])
        self.assertEqual(data["facts_count"], 1)
        self.assertEqual(data["rules_count"], 1)

    def test_learn_reports_unparseable_sentences(self):
        """Test that unparseable sentences are reported, not rejected."""
        response = self.client.post("/learn", json={"text": "Xyzzy plugh."})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["results"], ['Failed to parse: "xyzzy plugh"'])

    def test_learn_validation(self):
        """Test request validation for learning."""
        response = self.client.post("/learn", json={"text": "   "})
        self.assertEqual(response.status_code, 422)

        response = self.client.post("/learn", json={})
        self.assertEqual(response.status_code, 422)

    def test_learn_without_sentences(self):
        """Test text that contains only punctuation."""
        response = self.client.post("/learn", json={"text": "..."})
        self.assertEqual(response.status_code, 400)

        data = response.json()
        self.assertEqual(data["error_code"], "INVALID_REQUEST")
        self.assertIn("timestamp", data)

    def test_query_endpoint(self):
        """Test answering a question."""
        self.client.post("/learn", json={"text": "Socrates is human. All human are mortal."})

        response = self.client.post("/query", json={"question": "Is Socrates mortal?"})
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["query"], "Is Socrates mortal?")
        self.assertEqual(data["parsed_query"], "socrates is mortal")
        self.assertEqual(data["answer"], "Yes")
        self.assertEqual(
            data["explanation"],
            "Direct fact in knowledge base: socrates is human, and all human are mortal"
        )
        self.assertGreaterEqual(data["reasoning_time"], 0.0)

    def test_query_unknown(self):
        """Test a question that cannot be parsed."""
        response = self.client.post("/query", json={"question": "What is love?"})
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["answer"], "Unknown")
        self.assertIsNone(data["parsed_query"])

    def test_query_validation(self):
        """Test request validation for questions."""
        response = self.client.post("/query", json={"question": ""})
        self.assertEqual(response.status_code, 422)

    def test_knowledge_and_reset(self):
        """Test listing and clearing the knowledge base."""
        self.client.post("/learn", json={"text": "Penguins are birds. All birds can fly."})

        response = self.client.get("/knowledge")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "facts": ["penguins is birds"],
            "rules": ["All birds can fly"],
        })

        response = self.client.post("/reset")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"facts": [], "rules": []})

        response = self.client.post("/query", json={"question": "Can penguins fly?"})
        self.assertEqual(response.json()["answer"], "No")

    def test_stats_endpoint(self):
        """Test statistics endpoint."""
        self.client.post("/learn", json={"text": "Socrates is human."})
        self.client.post("/query", json={"question": "Is Socrates human?"})

        response = self.client.get("/performance/stats")
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertGreaterEqual(data["request_count"], 2)
        self.assertIn("error_count", data)
        self.assertIn("average_response_time", data)
        self.assertEqual(data["session_stats"]["facts"], 1)
        self.assertEqual(data["session_stats"]["reasoning"]["deductions"], 1)

    def test_isolated_server_state(self):
        """Test endpoints against a patched server state."""
        state = ServerState()
        state.session.learn("Rex is dog")

        with patch('api.server.server_state', state):
            response = self.client.get("/knowledge")

        self.assertEqual(response.json()["facts"], ["rex is dog"])
        self.assertEqual(state.request_count, 0)


class TestRunServer(unittest.TestCase):
    """Test the server launcher."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.temp_dir.name, "ellm.yaml")
        with open(self.config_path, "w") as f:
            f.write("reasoning:\n  max_depth: 3\n")

    def tearDown(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def test_config_applies_to_imported_state(self):
        """Test that --config reaches a server module that is already loaded."""
        state = ServerState()
        self.assertIsNone(state.session.config.max_depth)

        with patch('api.server.server_state', state), \
                patch('api.server.uvicorn.run') as mock_run, \
                patch.dict(os.environ, {}):
            run_server(port=8123, config_path=self.config_path)
            self.assertEqual(os.environ[CONFIG_ENV_VAR], self.config_path)

        mock_run.assert_called_once()
        self.assertEqual(mock_run.call_args.args[0], "api.server:app")
        self.assertEqual(mock_run.call_args.kwargs["port"], 8123)
        self.assertEqual(state.config_path, self.config_path)
        self.assertEqual(state.session.config.max_depth, 3)
        self.assertEqual(state.session.reasoner.max_depth, 3)

    def test_without_config_keeps_session(self):
        """Test that launching without --config leaves the session alone."""
        state = ServerState()
        session = state.session

        with patch('api.server.server_state', state), \
                patch('api.server.uvicorn.run'):
            run_server()

        self.assertIs(state.session, session)


if __name__ == "__main__":
    unittest.main()
