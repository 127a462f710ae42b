import os
import sys
import unittest
from unittest import mock

# Add backend folder to import path so modules import the way app.py imports them
backend_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from app import create_app


class TestCompileEndpoint(unittest.TestCase):
    def setUp(self):
        self.app = create_app({"TESTING": True})
        self.client = self.app.test_client()

    def test_compile(self):
        resp = self.client.post("/compile", json={"code": "int x = 2 + 3;"})
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertEqual(data["tokens"][0], {"lexeme": "int", "kind": "Keyword", "line": 1, "column": 1})
        self.assertEqual(data["tac"], ["t1 = 2 + 3", "x = t1"])
        self.assertEqual(data["optimized_tac"], ["t1 = 5", "x = 5"])
        self.assertEqual(data["errors"], [])
        self.assertEqual(data["symbol_table"], {"x": "int"})

    def test_compile_reports_diagnostics(self):
        data = self.client.post("/compile", json={"code": "int main() {"}).get_json()
        self.assertEqual(data["syntax_errors"][0]["message"], "Unmatched opening brace")
        self.assertEqual(data["syntax_errors"][0]["category"], "structural")
        self.assertEqual(data["errors"], ["Syntax error (line 1, column 12): Unmatched opening brace"])

    def test_compile_huge_literal(self):
        code = "int x = 1" + "0" * 400 + " * 2;"
        resp = self.client.post("/compile", json={"code": code})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["optimized_tac"][-1], "x = t1")

    def test_missing_code(self):
        resp = self.client.post("/compile", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("errors", resp.get_json())

    def test_not_json(self):
        resp = self.client.post("/compile", data="int x;", content_type="text/plain")
        self.assertEqual(resp.status_code, 400)

    def test_wrong_method(self):
        self.assertEqual(self.client.get("/compile").status_code, 405)

    def test_body_too_large(self):
        client = create_app({"TESTING": True, "MAX_CONTENT_LENGTH": 64}).test_client()
        resp = client.post("/compile", json={"code": "int x = 1;\n" * 20})
        self.assertEqual(resp.status_code, 413)
        self.assertEqual(resp.get_json(), {"errors": ["source text too large"]})

    def test_port_from_environment(self):
        with mock.patch.dict(os.environ, {"MINIC_PORT": "8080"}):
            app = create_app({"TESTING": True})
        self.assertEqual(app.config["PORT"], 8080)


class TestPhaseEndpoints(unittest.TestCase):
    def setUp(self):
        self.client = create_app({"TESTING": True}).test_client()

    def test_health(self):
        self.assertEqual(self.client.get("/health").get_json(), {"status": "ok"})

    def test_tokens(self):
        data = self.client.post("/tokens", json={"code": "a @"}).get_json()
        self.assertEqual([t["kind"] for t in data["tokens"]], ["Identifier", "Unknown"])

    def test_syntax(self):
        data = self.client.post("/syntax", json={"code": "int x = 1"}).get_json()
        self.assertEqual(data["errors"][0]["message"], "Missing semicolon")

    def test_semantics(self):
        data = self.client.post("/semantics", json={"code": "int a = 5;\nint a = 6;"}).get_json()
        self.assertEqual([e["line"] for e in data["errors"]], [2])

    def test_tac(self):
        data = self.client.post("/tac", json={"code": "int x = 2 + 3 * 4;"}).get_json()
        self.assertEqual(data["tac"], ["t1 = 3 * 4", "t2 = 2 + t1", "x = t2"])

    def test_optimize(self):
        data = self.client.post("/optimize", json={"tac": ["t1 = 2 + 3", "x = t1"]}).get_json()
        self.assertEqual(data["optimized_tac"], ["t1 = 5", "x = 5"])

    def test_optimize_rejects_non_strings(self):
        resp = self.client.post("/optimize", json={"tac": [1, 2]})
        self.assertEqual(resp.status_code, 400)


if __name__ == '__main__':
    unittest.main()
