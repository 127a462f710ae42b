import io
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout

# Add backend folder to import path so modules import the way app.py imports them
backend_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from compiler import SAMPLE_PROGRAM, compile_source, format_report, main


class TestCompileSource(unittest.TestCase):
    def setUp(self):
        self.result = compile_source(SAMPLE_PROGRAM)

    def test_sample_program_diagnostics(self):
        self.assertEqual(self.result['syntax_errors'], [])
        self.assertEqual(len(self.result['semantic_errors']), 1)
        self.assertEqual(self.result['semantic_errors'][0].line, 7)
        self.assertEqual(len(self.result['errors']), 1)
        self.assertTrue(self.result['errors'][0].startswith("Semantic error (line 7)"))

    def test_sample_program_code(self):
        self.assertEqual([repr(t) for t in self.result['tac']],
                         ["x = 10", "t1 = 2 * 3", "t2 = x + t1", "y = t2"])
        self.assertEqual([repr(t) for t in self.result['optimized_tac']],
                         ["x = 10", "t1 = 6", "t2 = 16", "y = 16"])

    def test_symbol_table(self):
        self.assertEqual(self.result['symbol_table'], {'x': 'int', 'y': 'int', 'f': 'float'})

    def test_phases_are_independent(self):
        result = compile_source("int main() {\n    int a = 1 +\n")
        self.assertTrue(result['syntax_errors'])
        self.assertEqual(result['tokens'][0].lexeme, 'int')
        self.assertEqual(result['tac'], [])

    def test_report(self):
        report = format_report(self.result)
        self.assertIn("== Optimized code", report)
        self.assertIn("y = 16", report)
        self.assertIn("Syntax is correct", report)


class TestCommandLine(unittest.TestCase):
    def run_main(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            status = main(argv)
        return status, out.getvalue()

    def test_sample_has_errors(self):
        status, output = self.run_main([])
        self.assertEqual(status, 1)
        self.assertIn("Incorrect format specifier", output)

    def test_clean_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".c", delete=False) as f:
            f.write("int main() {\n    int a = 2 * 5;\n    return a;\n}\n")
        try:
            status, output = self.run_main([f.name])
        finally:
            os.unlink(f.name)
        self.assertEqual(status, 0)
        self.assertIn("a = 10", output)


if __name__ == '__main__':
    unittest.main()
