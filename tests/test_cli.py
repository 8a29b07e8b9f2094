from __future__ import annotations

import importlib.util
import io
import unittest
from contextlib import redirect_stderr, redirect_stdout


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for cli tests")
class CliTests(unittest.TestCase):
    def _run(self, argv: list[str]) -> tuple[int, str, str]:
        from apl_jax.cli import main

        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_eval_prints_result(self) -> None:
        code, out, err = self._run(["-e", "1 2 + 3"])
        self.assertEqual(code, 0)
        self.assertEqual(out, "4 5\n")
        self.assertEqual(err, "")

    def test_eval_bindings_persist_across_expressions(self) -> None:
        code, out, _ = self._run(["-e", "x =: i. 3", "--eval", "x * 2"])
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), ["0 1 2", "0 2 4"])

    def test_eval_failure_reports_causal_chain(self) -> None:
        code, out, err = self._run(["-e", "1 2 + i. 2 3 4"])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertTrue(err.startswith("error: Dyadic '+' failed"))
        self.assertIn("caused by: Incompatible array shapes for dyadic operation: 2 and 2 3 4", err)

    def test_unknown_verb_exit_status(self) -> None:
        code, _, err = self._run(["-e", "1 ? 2"])
        self.assertEqual(code, 1)
        self.assertIn("Unknown dyadic verb '?'", err)

    def test_repl_continues_after_a_failing_line(self) -> None:
        from apl_jax.cli import PROMPT, repl
        from apl_jax.interpreter import Environment
        from apl_jax.verbs import default_registry

        stdin = io.StringIO("x =: 2\n1x\nx * 3\n")
        out, err = io.StringIO(), io.StringIO()
        repl(Environment(), default_registry(), stdin=stdin, out=out, err=err)

        self.assertEqual(out.getvalue(), f"{PROMPT}2\n{PROMPT}{PROMPT}6\n{PROMPT}\n")
        self.assertIn("error: Failed to parse '1x' as a number", err.getvalue())
        self.assertIn("caused by: invalid numeral syntax '1x'", err.getvalue())


    def test_repl_survives_oversized_allocation(self) -> None:
        from apl_jax.cli import PROMPT, repl
        from apl_jax.interpreter import Environment
        from apl_jax.verbs import default_registry

        stdin = io.StringIO("i. 3000000000\ni. 9223372036854775807\n1 + 1\n")
        out, err = io.StringIO(), io.StringIO()
        repl(Environment(), default_registry(), stdin=stdin, out=out, err=err)

        self.assertEqual(out.getvalue(), f"{PROMPT}{PROMPT}{PROMPT}2\n{PROMPT}\n")
        lines = err.getvalue().splitlines()
        self.assertEqual([line for line in lines if line.startswith("error:")], ["error: Monadic 'i.' failed at index 0"] * 2)
        self.assertTrue(any("exceeds the limit" in line for line in lines))


if __name__ == "__main__":
    unittest.main()
