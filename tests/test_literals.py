from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for literal tests")
class LiteralConstructionTests(unittest.TestCase):
    def test_single_numerals_become_atoms(self) -> None:
        from apl_jax.arrays import Kind
        from apl_jax.literals import parse_atom

        cases = [
            ("42", Kind.INTEGER, 42),
            ("_7", Kind.INTEGER, -7),
            ("2.5", Kind.DECIMAL, 2.5),
            ("1e3", Kind.DECIMAL, 1000.0),
            ("_1.5e_2", Kind.DECIMAL, -0.015),
            ("3.", Kind.DECIMAL, 3.0),
        ]
        for text, kind, value in cases:
            with self.subTest(text=text):
                atom = parse_atom(text)
                self.assertIs(atom.kind, kind)
                self.assertAlmostEqual(atom.item(), value)

    def test_underscore_spells_infinity(self) -> None:
        from apl_jax.literals import parse_atom

        self.assertEqual(parse_atom("_").item(), math.inf)
        self.assertEqual(parse_atom("__").item(), -math.inf)

    def test_invalid_numeral_carries_text_and_cause(self) -> None:
        from apl_jax.errors import APLLiteralError
        from apl_jax.literals import parse_atom

        for text in ("1x", "1_000", "1.2.3", "_1_", "99999999999999999999"):
            with self.subTest(text=text):
                with self.assertRaises(APLLiteralError) as ctx:
                    parse_atom(text)
                self.assertEqual(ctx.exception.text, text)
                self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_fragments_become_rank_one_arrays(self) -> None:
        from apl_jax.arrays import Kind
        from apl_jax.literals import parse_vector

        ints = parse_vector(["1", "2", "3"])
        self.assertEqual(ints.shape, (3,))
        self.assertIs(ints.kind, Kind.INTEGER)
        self.assertEqual(ints.tolist(), [1, 2, 3])

        mixed = parse_vector(["1", "2.5", "_"])
        self.assertIs(mixed.kind, Kind.DECIMAL)
        self.assertEqual(mixed.tolist(), [1.0, 2.5, math.inf])

    def test_bad_fragment_names_the_fragment(self) -> None:
        from apl_jax.errors import APLLiteralError
        from apl_jax.literals import parse_vector

        with self.assertRaises(APLLiteralError) as ctx:
            parse_vector(["1", "2b", "3"])
        self.assertEqual(ctx.exception.text, "2b")

    def test_number_tokens_map_to_atoms_or_lists(self) -> None:
        from apl_jax.arrays import ShapedArray
        from apl_jax.lexer import tokenize
        from apl_jax.literals import number_literal
        from apl_jax.values import Atom

        self.assertIsInstance(number_literal(tokenize("7")[0]), Atom)
        vector = number_literal(tokenize("1 2 3")[0])
        self.assertIsInstance(vector, ShapedArray)
        self.assertEqual(vector.shape, (3,))
        with self.assertRaises(ValueError):
            number_literal(tokenize("x")[0])


if __name__ == "__main__":
    unittest.main()
