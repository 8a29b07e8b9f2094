from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for verb tests")
class PrimitiveVerbTests(unittest.TestCase):
    def setUp(self) -> None:
        from apl_jax.verbs import default_registry

        self.registry = default_registry()

    def _dyad(self, symbol: str, left, right):
        return self.registry.dyad(symbol)(left, right)

    def _monad(self, symbol: str, right):
        return self.registry.monad(symbol)(right)

    def test_subtract_broadcasts_row_over_matrix(self) -> None:
        from apl_jax.arrays import ShapedArray

        matrix = ShapedArray.from_values([[1, 2, 3], [4, 5, 6]])
        row = ShapedArray.from_values([10, 20, 30])
        out = self._dyad("-", matrix, row)
        self.assertEqual(out.tolist(), [[-9, -18, -27], [-6, -15, -24]])
        # Operands are untouched values.
        self.assertEqual(matrix.tolist(), [[1, 2, 3], [4, 5, 6]])
        self.assertEqual(row.tolist(), [10, 20, 30])

    def test_add_of_booleans_counts_into_integers(self) -> None:
        from apl_jax.arrays import Kind, ShapedArray

        out = self._dyad("+", ShapedArray.from_values([True, True]), ShapedArray.from_values([True, False]))
        self.assertIs(out.kind, Kind.INTEGER)
        self.assertEqual(out.tolist(), [2, 1])

    def test_multiply_keeps_booleans_boolean(self) -> None:
        from apl_jax.arrays import Kind, ShapedArray
        from apl_jax.values import Atom

        out = self._dyad("*", ShapedArray.from_values([True, False]), Atom.of(True))
        self.assertIs(out.kind, Kind.BOOLEAN)
        self.assertEqual(out.tolist(), [True, False])
        self.assertEqual(self._dyad("*", Atom.of(6), Atom.of(7)).item(), 42)
        self.assertEqual(self._dyad("*", Atom.of(1.5), Atom.of(2)).item(), 3.0)

    def test_divide_always_produces_decimals(self) -> None:
        from apl_jax.arrays import Kind, ShapedArray
        from apl_jax.values import Atom

        half = self._dyad("%", Atom.of(7), Atom.of(2))
        self.assertIs(half.kind, Kind.DECIMAL)
        self.assertEqual(half.item(), 3.5)

        out = self._dyad("%", ShapedArray.from_values([True, False]), Atom.of(4))
        self.assertIs(out.kind, Kind.DECIMAL)
        self.assertEqual(out.tolist(), [0.25, 0.0])

        self.assertTrue(math.isinf(self._dyad("%", Atom.of(1), Atom.of(0)).item()))

    def test_equality_yields_booleans_after_promotion(self) -> None:
        from apl_jax.arrays import Kind, ShapedArray

        out = self._dyad("=", ShapedArray.from_values([1, 2, 3]), ShapedArray.from_values([1.0, 5.0, 3.0]))
        self.assertIs(out.kind, Kind.BOOLEAN)
        self.assertEqual(out.tolist(), [True, False, True])

    def test_boolean_and_uses_nonzero_view(self) -> None:
        from apl_jax.arrays import Kind, ShapedArray
        from apl_jax.values import Atom

        out = self._dyad("*.", ShapedArray.from_values([0, 2, 3]), ShapedArray.from_values([1.5, 0.0, math.inf]))
        self.assertIs(out.kind, Kind.BOOLEAN)
        self.assertEqual(out.tolist(), [False, False, True])

        atom = self._dyad("*.", Atom.of(2), Atom.of(0.5))
        self.assertIs(atom.kind, Kind.BOOLEAN)
        self.assertTrue(atom.item())

    def test_monads_map_elementwise(self) -> None:
        from apl_jax.arrays import Kind, ShapedArray
        from apl_jax.values import Atom

        negated = self._monad("-", ShapedArray.from_values([True, False]))
        self.assertIs(negated.kind, Kind.INTEGER)
        self.assertEqual(negated.tolist(), [-1, 0])
        self.assertEqual(self._monad("-", Atom.of(2.5)).item(), -2.5)

        self.assertEqual(self._monad("%", Atom.of(4)).item(), 0.25)

        signum = self._monad("*", ShapedArray.from_values([-2.5, 0.0, 3.0]))
        self.assertIs(signum.kind, Kind.INTEGER)
        self.assertEqual(signum.tolist(), [-1, 0, 1])

        self.assertEqual(self._monad("|", ShapedArray.from_values([-3, 4])).tolist(), [3, 4])
        self.assertEqual(self._monad("+", Atom.of(9)).item(), 9)

    def test_iota_monad_accepts_atoms_and_lists(self) -> None:
        from apl_jax.arrays import ShapedArray
        from apl_jax.values import Atom

        self.assertEqual(self._monad("i.", Atom.of(4)).tolist(), [0, 1, 2, 3])
        grid = self._monad("i.", ShapedArray.from_values([2, 3]))
        self.assertEqual(grid.shape, (2, 3))
        self.assertEqual(grid.data.tolist(), [0, 1, 2, 3, 4, 5])
        self.assertEqual(self._monad("i.", Atom.of(True)).tolist(), [0])

    def test_iota_monad_rejects_out_of_domain_arguments(self) -> None:
        from apl_jax.arrays import ShapedArray, iota
        from apl_jax.errors import APLDomainError
        from apl_jax.values import Atom

        for bad in (Atom.of(2.5), Atom.of(-1), iota((2, 2))):
            with self.subTest(bad=bad):
                with self.assertRaises(APLDomainError):
                    self._monad("i.", bad)
        with self.assertRaises(APLDomainError):
            self._monad("i.", ShapedArray.from_values([2, -3]))
        with self.assertRaises(APLDomainError):
            self._monad("i.", Atom.of(2**63 - 1))

    def test_left_and_right_identities(self) -> None:
        from apl_jax.values import Atom

        left, right = Atom.of(1), Atom.of(2)
        self.assertIs(self._dyad("[", left, right), left)
        self.assertIs(self._dyad("]", left, right), right)
        self.assertIs(self._monad("]", right), right)

    def test_unknown_verbs_name_symbol_and_arity(self) -> None:
        from apl_jax.errors import APLUnknownVerbError

        with self.assertRaises(APLUnknownVerbError) as ctx:
            self.registry.monad("=")
        self.assertEqual((ctx.exception.symbol, ctx.exception.arity), ("=", "monadic"))

        with self.assertRaises(APLUnknownVerbError) as ctx:
            self.registry.dyad("?")
        self.assertEqual((ctx.exception.symbol, ctx.exception.arity), ("?", "dyadic"))
        self.assertIn("dyadic", str(ctx.exception))

        with self.assertRaises(APLUnknownVerbError):
            self.registry.dyad("i.")


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for verb tests")
class VerbRegistryTests(unittest.TestCase):
    def test_default_registry_is_built_once_and_read_only(self) -> None:
        from apl_jax.verbs import default_registry

        registry = default_registry()
        self.assertIs(registry, default_registry())
        self.assertTrue({"+", "-", "*", "%", "=", "*.", "i."} <= set(registry))
        with self.assertRaises(TypeError):
            registry["+"] = None  # type: ignore[index]

    def test_duplicate_symbols_are_rejected(self) -> None:
        from apl_jax.verbs import Verb, VerbRegistry

        with self.assertRaises(ValueError):
            VerbRegistry([Verb("+"), Verb("+")])

    def test_custom_dyad_from_three_kernels_gets_promotion_and_agreement(self) -> None:
        import jax.numpy as jnp

        from apl_jax.arrays import Kind, ShapedArray
        from apl_jax.values import Atom
        from apl_jax.verbs import Verb, VerbRegistry, dyadic

        registry = VerbRegistry([Verb(">.", dyad=dyadic(jnp.logical_or, jnp.maximum, jnp.maximum))])
        out = registry.dyad(">.")(ShapedArray.from_values([True, False, True]), Atom.of(0.5))
        self.assertIs(out.kind, Kind.DECIMAL)
        self.assertEqual(out.tolist(), [1.0, 0.5, 1.0])
        self.assertEqual(len(registry), 1)


if __name__ == "__main__":
    unittest.main()
