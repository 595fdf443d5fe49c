import random
import unittest

from immersive_chess.cursor import Direction, direction_for_key, move_cursor
from immersive_chess.squares import Coord, coord_to_square, in_bounds, square_to_coord, world_position


def _reflect(c: Coord, start: Coord) -> Coord:
    return Coord(2 * start.x - c.x, 2 * start.y - c.y)


class SquareTests(unittest.TestCase):
    def test_square_conversion(self):
        self.assertEqual(square_to_coord("e4"), Coord(4, 3))
        self.assertEqual(coord_to_square(Coord(0, 0)), "a1")
        self.assertEqual(coord_to_square(Coord(7, 7)), "h8")
        for name in ("a1", "d5", "h3"):
            self.assertEqual(coord_to_square(square_to_coord(name)), name)

    def test_bad_square(self):
        with self.assertRaises(ValueError):
            square_to_coord("i9")

    def test_world_position_centres_board(self):
        self.assertEqual(world_position(Coord(0, 0)), (-3.5, 0.0, -3.5))
        self.assertEqual(world_position(Coord(7, 7)), (3.5, 0.0, 3.5))


class CursorTests(unittest.TestCase):
    def test_unit_moves(self):
        start = Coord(4, 1)
        self.assertEqual(move_cursor(start, Direction.UP), Coord(4, 2))
        self.assertEqual(move_cursor(start, Direction.DOWN), Coord(4, 0))
        self.assertEqual(move_cursor(start, Direction.LEFT), Coord(3, 1))
        self.assertEqual(move_cursor(start, Direction.RIGHT), Coord(5, 1))

    def test_inverted_flips_both_axes(self):
        start = Coord(4, 6)
        self.assertEqual(move_cursor(start, Direction.UP, inverted=True), Coord(4, 5))
        self.assertEqual(move_cursor(start, Direction.RIGHT, inverted=True), Coord(3, 6))

    def test_clamped_at_edges(self):
        self.assertEqual(move_cursor(Coord(0, 0), Direction.DOWN), Coord(0, 0))
        self.assertEqual(move_cursor(Coord(0, 0), Direction.LEFT), Coord(0, 0))
        self.assertEqual(move_cursor(Coord(7, 7), Direction.UP), Coord(7, 7))
        self.assertEqual(move_cursor(Coord(7, 7), Direction.DOWN, inverted=True), Coord(7, 7))

    def test_random_sequences_stay_in_bounds(self):
        rng = random.Random(7)
        directions = list(Direction)
        for _ in range(50):
            c = Coord(rng.randint(0, 7), rng.randint(0, 7))
            inverted = rng.random() < 0.5
            for _ in range(rng.randint(1, 200)):
                c = move_cursor(c, rng.choice(directions), inverted)
                self.assertTrue(in_bounds(c), c)

    def test_inverted_sequence_is_reflection(self):
        # Away from the edges clamping never kicks in, so the paths mirror exactly.
        rng = random.Random(3)
        start = Coord(3, 4)
        for _ in range(30):
            seq = [rng.choice(list(Direction)) for _ in range(3)]
            a = b = start
            for d in seq:
                a = move_cursor(a, d, inverted=False)
                b = move_cursor(b, d, inverted=True)
            self.assertEqual(b, _reflect(a, start))

    def test_key_bindings(self):
        self.assertIs(direction_for_key("W"), Direction.UP)
        self.assertIs(direction_for_key("a"), Direction.LEFT)
        self.assertIs(direction_for_key("ArrowRight"), Direction.RIGHT)
        self.assertIsNone(direction_for_key("q"))


if __name__ == "__main__":
    unittest.main()
