import unittest

from merge2048.controls import SWIPE_THRESHOLD, classify_swipe, direction_for_key


class TestKeyBindings(unittest.TestCase):

    def test_arrow_names(self):
        self.assertEqual(direction_for_key('ArrowUp'), 'up')
        self.assertEqual(direction_for_key('ArrowRight'), 'right')
        self.assertEqual(direction_for_key('ArrowDown'), 'down')
        self.assertEqual(direction_for_key('ArrowLeft'), 'left')

    def test_terminal_escape_sequences(self):
        self.assertEqual(direction_for_key('\x1b[A'), 'up')
        self.assertEqual(direction_for_key('\x1b[B'), 'down')
        self.assertEqual(direction_for_key('\x1b[C'), 'right')
        self.assertEqual(direction_for_key('\x1b[D'), 'left')

    def test_wasd_any_case(self):
        for key, expected in [('w', 'up'), ('A', 'left'), ('s', 'down'), ('D', 'right')]:
            self.assertEqual(direction_for_key(key), expected)

    def test_unbound_keys(self):
        self.assertIsNone(direction_for_key('x'))
        self.assertIsNone(direction_for_key('Enter'))
        self.assertIsNone(direction_for_key(''))


class TestSwipe(unittest.TestCase):

    def test_horizontal(self):
        self.assertEqual(classify_swipe(80, 10), 'right')
        self.assertEqual(classify_swipe(-80, 30), 'left')

    def test_vertical(self):
        self.assertEqual(classify_swipe(5, 60), 'down')
        self.assertEqual(classify_swipe(-20, -60), 'up')

    def test_short_gesture_ignored(self):
        self.assertIsNone(classify_swipe(SWIPE_THRESHOLD - 1, 0))
        self.assertEqual(classify_swipe(SWIPE_THRESHOLD, 0), 'right')

    def test_tie_is_vertical(self):
        self.assertEqual(classify_swipe(40, -40), 'up')

    def test_custom_threshold(self):
        self.assertIsNone(classify_swipe(50, 0, threshold=100))


if __name__ == "__main__":
    unittest.main()
