import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from connectn.interfaces.cli import SimpleCLI

SMALL_ARGS = ["--rows", "4", "--cols", "4", "--win", "3", "--seed", "5"]

# Player 1 completes the bottom row in column 2
POSITION = "0,0,0,0, 0,0,0,0, 0,0,0,2, 1,1,0,2".replace(" ", "")


def run_cli(argv):
    out = io.StringIO()
    with redirect_stdout(out):
        SimpleCLI(argv).run()
    return out.getvalue()


class TestCLI(unittest.TestCase):
    def test_analyze(self):
        output = run_cli(["analyze", "--position", POSITION] + SMALL_ARGS)
        self.assertIn("State: ONGOING", output)
        self.assertIn("Valid moves: [0, 1, 2, 3]", output)
        self.assertIn("Engine choices for player 1", output)
        for name in ("easy", "medium", "hard", "very hard"):
            self.assertIn(f"{name:>9}: column 2", output)

    def test_analyze_reports_win(self):
        position = "0,0,0,0,0,0,0,0,2,2,0,0,1,1,1,0"
        output = run_cli(["analyze", "--position", position] + SMALL_ARGS)
        self.assertIn("State: WIN", output)
        self.assertIn("Winner: 1", output)

    def test_analyze_rejects_bad_position(self):
        output = run_cli(["analyze", "--position", "1,2,3"] + SMALL_ARGS)
        self.assertIn("Error parsing position", output)

    def test_invalid_settings_exit(self):
        with self.assertRaises(SystemExit) as ctx:
            run_cli(["analyze", "--position", POSITION, "--rows", "4", "--cols", "4", "--win", "9"])
        self.assertEqual(ctx.exception.code, 2)

    def test_missing_command_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            run_cli([])
        self.assertEqual(ctx.exception.code, 1)

    def test_benchmark_needs_a_position(self):
        with self.assertRaises(SystemExit) as ctx:
            with redirect_stderr(io.StringIO()):
                run_cli(["benchmark", "--positions", "0"] + SMALL_ARGS)
        self.assertEqual(ctx.exception.code, 2)

    def test_benchmark(self):
        output = run_cli(["benchmark", "--positions", "2", "--difficulty", "easy",
                          "--difficulty", "hard"] + SMALL_ARGS)
        self.assertIn("Benchmarking 2 positions", output)
        self.assertIn("     easy:", output)
        self.assertIn("     hard:", output)


if __name__ == '__main__':
    unittest.main()
