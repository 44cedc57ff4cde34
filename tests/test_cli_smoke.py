import subprocess
import sys


def test_cli_help() -> None:
    cp = subprocess.run(
        [sys.executable, "-m", "rawdna", "--help"],
        check=True,
        capture_output=True,
        text=True,
    )
    assert "rawdna" in cp.stdout.lower()
    assert "roh" in cp.stdout
    assert "merge" in cp.stdout
