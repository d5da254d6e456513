import subprocess
import sys
from pathlib import Path

from class_builder import hello_class

SCRIPT = Path(__file__).resolve().parents[1] / "class_trace.py"


def _run(*args: str, cwd: Path) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


def test_cli_prints_listing_for_class_file(tmp_path: Path) -> None:
    class_path = tmp_path / "Hello.class"
    class_path.write_bytes(hello_class())

    result = _run(str(class_path), cwd=tmp_path)

    assert result.returncode == 0
    assert result.stdout.startswith("// class version 49.0 (49)\n")
    assert "public class Hello {" in result.stdout
    assert "compiled from" not in result.stdout
    assert result.stdout.endswith("}\n")


def test_cli_debug_flag_and_qualified_name(tmp_path: Path) -> None:
    (tmp_path / "demo").mkdir()
    (tmp_path / "demo" / "Hello.class").write_bytes(hello_class())

    result = _run("-debug", "--classpath", str(tmp_path), "demo.Hello", cwd=tmp_path)

    assert result.returncode == 0
    assert "// compiled from: Hello.java" in result.stdout


def test_cli_usage_error(tmp_path: Path) -> None:
    result = _run(cwd=tmp_path)
    assert result.returncode != 0
    assert result.stdout == ""
    lines = result.stderr.splitlines()
    assert lines == [
        "Prints a disassembled view of the given class.",
        "Usage: class_trace [-debug] <fully qualified class name or class file name>",
    ]

    result = _run("a.B", "c.D", cwd=tmp_path)
    assert result.returncode != 0
    assert len(result.stderr.splitlines()) == 2


def test_cli_reports_missing_class(tmp_path: Path) -> None:
    result = _run("--classpath", str(tmp_path), "demo.Missing", cwd=tmp_path)
    assert result.returncode == 1
    assert result.stdout == ""
    assert result.stderr.startswith("error: class not found")
