#!/usr/bin/env python3
"""
Evaluation runner for the grin compressor.

This script:
- Runs the pytest suite in tests/ and records each test's outcome
- Compresses a few generated sample corpora and records sizes and ratios
- Writes a JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output PATH] [--sample-kb N]
"""
import os
import sys
import json
import uuid
import random
import platform
import subprocess
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from huffman_service import GrinService  # noqa: E402


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_git_info():
    """Get git commit and branch information, or 'unknown' outside a checkout."""
    git_info = {"git_commit": "unknown", "git_branch": "unknown"}
    commands = {
        "git_commit": ["git", "rev-parse", "HEAD"],
        "git_branch": ["git", "rev-parse", "--abbrev-ref", "HEAD"],
    }
    for key, cmd in commands.items():
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=5, cwd=str(PROJECT_ROOT))
        except (OSError, subprocess.TimeoutExpired):
            continue
        if result.returncode == 0:
            value = result.stdout.strip()
            git_info[key] = value[:8] if key == "git_commit" else value
    return git_info


def get_environment_info():
    """Collect environment information for the report."""
    git_info = get_git_info()

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "architecture": platform.machine(),
        "git_commit": git_info["git_commit"],
        "git_branch": git_info["git_branch"],
    }


def parse_pytest_verbose_output(output):
    """Parse pytest -v output into a list of {nodeid, name, outcome} dicts."""
    tests = []
    statuses = {" PASSED": "passed", " FAILED": "failed", " ERROR": "error", " SKIPPED": "skipped"}

    for line in output.split('\n'):
        line_stripped = line.strip()
        # e.g. tests/test_huffman_core.py::test_codewords_are_prefix_free PASSED
        if '::' not in line_stripped:
            continue
        for status_word, outcome in statuses.items():
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break

    return tests


def run_pytest(tests_dir, timeout=300):
    """Run pytest on tests_dir and summarize the outcome of each test."""
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]
    env = os.environ.copy()
    env["PYTHONPATH"] = str(PROJECT_ROOT)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            env=env,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    tests = parse_pytest_verbose_output(result.stdout)
    summary = {"total": len(tests)}
    for outcome in ("passed", "failed", "error", "skipped"):
        summary[outcome] = sum(1 for t in tests if t["outcome"] == outcome)

    print(f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
          f"{summary['error']} errors, {summary['skipped']} skipped (total: {summary['total']})")
    for test in tests:
        status_icon = {
            "passed": "✅",
            "failed": "❌",
            "error": "💥",
            "skipped": "⏭️"
        }[test["outcome"]]
        print(f"  {status_icon} {test['nodeid']}: {test['outcome']}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": result.stdout[-3000:],
        "stderr": result.stderr[-1000:],
    }


def sample_corpora(size):
    """Build deterministic sample inputs of roughly `size` bytes each."""
    rng = random.Random(0x736)
    words = [b"huffman", b"tree", b"leaf", b"bit", b"stream", b"symbol", b"the", b"a", b"of"]
    english_like = bytearray()
    while len(english_like) < size:
        english_like += rng.choice(words) + b" "

    return {
        "empty": b"",
        "single_byte": b"A" * size,
        "all_bytes": bytes(range(256)) * max(1, size // 256),
        "uniform_random": bytes(rng.getrandbits(8) for _ in range(size)),
        "english_like": bytes(english_like[:size]),
    }


def run_compression_sample(size):
    """Round-trip each sample corpus and record sizes and ratios."""
    print(f"\n{'=' * 60}")
    print("COMPRESSION SAMPLE")
    print(f"{'=' * 60}")

    service = GrinService()
    rows = []
    for name, data in sample_corpora(size).items():
        compressed = service.compress(data)
        stats = service.last_stats
        restored = service.decompress(compressed)
        row = {
            "corpus": name,
            "original_size": stats.original_size,
            "compressed_size": stats.compressed_size,
            "payload_bits": stats.payload_bits,
            "ratio": round(stats.ratio, 4),
            "round_trip": restored == data,
        }
        rows.append(row)
        print(f"  {name:15s} {row['original_size']:>8d} -> {row['compressed_size']:>8d} bytes "
              f"ratio={row['ratio']:.3f} round_trip={'✅' if row['round_trip'] else '❌'}")
    return rows


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / "report.json"


def main():
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the grin test suite and a compression sample")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )
    parser.add_argument(
        "--sample-kb",
        type=int,
        default=16,
        help="Size of each generated sample corpus in KiB (default: 16)"
    )
    args = parser.parse_args()

    run_id = generate_run_id()
    started_at = datetime.now()
    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    test_results = run_pytest(PROJECT_ROOT / "tests")
    compression = run_compression_sample(args.sample_kb * 1024)
    success = test_results["success"] and all(row["round_trip"] for row in compression)

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "environment": get_environment_info(),
        "tests": test_results,
        "compression": compression,
    }

    output_path = Path(args.output) if args.output else generate_output_path()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
