#!/usr/bin/env python3

from pathlib import Path
from subprocess import check_call


def run(*args):
    print(f"\n=== {args[0]} ===")
    repo_dir = Path(__file__).resolve().parent.parent
    check_call(args, cwd=repo_dir)


sources = ["asesheet", "tests", "tools"]
run("black", *sources)
run("isort", *sources)
run("mypy", "asesheet")
run("pytest")
