"""
Check that the packages api-versioning depends on are importable.

Usage:
  python scripts/check_deps.py runtime
  python scripts/check_deps.py test

runtime: required deps must exist, exit nonzero if missing
test: test/dev tooling; print warnings if missing
"""

import importlib
import sys

RUNTIME = [
    "fastapi",
    "starlette",
    "pydantic",
    "pydantic_settings",
    "structlog",
    "cachetools",
]

TEST = [
    "pytest",
    "pytest_asyncio",
    "httpx",
]

OPTIONAL = ["pytest_cov", "ruff", "black", "mypy"]


def check(mods: list[str], strict: bool) -> int:
    ok = True
    for m in mods:
        try:
            module = importlib.import_module(m)
            version = getattr(module, "__version__", "")
            print(f"✓ {m} {version}".rstrip())
        except Exception as e:
            ok = False
            msg = f"Missing or failing import: {m}: {type(e).__name__}: {e}"
            if strict:
                print(msg)
            else:
                print(f"! {msg}")
    return 0 if ok or not strict else 1


def main() -> int:
    if len(sys.argv) < 2 or sys.argv[1] not in {"runtime", "test"}:
        print("Usage: python scripts/check_deps.py [runtime|test]")
        return 2

    if sys.argv[1] == "runtime":
        return check(RUNTIME, strict=True)

    _ = check(TEST, strict=False)
    print("Optional (skipped if missing):")
    _ = check(OPTIONAL, strict=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
