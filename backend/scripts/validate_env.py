"""Validate environment variables for running the quote gateway.

Usage:
    python scripts/validate_env.py

Checks the cache TTL, the root redirect target and the cache backend, and
prints any problems with guidance for fixing them locally or in deployment
secrets. Exits with status 1 when a setting would be ignored or unusable.
"""
import os
import sys
from typing import List, Mapping, Tuple

from quote_gateway.core.config import DEFAULT_CACHE_TTL, normalize_redirect_url, parse_cache_ttl


def check_environment(environ: Mapping[str, str]) -> Tuple[List[str], List[str]]:
    """Return (errors, warnings) for the given environment."""
    errors = []
    warnings = []

    ttl = environ.get("CACHE_TTL")
    if ttl is None:
        warnings.append(f"CACHE_TTL not set; quotes will be cached for {DEFAULT_CACHE_TTL}s.")
    elif parse_cache_ttl(ttl) is None:
        errors.append(f"CACHE_TTL={ttl!r} is not a non-negative integer; the default of {DEFAULT_CACHE_TTL}s would be used.")

    redirect = environ.get("ROOT_REDIRECT_URL")
    if redirect and normalize_redirect_url(redirect) is None:
        errors.append(f"ROOT_REDIRECT_URL={redirect!r} is not an absolute http(s) URL; GET / would return 404.")

    backend = environ.get("CACHE_BACKEND", "memory").strip().lower()
    if backend not in ("memory", "redis"):
        errors.append(f"CACHE_BACKEND={backend!r} is not 'memory' or 'redis'.")
    elif backend == "redis" and not environ.get("REDIS_URL"):
        warnings.append("CACHE_BACKEND=redis but REDIS_URL not set; redis://localhost:6379/0 will be used.")

    if not environ.get("USER_AGENT"):
        warnings.append("USER_AGENT not set; a generic browser user agent will be sent upstream.")

    return errors, warnings


def main() -> int:
    errors, warnings = check_environment(os.environ)

    if errors:
        print("Invalid environment variables:")
        for e in errors:
            print(f" - {e}")
        print("\nFix them in backend/.env or export them in your shell.")
    else:
        print("All gateway environment variables are valid.")

    if warnings:
        print("\nNotes:")
        for w in warnings:
            print(f" - {w}")

    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
