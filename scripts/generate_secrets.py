#!/usr/bin/env python3
"""
Generate the secrets the API needs and store them in .env.

Adds, when missing:
- SECRET_KEY
- ENCRYPTION_KEY (encrypts stored third-party API keys)
- POSTGRES_PASSWORD
- FIRST_ADMIN_PASSWORD

If .env exists, only missing secrets are added. Existing values are preserved:
changing ENCRYPTION_KEY makes already stored API keys unreadable.

Usage:
    python scripts/generate_secrets.py

    # Force regenerate all secrets (even existing ones):
    python scripts/generate_secrets.py --force
"""

import argparse
from pathlib import Path
import secrets


def generate_urlsafe_secret(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


def generate_hex_secret(length: int = 32) -> str:
    return secrets.token_hex(length)


def parse_env_file(env_file: Path) -> dict[str, str]:
    """Parse an existing .env file into a dictionary."""
    env_vars: dict[str, str] = {}
    if not env_file.exists():
        return env_vars

    for raw in env_file.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        env_vars[key.strip()] = value.strip()
    return env_vars


def write_env_file(env_file: Path, env_vars: dict[str, str], keys: list[str]) -> None:
    """Rewrite .env in place, keeping comments and unrelated entries."""
    lines: list[str] = []
    written: set[str] = set()

    existing = env_file.read_text().splitlines() if env_file.exists() else []
    for line in existing:
        stripped = line.strip()
        key = stripped.partition("=")[0].strip()
        if stripped and not stripped.startswith("#") and key in keys:
            lines.append(f"{key}={env_vars[key]}")
            written.add(key)
        else:
            lines.append(line)

    missing = [key for key in keys if key not in written]
    if missing:
        if lines and lines[-1] != "":
            lines.append("")
        lines.append("# Generated secrets")
        lines.extend(f"{key}={env_vars[key]}" for key in missing)

    if lines and lines[-1] != "":
        lines.append("")
    env_file.write_text("\n".join(lines))


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate secrets for the API")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate all secrets, even if they already exist",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(__file__).resolve().parent.parent / ".env",
    )
    args = parser.parse_args()

    secret_definitions = {
        "SECRET_KEY": lambda: generate_urlsafe_secret(48),
        "ENCRYPTION_KEY": lambda: generate_hex_secret(16),  # 32 hex chars
        "POSTGRES_PASSWORD": lambda: generate_urlsafe_secret(24),
        "FIRST_ADMIN_PASSWORD": lambda: generate_urlsafe_secret(12),
    }

    existing_vars = parse_env_file(args.env_file)
    updated_vars = dict(existing_vars)
    generated: list[str] = []

    for key, generator in secret_definitions.items():
        if args.force or not existing_vars.get(key):
            updated_vars[key] = generator()
            generated.append(key)

    if not generated:
        print("All secrets already exist in .env. Use --force to regenerate.")
        return

    write_env_file(args.env_file, updated_vars, list(secret_definitions))
    print(f"Updated {args.env_file}")
    for key in generated:
        print(f"  {key}={updated_vars[key][:8]}...")
    if "ENCRYPTION_KEY" in generated and "ENCRYPTION_KEY" in existing_vars:
        print("Warning: ENCRYPTION_KEY changed; re-enter stored API keys in the CMS.")


if __name__ == "__main__":
    main()
