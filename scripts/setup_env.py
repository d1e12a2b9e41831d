#!/usr/bin/env python3
"""Interactively generate the .env file

Usage:
    python scripts/setup_env.py

Walks through every setting and writes the answers to .env.
"""
import os

# project root
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")


# (env_key, description, default, required)
CONFIG_ITEMS = [
    # === Storage ===
    ("STORAGE_BACKEND", "Storage backend (sql or memory)", "sql", False),
    ("DATABASE_URL", "Database URL", "sqlite:///data/optica.db", False),

    # === Web API ===
    ("WEB_HOST", "Bind address", "0.0.0.0", False),
    ("WEB_PORT", "Bind port", "8080", False),

    # === Default admin ===
    ("ADMIN_USERNAME", "Admin username", "admin", False),
    ("ADMIN_PASSWORD", "Admin password (change it)", "admin123", True),
    ("ADMIN_NAME", "Admin display name", "Administrador", False),

    # === Logging ===
    ("LOG_LEVEL", "Log level (DEBUG, INFO, WARNING, ERROR)", "INFO", False),
]

SECTION_NAMES = {
    "STORAGE": "# === Storage ===",
    "DATABASE": "# === Storage ===",
    "WEB": "# === Web API ===",
    "ADMIN": "# === Default admin ===",
    "LOG": "# === Logging ===",
}


def build_env(answers):
    """Render ``{key: value}`` answers as .env text, grouped by section."""
    env_lines = [
        "# Optica POS configuration",
        "# generated by scripts/setup_env.py",
    ]
    current_header = None
    for key, _desc, _default, _required in CONFIG_ITEMS:
        section = key.split("_")[0]
        header = SECTION_NAMES.get(section, f"# === {section} ===")
        if header != current_header:
            current_header = header
            env_lines.append("")
            env_lines.append(header)
        env_lines.append(f"{key}={answers[key]}")
    return "\n".join(env_lines) + "\n"


def main():
    print()
    print("=" * 60)
    print("  Optica POS setup")
    print("  Generates the .env file")
    print("=" * 60)
    print()

    if os.path.exists(ENV_FILE):
        print(f"An .env file already exists: {ENV_FILE}")
        choice = input("Overwrite? (y/N): ").strip().lower()
        if choice != "y":
            print("Cancelled.")
            return
        print()

    answers = {}
    for key, desc, default, required in CONFIG_ITEMS:
        req_tag = " [required]" if required else ""
        default_hint = f" (default: {default})" if default else ""
        print(f"{desc}{req_tag}")

        while True:
            value = input(f"  {key}{default_hint}: ").strip()
            if not value:
                value = default
            if required and not value:
                print(f"  {key} is required.")
                continue
            break

        answers[key] = value
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write(build_env(answers))

    print("=" * 60)
    print(f"  Written: {ENV_FILE}")
    print()
    print("  Start the server:")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
