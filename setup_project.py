"""
LifeSweeper Project Setup Script

This script automates the first-time setup for developers.
Run this script after cloning the repository to set up the project.

Usage:
    python setup_project.py
    python setup_project.py --name Ada   # also set the player name

Author: LifeSweeper Team
"""

import argparse
import os
import sys
import subprocess
from pathlib import Path


def run_command(command: list[str], description: str) -> bool:
    """
    Run a command and print its status.

    Args:
        command: Command to run as a list of strings.
        description: Human-readable description of the command.

    Returns:
        True if command succeeded, False otherwise.
    """
    print(f"\n{'='*60}")
    print(f"📌 {description}")
    print(f"{'='*60}")
    print(f"Running: {' '.join(command)}\n")

    try:
        subprocess.run(command, check=True, text=True)
        print(f"✅ {description} - SUCCESS")
        return True
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} - FAILED (exit code: {e.returncode})")
        return False
    except FileNotFoundError:
        print(f"❌ {description} - FAILED (command not found)")
        return False


def main(argv: list[str] | None = None) -> int:
    """Main setup function."""
    parser = argparse.ArgumentParser(description="Set up a LifeSweeper development environment.")
    parser.add_argument('--name', help="Player name to store after migrating.")
    args = parser.parse_args(argv)

    print("""
    ╔═══════════════════════════════════════════════════════════════╗
    ║                                                               ║
    ║   💣 LifeSweeper Project Setup                                ║
    ║                                                               ║
    ╚═══════════════════════════════════════════════════════════════╝
    """)

    # Get the directory where this script is located
    script_dir = Path(__file__).resolve().parent
    os.chdir(script_dir)
    print(f"Working directory: {script_dir}\n")

    python_exe = sys.executable

    # Step 1: Install the project with its test extras
    if not run_command(
        [python_exe, '-m', 'pip', 'install', '-e', '.[test]'],
        "Installing Python dependencies"
    ):
        print("\n⚠️  Failed to install dependencies. Continuing anyway...")

    # Step 2: Apply migrations
    if not run_command(
        [python_exe, 'manage.py', 'migrate'],
        "Applying database migrations"
    ):
        print("\n❌ Migration failed. Cannot continue.")
        return 1

    # Step 3: Player name (optional)
    if args.name and not run_command(
        [python_exe, 'manage.py', 'sweeper_stats', '--name', args.name],
        "Setting player name"
    ):
        return 1

    print("""
    ✅ Setup complete!

    Start the development server with:

        python manage.py runserver

    The game API lives under http://127.0.0.1:8000/api/
    """)

    return 0


if __name__ == '__main__':
    sys.exit(main())
