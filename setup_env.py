#!/usr/bin/env python3
"""Cross-platform setup script for hoa2pg.

Usage:
    python setup_env.py

Creates a virtual environment, installs dependencies, and verifies the setup.
"""
import os
import subprocess
import sys


def main():
    root = os.path.dirname(os.path.abspath(__file__))
    venv_dir = os.path.join(root, ".venv")

    # Detect platform
    is_windows = sys.platform == "win32"
    if is_windows:
        python = os.path.join(venv_dir, "Scripts", "python.exe")
        pip = os.path.join(venv_dir, "Scripts", "pip.exe")
    else:
        python = os.path.join(venv_dir, "bin", "python")
        pip = os.path.join(venv_dir, "bin", "pip")

    # Step 1: Create venv
    if not os.path.exists(venv_dir):
        print("Creating virtual environment...")
        subprocess.check_call([sys.executable, "-m", "venv", venv_dir])
        print(f"  Created: {venv_dir}")
    else:
        print(f"Virtual environment already exists: {venv_dir}")

    # Step 2: Upgrade pip
    print("\nUpgrading pip...")
    subprocess.check_call([python, "-m", "pip", "install", "--upgrade", "pip"],
                          stdout=subprocess.DEVNULL)

    # Step 3: Install package in editable mode with dev dependencies
    print("Installing hoa2pg with dev dependencies...")
    subprocess.check_call([pip, "install", "-e", f"{root}[dev]"])

    # Step 4: Verify dd.autoref imports
    print("\nVerifying dd.autoref...")
    result = subprocess.run(
        [python, "-c", "import dd.autoref; print('  dd.autoref OK')"],
        capture_output=True, text=True,
    )
    if result.returncode != 0:
        print("  WARNING: dd.autoref import failed!")
        print(f"  {result.stderr.strip()}")
    else:
        print(result.stdout.strip())

    # Step 5: Smoke test -- translate an automaton
    print("\nRunning smoke test (translate arbiter.hoa)...")
    smoke_test = """
import sys
sys.path.insert(0, 'src')
from hoa2pg.hoa_parser import parse_hoa_file
aut = parse_hoa_file('examples/arbiter.hoa')
print(f'  Parsed {aut.num_states} states, {aut.num_aps} APs')
from hoa2pg.game_builder import build_game
game = build_game(aut)
print(f'  Game: {len(game.vertices)} vertices, max id {game.max_id}')
"""
    result = subprocess.run(
        [python, "-c", smoke_test],
        capture_output=True, text=True, cwd=root,
    )
    if result.returncode != 0:
        print("  Smoke test FAILED:")
        print(f"  {result.stderr.strip()}")
        return 1
    else:
        print(result.stdout.strip())

    # Step 6: Success
    print("\n" + "=" * 50)
    print("Setup complete!")
    print("=" * 50)
    if is_windows:
        activate = f".venv\\Scripts\\activate"
    else:
        activate = "source .venv/bin/activate"
    print(f"\nTo activate:  {activate}")
    print(f"To translate: python -m hoa2pg examples/arbiter.hoa")
    print(f"To test:      pytest")
    return 0


if __name__ == "__main__":
    sys.exit(main())
