"""
Entry point for the learning path planner.

Run with:
    python main.py build catalogue.json profile.json -u u1 -s maths -k KS2
    python main.py --help
"""
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from src.cli.pathway import run

if __name__ == "__main__":
    run()
