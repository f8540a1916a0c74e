"""Allow `python -m vocabtrainer`."""

from __future__ import annotations

from .main import main_entry


def main() -> None:
    """Run the command line interface."""
    main_entry()


if __name__ == "__main__":  # pragma: no cover
    main()
