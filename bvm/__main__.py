"""Module entrypoint for running bvm as ``python -m bvm``."""

from __future__ import annotations

from bvm.cli import main


if __name__ == "__main__":
    main()
