"""Entry point for ``python -m macos_layouts``."""

from .cli.main import main

if __name__ == "__main__":
    main()
