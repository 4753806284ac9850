"""Entry point for the Revelry CLI.

Allows ``python -m revelry`` to behave like the ``revelry`` console script.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
