"""Package entry point for ``python -m disfluency_analyzer``.

Delegates to the CLI's main() function.
"""

from disfluency_analyzer.cli import main

if __name__ == "__main__":
    main()
