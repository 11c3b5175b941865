"""Main entry point for python -m nspawnc."""

from nspawnc.cli.main import main


if __name__ == "__main__":
    main()
