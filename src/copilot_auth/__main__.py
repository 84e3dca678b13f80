"""Entry point for 'python -m copilot_auth'."""

from copilot_auth.cli import main

if __name__ == "__main__":
    main()
