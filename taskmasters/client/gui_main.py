"""Entry point for the PyQt GUI client."""
from .gui.windows import TaskMastersApplication


def main() -> None:
    app = TaskMastersApplication()
    raise SystemExit(app.run())


if __name__ == "__main__":
    main()
