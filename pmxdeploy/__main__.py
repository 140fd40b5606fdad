"""Entry point for the pmxdeploy CLI."""

import logging
import sys


def _setup_logging(log_file: str) -> None:
    """Send package logs to *log_file*; nothing is logged to the terminal."""
    if not log_file:
        return
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s"
    ))
    root = logging.getLogger("pmxdeploy")
    root.addHandler(handler)
    root.setLevel(logging.INFO)


def main():
    """Main entry point."""
    from rich.console import Console
    from pmxdeploy.command_runner import REQUIRED_TOOLS, check_dependencies
    from pmxdeploy.config import Config, ConfigError

    console = Console()

    # Dependency probe, before any UI is shown
    missing = check_dependencies()
    if missing:
        for tool in missing:
            console.print(f"[bold red]Error:[/bold red] '{tool}' command not found.")
            console.print(f"  {REQUIRED_TOOLS[tool]}")
        sys.exit(1)

    # Load config
    try:
        config = Config.load()
    except ConfigError as e:
        console.print(f"\n[bold red]Configuration Error:[/bold red] {e}")
        console.print(
            "\n[yellow]Fix or remove the config file:[/yellow]"
            "\n  [bold]~/.config/pmxdeploy/config.yaml[/bold]"
        )
        sys.exit(1)

    _setup_logging(config.log_file)

    # Launch the TUI app
    from pmxdeploy.app import PmxDeployApp
    app = PmxDeployApp(config=config)
    outcome = app.run()

    if outcome is None:
        # App closed without reaching an outcome
        if app.deployment_started:
            console.print(
                "Deployment interrupted. The VM may be partially configured.",
                style="red",
            )
            sys.exit(1)
        console.print("VM creation cancelled.")
        sys.exit(0)

    if outcome.transcript:
        for line in outcome.transcript:
            console.print(line, markup=False, highlight=False)
        console.print()
    if outcome.message:
        style = "green" if outcome.exit_code == 0 else "red"
        console.print(outcome.message, style=style, markup=False, highlight=False)
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
