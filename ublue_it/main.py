"""
ublue-it — CLI entrypoint.

Usage:
    ublue-it --help
    ublue-it rebase --desktop-env kde --has-nvidia --nvidia-vers 525
    ublue-it resolve --desktop-env xfce
    ublue-it history
    ublue-it detect
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path

import click

from ublue_it import __version__
from ublue_it.core.observability.logging_config import resolve_level, setup_logging_from_env

_DESKTOP_HELP = (
    "Choices are Bluefin (Silverblue for Ubuntu ex-pats), Gnome (default), "
    "KDE, LXQt, Mate or XFCE. KDE uses Kinoite as the base image instead "
    "of Silverblue."
)


@click.group()
@click.version_option(version=__version__, prog_name="ublue-it")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ublue-it — rebase Fedora Silverblue and Kinoite onto uBlue images."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def selection_options(f: Callable[..., None]) -> Callable[..., None]:
    """Flags shared by ``rebase`` and ``resolve``. Unset flags come from config."""
    f = click.option(
        "--release",
        default=None,
        help="Fedora release to target (default: read from /etc/fedora-release).",
    )(f)
    f = click.option(
        "--nvidia-vers",
        "nvidia_vers",
        default=None,
        help="NVIDIA driver version: 470, 525, current or latest (default: latest).",
    )(f)
    f = click.option(
        "--has-nvidia/--no-nvidia",
        "-n",
        "has_nvidia",
        default=None,
        help="Use the NVIDIA image for a system with an NVIDIA GPU.",
    )(f)
    f = click.option(
        "--desktop-env",
        "-d",
        "desktop_env",
        default=None,
        help=_DESKTOP_HELP,
    )(f)
    return f


# ── rebase ──────────────────────────────────────────────────────────


@cli.command()
@selection_options
@click.option(
    "--auto-reboot/--no-auto-reboot",
    "-r",
    "auto_reboot",
    default=None,
    help="Reboot automatically when done (default: reboot manually).",
)
@click.option("--dry-run", is_flag=True, help="Check each step but change nothing.")
@click.option("--mock", is_flag=True, help="Run against a simulated host.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def rebase(
    ctx: click.Context,
    desktop_env: str | None,
    has_nvidia: bool | None,
    nvidia_vers: str | None,
    release: str | None,
    auto_reboot: bool | None,
    dry_run: bool,
    mock: bool,
    as_json: bool,
) -> None:
    """Rebase this host onto a uBlue image.

    Examples:

        ublue-it rebase

        ublue-it rebase -d kde --has-nvidia --nvidia-vers 525 --auto-reboot

        ublue-it rebase -d xfce --dry-run
    """
    from ublue_it.core.use_cases.rebase import SelectionFlags, run_rebase

    quiet = ctx.obj.get("quiet", False)
    if not as_json and not quiet:
        click.echo("Installing, please be patient...")

    result = run_rebase(
        SelectionFlags(
            desktop_env=desktop_env,
            has_nvidia=has_nvidia,
            nvidia_vers=nvidia_vers,
            auto_reboot=auto_reboot,
        ),
        config_path=ctx.obj.get("config_path"),
        release=release,
        dry_run=dry_run,
        mock_mode=mock,
        capture_output=as_json,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    workflow = result.workflow
    if workflow is None:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    if workflow.reference is not None:
        click.secho(f"\n⚡ {mode_label}{workflow.reference}", fg="cyan", bold=True)

    for name, receipt in workflow.steps.items():
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.ok:
            click.secho(f"   ✓ {name}", fg="green", nl=False)
            click.echo(timing)
            if ctx.obj.get("verbose") and receipt.output:
                for line in receipt.output.split("\n")[:10]:
                    click.echo(f"     │ {line}")
        elif receipt.failed:
            click.secho(f"   ✗ {name}", fg="red", nl=False)
            click.echo(timing)
        else:
            click.secho(f"   ⊘ {name} ", fg="yellow", nl=False)
            click.echo(f"({receipt.output.splitlines()[0] if receipt.output else 'skipped'})")

    click.echo()
    if workflow.ok:
        click.secho("✅ Done", fg="green", bold=True)
    elif workflow.partial:
        click.secho(f"⚠️  {workflow.error}", fg="yellow", bold=True)
    else:
        click.secho(f"❌ {workflow.error}", fg="red", bold=True)

    for action in workflow.manual_actions:
        click.echo(f"   • {action}")

    click.echo()
    if not workflow.ok:
        sys.exit(1)


# ── resolve ─────────────────────────────────────────────────────────


@cli.command()
@selection_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(
    ctx: click.Context,
    desktop_env: str | None,
    has_nvidia: bool | None,
    nvidia_vers: str | None,
    release: str | None,
    as_json: bool,
) -> None:
    """Print the image reference a rebase would use. Changes nothing."""
    from ublue_it.core.use_cases.rebase import SelectionFlags, resolve_image

    result = resolve_image(
        SelectionFlags(desktop_env=desktop_env, has_nvidia=has_nvidia, nvidia_vers=nvidia_vers),
        config_path=ctx.obj.get("config_path"),
        release=release,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.echo(str(result.reference))


# ── history ─────────────────────────────────────────────────────────


@cli.command()
@click.option("-n", "--limit", default=10, show_default=True, help="Number of runs to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int, as_json: bool) -> None:
    """Show recent rebase runs from the audit ledger."""
    from ublue_it.core.config.loader import ConfigError, load_config
    from ublue_it.core.persistence.audit import AuditLedger

    try:
        config = load_config(ctx.obj.get("config_path"))
        entries = AuditLedger(config.audit_path).recent(limit)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    except OSError as e:
        click.secho(f"❌ Cannot read {config.audit_path}: {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No rebase runs recorded yet.")
        return

    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}
    for entry in reversed(entries):
        mode = " [dry-run]" if entry.dry_run else " [mock]" if entry.mock else ""
        click.secho(f"{entry.timestamp} ", fg="white", nl=False)
        click.secho(f"{entry.status:<8}", fg=status_color.get(entry.status, "white"), nl=False)
        click.echo(f"{entry.reference or entry.desktop_env}{mode}")
        if entry.error:
            click.echo(f"   {entry.error}")


# ── detect ──────────────────────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show the installed release and GPU, with suggested rebase flags."""
    from ublue_it.core.config.loader import ConfigError, load_config
    from ublue_it.core.errors import VersionUnavailable
    from ublue_it.core.services.hardware import detect_gpus
    from ublue_it.core.services.os_release import current_os_release
    from ublue_it.core.use_cases.rebase import default_registry

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    release: str | None
    release_error: str | None = None
    try:
        release = current_os_release(config.release_file)
    except VersionUnavailable as e:
        release, release_error = None, str(e)

    gpus = detect_gpus()
    adapters = default_registry().adapter_status()
    can_rebase = adapters["shell"]["available"]
    suggested = "ublue-it rebase" + (" --has-nvidia" if gpus["nvidia"] else "")

    if as_json:
        click.echo(json.dumps({
            "release": release,
            "release_error": release_error,
            "gpu": gpus,
            "rpm_ostree": can_rebase,
            "suggested_command": suggested,
        }, indent=2))
        return

    click.secho("\n🔍 Host", fg="cyan", bold=True)
    if release:
        click.echo(f"   Fedora release: {release}")
    else:
        click.secho(f"   Fedora release: unknown ({release_error})", fg="yellow")

    if not gpus["probed"]:
        click.secho("   GPU: unknown (lspci not available)", fg="yellow")
    for gpu in gpus["gpus"]:
        click.echo(f"   GPU: [{gpu['vendor']}] {gpu['model']}")

    if can_rebase:
        click.echo("   rpm-ostree: available")
    else:
        click.secho("   rpm-ostree: not found (not an rpm-ostree host?)", fg="yellow")

    click.echo()
    click.echo(f"   Suggested: {suggested}")
    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
