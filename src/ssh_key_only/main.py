"""CLI entry point for ssh-key-only."""

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from ssh_key_only import __version__
from ssh_key_only.config import AppConfig
from ssh_key_only.exceptions import HardenerError
from ssh_key_only.hardener import KeyOnlyHardener
from ssh_key_only.log import configure_logging
from ssh_key_only.types import HardeningReport, RestartOutcome


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="ssh-key-only",
        description="Install public keys and switch sshd to key-only login",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Install the configured keys and harden sshd
  sudo ssh-key-only

  # Extra key, no daemon changes
  ssh-key-only --key "ssh-ed25519 AAAA... me@laptop" --skip-sshd

  # Dry run
  sudo ssh-key-only --dry-run

Environment variables:
  KEYS_AUTHORIZED          - Public key lines (JSON list or one per line)
  KEYS_FILE                - File with one public key per line
  SSHD_CONFIG_PATH         - Daemon config (default /etc/ssh/sshd_config)
  SSHD_NORMALIZE           - Drop stray commented PubkeyAuthentication lines
  SSHD_ENFORCE_PASSWORD_NO - Always write PasswordAuthentication no
  LOG_LEVEL, LOG_FILE      - Logging
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--key",
        action="append",
        default=[],
        metavar="KEY",
        help="Public key line to install (repeatable, adds to configured keys)",
    )

    parser.add_argument(
        "--keys-file",
        type=Path,
        help="File with additional public keys, one per line",
    )

    parser.add_argument(
        "--home",
        type=Path,
        help="Home directory whose .ssh is managed (default: current user)",
    )

    parser.add_argument(
        "--sshd-config",
        type=Path,
        help="Path to the SSH daemon configuration",
    )

    parser.add_argument(
        "--skip-sshd",
        action="store_true",
        help="Only manage authorized_keys",
    )

    parser.add_argument(
        "--no-restart",
        action="store_true",
        help="Edit sshd_config but do not restart the daemon",
    )

    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Remove stray commented PubkeyAuthentication lines",
    )

    parser.add_argument(
        "--enforce-password-no",
        action="store_true",
        help="Write PasswordAuthentication no even when the directive is absent",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate changes without applying them",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration from the environment and apply CLI overrides."""
    config = AppConfig.from_env()

    if args.key:
        extra = [k.strip() for k in args.key if k.strip()]
        config.keys.authorized = list(config.keys.authorized) + extra

    if args.keys_file:
        config.keys.file = args.keys_file

    if args.home:
        config.keys.home = args.home

    if args.sshd_config:
        config.sshd.config_path = args.sshd_config

    if args.no_restart:
        config.sshd.restart = False

    if args.normalize:
        config.sshd.normalize = True

    if args.enforce_password_no:
        config.sshd.enforce_password_no = True

    return config


def print_summary(report: HardeningReport) -> None:
    """Print the human-readable end-of-run summary."""
    print("\n📌 Summary:")
    if report.disabled_lines is None:
        print("  • authorized_keys: not found, sanitation skipped")
    else:
        print(f"  • Invalid lines commented out: {report.disabled_lines}")
    print(f"  • Keys added: {report.keys_added}, already present: {report.keys_skipped}")

    if report.sshd is not None:
        print(f"  • PubkeyAuthentication: {report.sshd.pubkey.value}")
        print(f"  • PasswordAuthentication: {report.sshd.password.value}")

    messages = {
        RestartOutcome.RESTARTED: "SSH service restarted",
        RestartOutcome.NOT_ACTIVE: "SSH service not active, not restarted",
        RestartOutcome.MANUAL_REQUIRED: "⚠️  Restart the SSH service manually",
        RestartOutcome.FAILED: "⚠️  SSH service restart failed, restart it manually",
        RestartOutcome.SKIPPED: "SSH service restart skipped",
    }
    print(f"  • {messages[report.restart]}")
    print(
        "\nBefore closing this session, log in from a new terminal with your key "
        "to confirm access still works."
    )


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """Main entry point for CLI.

    Raises:
        SystemExit: Always exits with appropriate code
    """
    args = parse_args(argv)

    if not sys.platform.startswith("linux"):
        print("Error: This tool only supports Linux systems", file=sys.stderr)
        sys.exit(1)

    log_file = None
    try:
        config = load_config(args)
        log_file = configure_logging(config.logging, verbose=args.verbose, quiet=args.quiet)

        if not args.quiet:
            print("--- SSH key-only setup ---")
            if args.dry_run:
                print("🔍 DRY RUN MODE - No changes will be applied\n")

        hardener = KeyOnlyHardener(config, dry_run=args.dry_run, skip_sshd=args.skip_sshd)
        report = hardener.run()

        if not args.quiet:
            print_summary(report)

        sys.exit(0)

    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user", file=sys.stderr)
        sys.exit(130)

    except HardenerError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"\n❌ Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    finally:
        if log_file is not None:
            log_file.close()


if __name__ == "__main__":
    main()
