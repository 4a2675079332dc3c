"""
python -m eventpass auth <cmd>  : login, logout, OTP and password reset
python -m eventpass <cmd>       : API operations
"""

import sys

HELP_FLAGS = ("-h", "--help")


def usage() -> str:
    from .auth import _DISPATCH as auth_commands
    from .client import _DISPATCH as api_commands

    return "\n".join(
        [
            "Usage: eventpass [auth] <command> [options]",
            "",
            "Auth commands: " + ", ".join(sorted(auth_commands)),
            "API commands:  " + ", ".join(sorted(api_commands)),
            "",
            "Run 'eventpass [auth] <command> --help' for command options.",
        ]
    )


def main() -> None:
    args = sys.argv[1:]
    if not args:
        print(usage(), file=sys.stderr)
        sys.exit(1)

    if args[0] in HELP_FLAGS:
        print(usage())
        return

    if args[0] == "auth":
        sys.argv = [sys.argv[0], *args[1:]]
        from .auth import main as auth_main

        auth_main()
        return

    from .client import main as client_main

    client_main()


if __name__ == "__main__":
    main()
