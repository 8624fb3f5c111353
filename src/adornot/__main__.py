from adornot.interfaces.cli.cli import start

raise SystemExit(start())
