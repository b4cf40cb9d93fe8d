"""Command implementations, one module per subcommand, each exposing run(args)."""
