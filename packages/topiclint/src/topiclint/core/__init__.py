"""Runtime plumbing shared by the engine and the CLI."""
