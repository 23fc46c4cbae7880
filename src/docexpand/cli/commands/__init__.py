"""CLI subcommands. Importing a module registers its command on the group."""
