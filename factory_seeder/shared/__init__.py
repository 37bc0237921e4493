"""Domain engines shared by the web app and the CLI."""
