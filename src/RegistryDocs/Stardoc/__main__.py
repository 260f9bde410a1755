"""Allow ``python -m RegistryDocs.Stardoc`` to run the CLI."""

from .cli import app

if __name__ == "__main__":  # pragma: no cover
    app()
