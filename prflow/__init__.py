"""Create pull requests against a remote repository from a local working copy."""

__version__ = "0.1.0"
