"""Cross-cutting helpers: logging setup and the coordination context."""
