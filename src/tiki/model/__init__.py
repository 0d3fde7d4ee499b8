"""View-side state: identifiers, per-plugin runtime config, layout and header."""
