"""Templating — kida environment, compiled template cache, view/layout renderer."""
