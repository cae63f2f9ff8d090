"""Command-line entry points for DesignForge."""
