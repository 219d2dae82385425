"""
oci-deploy stages build artifacts into a Maven repository layout and
publishes them to a repository, a local directory or an OCI registry.
"""

__all__ = [
    "artifact",
    "manifest",
    "collector",
    "destination",
    "layout",
    "staging",
    "oci",
    "publisher",
    "orchestrator",
    "config",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
