"""Command line tool for oci-deploy."""
