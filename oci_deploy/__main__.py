"""
oci-deploy is a command line program that calls the oci-deploy library.

Example usage:
  python -m oci_deploy deploy build-plan.yaml --image-repo ghcr.io/example/artifacts
"""

from oci_deploy.tool.oci_deploy import main


if __name__ == "__main__":
    main()
